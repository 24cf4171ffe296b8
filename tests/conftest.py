from collections.abc import Callable, Sequence

import fitz  # PyMuPDF
import pytest
from fastapi.testclient import TestClient

A4 = (595, 842)

# (top-half text, bottom-half text) per page; None leaves that half blank.
PageTexts = tuple[str | None, str | None]


def build_pdf(
    pages: Sequence[PageTexts],
    size: tuple[float, float] = A4,
    rotation: int = 0,
) -> bytes:
    """Return PDF bytes with one page per entry, text placed in each half.

    Text is placed in unrotated page space before *rotation* is applied.
    """
    width, height = size
    doc = fitz.open()
    for top, bottom in pages:
        page = doc.new_page(width=width, height=height)
        if top:
            page.insert_text((40, height * 0.15), top, fontsize=11)
        if bottom:
            page.insert_text((40, height * 0.85), bottom, fontsize=11)
        if rotation:
            page.set_rotation(rotation)
    data = doc.tobytes()
    doc.close()
    return data


@pytest.fixture
def make_pdf() -> Callable[..., bytes]:
    return build_pdf


@pytest.fixture
def open_pdf_bytes():
    opened: list[fitz.Document] = []

    def _open(data: bytes) -> fitz.Document:
        doc = fitz.open(stream=data, filetype="pdf")
        opened.append(doc)
        return doc

    yield _open
    for doc in opened:
        doc.close()


@pytest.fixture
def client(monkeypatch: pytest.MonkeyPatch, tmp_path) -> TestClient:
    monkeypatch.setenv("OUTPUT_DIR", str(tmp_path / "outputs"))

    from labelsplit.core.settings import get_settings

    get_settings.cache_clear()

    from labelsplit.main import app

    with TestClient(app) as test_client:
        yield test_client

    get_settings.cache_clear()
