"""PDF container I/O and page text extraction (PyMuPDF)."""
from __future__ import annotations

import logging
from pathlib import Path

import fitz  # PyMuPDF

from labelsplit.core.errors import UnsupportedInputError

logger = logging.getLogger(__name__)


def open_pdf(source: bytes | str | Path) -> fitz.Document:
    """Open *source* (raw bytes or a file path) as a PDF document.

    Raises UnsupportedInputError when the input is empty, is not a PDF, is
    password protected, or has no pages.
    """
    try:
        if isinstance(source, bytes):
            if not source:
                raise UnsupportedInputError("Uploaded file is empty")
            doc = fitz.open(stream=source, filetype="pdf")
        else:
            doc = fitz.open(str(source), filetype="pdf")
    except UnsupportedInputError:
        raise
    except Exception as exc:  # noqa: BLE001 - MuPDF raises several unrelated types
        raise UnsupportedInputError(f"Input is not a loadable PDF document: {exc}") from exc

    if not doc.is_pdf:
        doc.close()
        raise UnsupportedInputError("Input is not a PDF document")
    if doc.needs_pass:
        doc.close()
        raise UnsupportedInputError("Password-protected PDFs are not supported")
    if doc.page_count == 0:
        doc.close()
        raise UnsupportedInputError("PDF document has no pages")

    logger.debug("Opened PDF with %d pages", doc.page_count)
    return doc


def page_size(doc: fitz.Document, index: int) -> tuple[float, float]:
    """Return the unrotated (width, height) of a page, ignoring /Rotate."""
    rect = doc[index].cropbox
    return rect.width, rect.height


def page_text(doc: fitz.Document, index: int) -> str:
    """Return the page's words joined by single spaces, lower-cased."""
    words = doc[index].get_text("words")
    return " ".join(w[4] for w in words).lower()


def save_pdf(doc: fitz.Document, path: str | Path) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    doc.save(str(path), garbage=3, deflate=True)
    return path
