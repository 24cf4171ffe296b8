"""Tests for labelsplit/pdf/document.py."""
from __future__ import annotations

import fitz
import pytest

from labelsplit.core.errors import UnsupportedInputError
from labelsplit.pdf.document import open_pdf, page_size, page_text, save_pdf


def test_open_pdf_from_bytes_and_path(make_pdf, tmp_path):
    data = make_pdf([("a", "b"), ("c", "d")])
    path = tmp_path / "in.pdf"
    path.write_bytes(data)

    assert open_pdf(data).page_count == 2
    assert open_pdf(path).page_count == 2
    assert open_pdf(str(path)).page_count == 2


def test_open_pdf_rejects_empty_bytes():
    with pytest.raises(UnsupportedInputError, match="empty"):
        open_pdf(b"")


def test_open_pdf_rejects_password_protected(make_pdf):
    doc = fitz.open(stream=make_pdf([("secret", None)]), filetype="pdf")
    locked = doc.tobytes(encryption=fitz.PDF_ENCRYPT_AES_256, owner_pw="owner", user_pw="user")
    doc.close()

    with pytest.raises(UnsupportedInputError, match="Password"):
        open_pdf(locked)


def test_open_pdf_rejects_missing_file(tmp_path):
    with pytest.raises(UnsupportedInputError):
        open_pdf(tmp_path / "nope.pdf")


def test_page_text_is_lowercased_single_spaced(make_pdf):
    doc = open_pdf(make_pdf([("Tax   INVOICE No 12", "Ordered Through")]))
    assert page_text(doc, 0) == "tax invoice no 12 ordered through"


def test_page_size(make_pdf):
    doc = open_pdf(make_pdf([("a", None)], size=(612, 792)))
    assert page_size(doc, 0) == (612, 792)


def test_page_size_ignores_rotation(make_pdf):
    doc = open_pdf(make_pdf([("a", None)], rotation=90))
    assert doc[0].rect.width == 842
    assert page_size(doc, 0) == (595, 842)


def test_save_pdf_creates_parent_dirs(make_pdf, tmp_path):
    doc = open_pdf(make_pdf([("a", None)]))
    path = save_pdf(doc, tmp_path / "nested" / "out.pdf")
    assert path.is_file()
    assert fitz.open(path).page_count == 1
