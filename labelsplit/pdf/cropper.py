"""Crop extractor: copy one source page into an output document, clipped.

The output page's nominal size is the crop rectangle's size, so viewers show
only the cropped region.  When a target size is supplied the page is scaled
uniformly by ``min(target.width / rect.width, target.height / rect.height)``.
The source document is never modified.

Crop rectangles live in the page's unrotated space, so a page carrying
/Rotate is cropped as stored, not as a viewer displays it.
"""
from __future__ import annotations

import fitz  # PyMuPDF

from labelsplit.core.errors import InvalidCropError
from labelsplit.pdf.document import page_size
from labelsplit.pdf.geometry import Rectangle, TargetSize


def validate_rect(rect: Rectangle, page_width: float, page_height: float) -> Rectangle:
    """Return *rect* unchanged, or raise InvalidCropError. Never clamps."""
    if not rect.fits_within(page_width, page_height):
        raise InvalidCropError(rect, page_width, page_height)
    return rect


def scale_for_target(rect: Rectangle, target: TargetSize | None) -> float:
    if target is None:
        return 1.0
    return min(target.width / rect.width, target.height / rect.height)


def extract(
    out_doc: fitz.Document,
    src_doc: fitz.Document,
    page_index: int,
    rect: Rectangle,
    target: TargetSize | None = None,
) -> fitz.Page:
    """Append a cropped copy of ``src_doc[page_index]`` to *out_doc*."""
    src_page = src_doc[page_index]
    page_width, page_height = page_size(src_doc, page_index)
    validate_rect(rect, page_width, page_height)

    scale = scale_for_target(rect, target)
    page = out_doc.new_page(width=rect.width * scale, height=rect.height * scale)
    if not src_page.get_contents():
        # blank source page: nothing to show, the crop stays blank
        return page
    clip = rect.to_fitz(page_height)
    if not src_page.rotation:
        page.show_pdf_page(page.rect, src_doc, page_index, clip=clip, keep_proportion=True)
        return page

    # show_pdf_page clips in displayed space; show an unrotated copy instead
    unrotated = fitz.open()
    try:
        unrotated.insert_pdf(src_doc, from_page=page_index, to_page=page_index)
        unrotated[0].set_rotation(0)
        page.show_pdf_page(page.rect, unrotated, 0, clip=clip, keep_proportion=True)
    finally:
        unrotated.close()
    return page
