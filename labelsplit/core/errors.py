"""Error kinds raised by the split/merge pipeline.

Every error derives from :class:`LabelSplitError` and carries a stable
``kind`` string plus enough context to diagnose the failing input.  The API
layer renders them as ``{"error": kind, "detail": message, ...}``.

Kinds
-----
invalid_crop         : crop rectangle falls outside the source page
unsupported_input    : upload is not a loadable PDF
no_valid_pages       : content-gated split found nothing to emit
page_count_mismatch  : strict pre-split merge got unequal page counts
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from labelsplit.pdf.geometry import Rectangle


class LabelSplitError(Exception):
    """Base class for all pipeline errors."""

    kind: str = "labelsplit_error"
    status_code: int = 400

    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail = detail

    def context(self) -> dict[str, Any]:
        return {}

    def to_dict(self) -> dict[str, Any]:
        return {"error": self.kind, "detail": self.detail, **self.context()}


class InvalidCropError(LabelSplitError):
    kind = "invalid_crop"
    status_code = 422

    def __init__(
        self,
        rect: Rectangle,
        page_width: float,
        page_height: float,
        role: str | None = None,
        page_index: int | None = None,
    ) -> None:
        self.rect = rect
        self.page_width = page_width
        self.page_height = page_height
        self.role = role
        self.page_index = page_index
        where = ""
        if role is not None:
            where += f" {role} crop"
        if page_index is not None:
            where += f" on page {page_index + 1}"
        super().__init__(
            f"Invalid{where} rectangle x={rect.x:g} y={rect.y:g} "
            f"width={rect.width:g} height={rect.height:g}; "
            f"page bounds are {page_width:g}x{page_height:g}"
        )

    def with_location(self, role: str, page_index: int) -> InvalidCropError:
        """Return a copy of this error tagged with the crop role and page."""
        return InvalidCropError(
            self.rect, self.page_width, self.page_height, role=role, page_index=page_index
        )

    def context(self) -> dict[str, Any]:
        return {
            "rect": self.rect.as_dict(),
            "page_width": self.page_width,
            "page_height": self.page_height,
            "role": self.role,
            "page_index": self.page_index,
        }


class UnsupportedInputError(LabelSplitError):
    kind = "unsupported_input"
    status_code = 400


class NoValidPagesError(LabelSplitError):
    kind = "no_valid_pages"
    status_code = 422

    def __init__(self, skipped: list[tuple[int, str]]) -> None:
        self.skipped = list(skipped)
        reasons = "; ".join(f"page {index + 1}: {reason}" for index, reason in self.skipped)
        super().__init__(f"No usable label or invoice pages found ({reasons or 'empty document'})")

    def context(self) -> dict[str, Any]:
        return {
            "skipped": [
                {"page_index": index, "reason": reason} for index, reason in self.skipped
            ]
        }


class PageCountMismatchError(LabelSplitError):
    kind = "page_count_mismatch"
    status_code = 422

    def __init__(self, label_pages: int, invoice_pages: int) -> None:
        self.label_pages = label_pages
        self.invoice_pages = invoice_pages
        super().__init__(
            f"Labels document has {label_pages} pages but invoices document has "
            f"{invoice_pages}; strict merge requires equal counts"
        )

    def context(self) -> dict[str, Any]:
        return {"label_pages": self.label_pages, "invoice_pages": self.invoice_pages}
