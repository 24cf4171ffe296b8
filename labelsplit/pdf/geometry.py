"""Crop rectangles and output target sizes.

Rectangles use PDF user-space conventions: origin at the bottom-left corner
of the page, y growing upwards, units in points (1/72 inch).  PyMuPDF works
top-left with y growing downwards; :meth:`Rectangle.to_fitz` is the single
place where the two conventions meet.
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from enum import StrEnum

import fitz  # PyMuPDF


class SplitAxis(StrEnum):
    HORIZONTAL = "horizontal"  # label = top half, invoice = bottom half
    VERTICAL = "vertical"      # label = left half, invoice = right half


@dataclass(frozen=True, slots=True)
class Rectangle:
    x: float
    y: float
    width: float
    height: float

    def fits_within(self, page_width: float, page_height: float) -> bool:
        return (
            self.x >= 0
            and self.y >= 0
            and self.width > 0
            and self.height > 0
            and self.x + self.width <= page_width
            and self.y + self.height <= page_height
        )

    def to_fitz(self, page_height: float) -> fitz.Rect:
        """Return the equivalent top-left based ``fitz.Rect``."""
        top = page_height - (self.y + self.height)
        return fitz.Rect(self.x, top, self.x + self.width, top + self.height)

    def as_dict(self) -> dict[str, float]:
        return {"x": self.x, "y": self.y, "width": self.width, "height": self.height}

    @classmethod
    def from_list(cls, values: list[float] | tuple[float, ...]) -> Rectangle:
        x, y, width, height = (float(v) for v in values)
        return cls(x, y, width, height)


@dataclass(frozen=True, slots=True)
class TargetSize:
    width: float
    height: float

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError(
                f"target size must be positive; got {self.width!r}x{self.height!r}"
            )


@dataclass(frozen=True, slots=True)
class RectOverride:
    """Per-request replacement of individual rectangle fields."""

    x: float | None = None
    y: float | None = None
    width: float | None = None
    height: float | None = None

    def is_empty(self) -> bool:
        return self.x is None and self.y is None and self.width is None and self.height is None

    def apply(self, base: Rectangle) -> Rectangle:
        changes = {
            name: value
            for name, value in (
                ("x", self.x),
                ("y", self.y),
                ("width", self.width),
                ("height", self.height),
            )
            if value is not None
        }
        return replace(base, **changes) if changes else base


def half_page(axis: SplitAxis, role: str, page_width: float, page_height: float) -> Rectangle:
    """Return the default half-page rectangle for *role* ("label" or "invoice")."""
    if axis == SplitAxis.HORIZONTAL:
        half = page_height / 2
        y = half if role == "label" else 0.0
        return Rectangle(0.0, y, page_width, half)

    half = page_width / 2
    x = 0.0 if role == "label" else half
    return Rectangle(x, 0.0, half, page_height)
