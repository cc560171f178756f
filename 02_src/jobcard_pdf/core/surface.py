"""Page surfaces - drawing primitives in bottom-up PDF user space."""

from typing import Protocol

import fitz  # pymupdf

from .styles import Color, ResolvedFont


class PageSurface(Protocol):
    """Protocol for per-page drawing targets.

    All coordinates are PDF user space: origin at the bottom-left
    corner of the page, y growing upward.
    """

    height: float

    def draw_text(
        self, text: str, x: float, baseline: float, font: ResolvedFont, size: float, color: Color
    ) -> None:
        """Draw text with its baseline starting at (x, baseline)."""
        ...

    def draw_line(
        self, x1: float, y1: float, x2: float, y2: float, color: Color, width: float = 1.0
    ) -> None:
        """Stroke a straight line."""
        ...

    def draw_image(self, data: bytes, x: float, y: float, width: float, height: float) -> None:
        """Place image bytes in the box whose bottom-left corner is (x, y)."""
        ...


class PdfPageSurface:
    """PageSurface backed by a PyMuPDF page.

    PyMuPDF measures y downward from the top of the page; every call
    flips the incoming bottom-up coordinates.
    """

    def __init__(self, page: "fitz.Page") -> None:
        """Initialize surface.

        Args:
            page: Target PyMuPDF page
        """
        self.page = page
        self.width = page.rect.width
        self.height = page.rect.height

    def _flip(self, y: float) -> float:
        return self.height - y

    def draw_text(
        self, text: str, x: float, baseline: float, font: ResolvedFont, size: float, color: Color
    ) -> None:
        self.page.insert_text(
            fitz.Point(x, self._flip(baseline)),
            text,
            fontsize=size,
            fontname=font.fontname,
            color=color,
        )

    def draw_line(
        self, x1: float, y1: float, x2: float, y2: float, color: Color, width: float = 1.0
    ) -> None:
        self.page.draw_line(
            fitz.Point(x1, self._flip(y1)),
            fitz.Point(x2, self._flip(y2)),
            color=color,
            width=width,
        )

    def draw_image(self, data: bytes, x: float, y: float, width: float, height: float) -> None:
        rect = fitz.Rect(x, self._flip(y + height), x + width, self._flip(y))
        self.page.insert_image(rect, stream=data, keep_proportion=False)
