"""Page renderer - draws one layout page onto a page surface.

Elements are drawn in list order (painter's algorithm). Coordinates in the
layout are editor coordinates: origin top-left, y downward. They are
converted here into PDF user space (origin bottom-left, y upward) before
reaching the surface.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Tuple

from ..schemas.layout import (
    PAGE_HEIGHT,
    Element,
    ImageElement,
    Page,
    TableElement,
    TextElement,
)
from .images import ImageEmbedError, PreparedImage, PreparedResult, prepare_image
from .placeholders import resolve_placeholders
from .styles import FontResolver, parse_hex_color
from .surface import PageSurface

logger = logging.getLogger(__name__)

UNDERLINE_OFFSET = 2.0
LINE_WIDTH = 1.0
CELL_PADDING = 4.0
LINE_SPACING = 1.2


@dataclass(frozen=True)
class SkippedElement:
    """Element left out of the output, with the reason."""
    page_index: int
    element_id: str
    reason: str


@dataclass
class PageReport:
    """Outcome of rendering one page.

    Attributes:
        page_index: 0-based page position in the document
        drawn: Number of elements drawn
        skipped: Elements that failed and were left out
    """
    page_index: int
    drawn: int = 0
    skipped: List[SkippedElement] = field(default_factory=list)


@dataclass(frozen=True)
class TableGeometry:
    """Effective table box and cell size in points."""
    width: float
    height: float
    cell_width: float
    cell_height: float


def text_origin(
    x: float,
    y: float,
    font_size: float,
    text_width: float,
    align: str = "left",
    page_height: float = PAGE_HEIGHT,
) -> Tuple[float, float]:
    """Draw origin for a line of text.

    Args:
        x: Anchor x from the layout
        y: Top edge of the text from the layout (y downward)
        font_size: Font size in points
        text_width: Measured width of the text
        align: left, center or right
        page_height: Page height in points

    Returns:
        (draw_x, baseline) in PDF user space

    Examples:
        >>> text_origin(100, 50, 12, 40, "right")
        (60, 779.89)
    """
    baseline = round(page_height - y - font_size, 4)
    if align == "center":
        return x - text_width / 2, baseline
    if align == "right":
        return x - text_width, baseline
    return x, baseline


def table_geometry(table: TableElement) -> TableGeometry:
    """Effective table size; an explicit box wins over rows x cell size."""
    rows = max(1, table.rows)
    cols = max(1, table.cols)
    width = table.width if table.width and table.width > 0 else cols * table.cell_width
    height = table.height if table.height and table.height > 0 else rows * table.cell_height
    return TableGeometry(
        width=width,
        height=height,
        cell_width=width / cols,
        cell_height=height / rows,
    )


class PageRenderer:
    """Renders the elements of one page onto a PageSurface."""

    def __init__(
        self,
        surface: PageSurface,
        fonts: FontResolver,
        values: Mapping[str, str],
        page_height: float = PAGE_HEIGHT,
    ) -> None:
        """Initialize page renderer.

        Args:
            surface: Drawing target for this page
            fonts: Font resolver shared by all pages of the document
            values: Placeholder values
            page_height: Page height in points
        """
        self.surface = surface
        self.fonts = fonts
        self.values = values
        self.page_height = page_height

    def render(
        self,
        page: Page,
        page_index: int = 0,
        images: Optional[Dict[int, PreparedResult]] = None,
    ) -> PageReport:
        """Draw every element of a page in order.

        Element failures are logged and reported; they never abort the page.

        Args:
            page: Layout page
            page_index: 0-based page position, for reporting
            images: Pre-decoded images keyed by element position

        Returns:
            PageReport with drawn and skipped elements
        """
        images = images or {}
        report = PageReport(page_index=page_index)

        for position, element in enumerate(page.elements):
            try:
                self._draw(element, images.get(position))
            except (ImageEmbedError, ValueError, RuntimeError) as e:
                logger.warning(
                    f"Page {page_index + 1}: skipping element '{element.id}': {e}"
                )
                report.skipped.append(
                    SkippedElement(page_index=page_index, element_id=element.id, reason=str(e))
                )
                continue
            report.drawn += 1

        logger.debug(
            f"Page {page_index + 1}: drew {report.drawn} elements, "
            f"skipped {len(report.skipped)}"
        )
        return report

    def _draw(self, element: Element, prepared: Optional[PreparedResult]) -> None:
        match element:
            case TextElement():
                self.draw_text(element)
            case ImageElement():
                self.draw_image(element, prepared)
            case TableElement():
                self.draw_table(element)
            case _:
                raise TypeError(f"Unsupported element type: {type(element).__name__}")

    def draw_text(self, element: TextElement) -> None:
        """Draw a text element, one line per newline-separated segment."""
        text = resolve_placeholders(element.text, self.values)
        if not text:
            return

        font = self.fonts.resolve(element.font_family, element.bold, element.italic)
        color = parse_hex_color(element.color)
        size = element.font_size

        for line_number, line in enumerate(text.split("\n")):
            if not line:
                continue
            width = font.text_length(line, size)
            top = element.y + line_number * size * LINE_SPACING
            draw_x, baseline = text_origin(
                element.x, top, size, width, element.align, self.page_height
            )
            self.surface.draw_text(line, draw_x, baseline, font, size, color)

            if element.underline:
                underline_y = baseline - UNDERLINE_OFFSET
                self.surface.draw_line(
                    draw_x, underline_y, draw_x + width, underline_y, color, LINE_WIDTH
                )

    def draw_image(self, element: ImageElement, prepared: Optional[PreparedResult] = None) -> None:
        """Embed an image element; raises ImageEmbedError if it cannot be used."""
        if prepared is None:
            prepared = prepare_image(element)
        if isinstance(prepared, ImageEmbedError):
            raise prepared

        width, height = self._image_box(element, prepared)
        bottom = self.page_height - element.y - height
        self.surface.draw_image(prepared.data, element.x, bottom, width, height)

    def draw_table(self, element: TableElement) -> None:
        """Draw the grid lines and cell texts of a table.

        Grid lines use the border color. Cell text has no color of its own
        and is always drawn in black.
        """
        geometry = table_geometry(element)
        rows = max(1, element.rows)
        cols = max(1, element.cols)
        color = parse_hex_color(element.border_color)
        left = element.x
        top = self.page_height - element.y
        right = left + geometry.width
        bottom = top - geometry.height

        for row in range(rows + 1):
            y = top - row * geometry.cell_height
            self.surface.draw_line(left, y, right, y, color, LINE_WIDTH)
        for col in range(cols + 1):
            x = left + col * geometry.cell_width
            self.surface.draw_line(x, top, x, bottom, color, LINE_WIDTH)

        if not element.cells:
            return

        font = self.fonts.resolve(element.font_family)
        size = element.font_size
        for cell in element.cells:
            if not (0 <= cell.row < rows and 0 <= cell.col < cols):
                logger.debug(
                    f"Table '{element.id}': cell ({cell.row}, {cell.col}) outside "
                    f"{rows}x{cols} grid, ignored"
                )
                continue
            text = resolve_placeholders(cell.text, self.values)
            if not text:
                continue
            cell_x = left + cell.col * geometry.cell_width + CELL_PADDING
            cell_center = top - (cell.row + 0.5) * geometry.cell_height
            # Center roughly on cap height
            baseline = cell_center - size / 3
            self.surface.draw_text(text, cell_x, baseline, font, size, (0.0, 0.0, 0.0))

    @staticmethod
    def _image_box(element: ImageElement, prepared: PreparedImage) -> Tuple[float, float]:
        width = element.width if element.width and element.width > 0 else prepared.width_px
        height = element.height if element.height and element.height > 0 else prepared.height_px
        if width <= 0 or height <= 0:
            raise ImageEmbedError(f"Image '{element.id}' has an empty render box")
        return width, height
