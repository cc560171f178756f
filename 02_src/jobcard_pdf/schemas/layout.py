"""Layout document schemas - pages of positioned text, image and table elements."""

import json
import logging
import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

logger = logging.getLogger(__name__)

# Portrait A4 in points, shared by every page of every document
PAGE_WIDTH = 595.28
PAGE_HEIGHT = 841.89

FONT_FAMILIES = ("Helvetica", "Times-Roman", "Courier")
ALIGNMENTS = ("left", "center", "right")

DEFAULT_POSITION = 50.0
DEFAULT_FONT_SIZE = 12.0
DEFAULT_COLOR = "#000000"


class LayoutError(ValueError):
    """Raised when a layout document is missing or structurally unusable."""


@dataclass(frozen=True)
class TextElement:
    """Positioned text run, may contain {{placeholder}} tokens.

    Attributes:
        id: Element identifier (unique within its page)
        x: Left edge in points
        y: Top edge in points, measured downward from the page top
        text: Raw text with placeholders
        font_family: Helvetica, Times-Roman or Courier
        font_size: Font size in points
        bold, italic, underline: Style flags
        color: Hex color string (#RRGGBB)
        align: left, center or right
    """
    id: str
    x: float
    y: float
    text: str = ""
    font_family: str = "Helvetica"
    font_size: float = DEFAULT_FONT_SIZE
    bold: bool = False
    italic: bool = False
    underline: bool = False
    color: str = DEFAULT_COLOR
    align: str = "left"


@dataclass(frozen=True)
class ImageElement:
    """Embedded raster image given as a data URI.

    Attributes:
        id: Element identifier
        x, y: Top-left corner in points (y downward)
        src: data:image/png;base64,... or data:image/jpeg;base64,...
        width, height: Render box in points (None when absent)
        crop_x, crop_y, crop_width, crop_height: Source-pixel crop window
        original_width, original_height: Source pixel dimensions
    """
    id: str
    x: float
    y: float
    src: str = ""
    width: Optional[float] = None
    height: Optional[float] = None
    crop_x: Optional[float] = None
    crop_y: Optional[float] = None
    crop_width: Optional[float] = None
    crop_height: Optional[float] = None
    original_width: Optional[float] = None
    original_height: Optional[float] = None

    @property
    def has_crop(self) -> bool:
        """True when any crop field was supplied."""
        return any(
            value is not None
            for value in (self.crop_x, self.crop_y, self.crop_width, self.crop_height)
        )


@dataclass(frozen=True)
class TableCell:
    """Text content of one table grid position (0-based row/col)."""
    row: int
    col: int
    text: str = ""


@dataclass(frozen=True)
class TableElement:
    """Grid of bordered cells.

    Attributes:
        id: Element identifier
        x, y: Top-left corner in points (y downward)
        rows, cols: Grid dimensions, always >= 1
        cell_width, cell_height: Cell size used when width/height are absent
        width, height: Overall table box (None when absent)
        border_color: Hex color of the grid lines
        font_size, font_family: Cell text style
        cells: Sparse cell contents
    """
    id: str
    x: float
    y: float
    rows: int = 1
    cols: int = 1
    cell_width: float = 100.0
    cell_height: float = 30.0
    width: Optional[float] = None
    height: Optional[float] = None
    border_color: str = DEFAULT_COLOR
    font_size: float = DEFAULT_FONT_SIZE
    font_family: str = "Helvetica"
    cells: Tuple[TableCell, ...] = ()


Element = Union[TextElement, ImageElement, TableElement]


@dataclass(frozen=True)
class Page:
    """One output page; elements draw in order, later ones on top."""
    elements: Tuple[Element, ...] = ()
    id: Optional[str] = None


@dataclass(frozen=True)
class LayoutDocument:
    """Multi-page layout handed to the renderer as an immutable value."""
    pages: Tuple[Page, ...] = field(default_factory=tuple)

    @classmethod
    def from_json(cls, text: Optional[str]) -> "LayoutDocument":
        """Parse a layout document from its JSON wire form.

        Raises:
            LayoutError: If the text is empty or not valid JSON
        """
        if not text:
            raise LayoutError("Layout document is missing")
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise LayoutError(f"Layout document is not valid JSON: {e}") from e
        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "LayoutDocument":
        """Build a layout document from its parsed JSON form.

        Accepts both {"pages": [{"elements": [...]}, ...]} and the legacy
        single-page {"elements": [...]} shape.

        Raises:
            LayoutError: If the document is missing, malformed or has no pages
        """
        if data is None:
            raise LayoutError("Layout document is missing")
        if not isinstance(data, Mapping):
            raise LayoutError(
                f"Layout document must be an object, got {type(data).__name__}"
            )

        if "pages" in data:
            raw_pages = data["pages"]
            if not isinstance(raw_pages, list):
                raise LayoutError("'pages' must be a list")
        elif "elements" in data:
            logger.debug("Legacy single-page layout, wrapping elements in one page")
            raw_pages = [{"elements": data["elements"]}]
        else:
            raw_pages = []

        if not raw_pages:
            raise LayoutError("Layout document has no pages")

        canvas = (data.get("canvasWidth"), data.get("canvasHeight"))
        if canvas != (None, None) and canvas != (PAGE_WIDTH, PAGE_HEIGHT):
            logger.debug(f"Ignoring canvas size {canvas}, pages are always A4")

        pages = tuple(
            _parse_page(raw_page, index) for index, raw_page in enumerate(raw_pages)
        )
        return cls(pages=pages)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the persisted wire format (no editor-only state)."""
        return {
            "pages": [
                {
                    "id": page.id or f"page-{index + 1}",
                    "elements": [_element_to_dict(e) for e in page.elements],
                }
                for index, page in enumerate(self.pages)
            ],
            "canvasWidth": PAGE_WIDTH,
            "canvasHeight": PAGE_HEIGHT,
        }

    def to_json(self) -> str:
        """Serialize to a JSON string."""
        return json.dumps(self.to_dict(), ensure_ascii=False)


def _parse_page(raw_page: Any, index: int) -> Page:
    if not isinstance(raw_page, Mapping):
        raise LayoutError(f"Page {index + 1} must be an object")

    raw_elements = raw_page.get("elements") or []
    if not isinstance(raw_elements, list):
        raise LayoutError(f"Page {index + 1}: 'elements' must be a list")

    elements: List[Element] = []
    seen_ids = set()
    for position, raw in enumerate(raw_elements):
        element = _parse_element(raw, position)
        if element is None:
            continue
        if element.id in seen_ids:
            logger.warning(f"Page {index + 1}: duplicate element id '{element.id}'")
        seen_ids.add(element.id)
        elements.append(element)

    page_id = raw_page.get("id")
    return Page(elements=tuple(elements), id=str(page_id) if page_id is not None else None)


def _parse_element(raw: Any, position: int) -> Optional[Element]:
    if not isinstance(raw, Mapping):
        logger.warning(f"Skipping element #{position}: not an object")
        return None

    element_type = raw.get("type", "text")
    element_id = str(raw.get("id") or f"{element_type}-{position}")
    x = _as_float(raw.get("x"), DEFAULT_POSITION)
    y = _as_float(raw.get("y"), DEFAULT_POSITION)

    if element_type == "text":
        align = raw.get("align") or "left"
        if align not in ALIGNMENTS:
            logger.warning(f"Element '{element_id}': unknown align '{align}', using left")
            align = "left"
        return TextElement(
            id=element_id,
            x=x,
            y=y,
            text=_as_text(raw.get("text")),
            font_family=str(raw.get("fontFamily") or "Helvetica"),
            font_size=_as_positive(raw.get("fontSize"), DEFAULT_FONT_SIZE),
            bold=bool(raw.get("bold", False)),
            italic=bool(raw.get("italic", False)),
            underline=bool(raw.get("underline", False)),
            color=str(raw.get("color") or DEFAULT_COLOR),
            align=align,
        )

    if element_type == "image":
        return ImageElement(
            id=element_id,
            x=x,
            y=y,
            src=_as_text(raw.get("src")),
            width=_as_optional_float(raw.get("width")),
            height=_as_optional_float(raw.get("height")),
            crop_x=_as_optional_float(raw.get("cropX")),
            crop_y=_as_optional_float(raw.get("cropY")),
            crop_width=_as_optional_float(raw.get("cropWidth")),
            crop_height=_as_optional_float(raw.get("cropHeight")),
            original_width=_as_optional_float(raw.get("originalWidth")),
            original_height=_as_optional_float(raw.get("originalHeight")),
        )

    if element_type == "table":
        rows = _as_count(raw.get("rows"))
        cols = _as_count(raw.get("cols"))
        return TableElement(
            id=element_id,
            x=x,
            y=y,
            rows=rows,
            cols=cols,
            cell_width=_as_positive(raw.get("cellWidth"), 100.0),
            cell_height=_as_positive(raw.get("cellHeight"), 30.0),
            width=_as_optional_float(raw.get("width")),
            height=_as_optional_float(raw.get("height")),
            border_color=str(raw.get("borderColor") or DEFAULT_COLOR),
            font_size=_as_positive(raw.get("fontSize"), DEFAULT_FONT_SIZE),
            font_family=str(raw.get("fontFamily") or "Helvetica"),
            cells=_parse_cells(raw.get("cells"), element_id),
        )

    logger.warning(f"Skipping element '{element_id}': unknown type '{element_type}'")
    return None


def _parse_cells(raw_cells: Any, element_id: str) -> Tuple[TableCell, ...]:
    if not raw_cells:
        return ()
    if not isinstance(raw_cells, list):
        logger.warning(f"Table '{element_id}': 'cells' is not a list, ignoring")
        return ()

    cells = []
    for raw in raw_cells:
        if not isinstance(raw, Mapping):
            continue
        try:
            row = int(raw.get("row"))
            col = int(raw.get("col"))
        except (TypeError, ValueError, OverflowError):
            logger.warning(f"Table '{element_id}': cell without row/col ignored: {raw}")
            continue
        cells.append(TableCell(row=row, col=col, text=_as_text(raw.get("text"))))
    return tuple(cells)


def _element_to_dict(element: Element) -> Dict[str, Any]:
    if isinstance(element, TextElement):
        return {
            "type": "text",
            "id": element.id,
            "x": element.x,
            "y": element.y,
            "text": element.text,
            "fontFamily": element.font_family,
            "fontSize": element.font_size,
            "bold": element.bold,
            "italic": element.italic,
            "underline": element.underline,
            "color": element.color,
            "align": element.align,
        }
    if isinstance(element, ImageElement):
        data = {"type": "image", "id": element.id, "x": element.x, "y": element.y, "src": element.src}
        optional = {
            "width": element.width,
            "height": element.height,
            "cropX": element.crop_x,
            "cropY": element.crop_y,
            "cropWidth": element.crop_width,
            "cropHeight": element.crop_height,
            "originalWidth": element.original_width,
            "originalHeight": element.original_height,
        }
        data.update({k: v for k, v in optional.items() if v is not None})
        return data

    data = {
        "type": "table",
        "id": element.id,
        "x": element.x,
        "y": element.y,
        "rows": element.rows,
        "cols": element.cols,
        "cellWidth": element.cell_width,
        "cellHeight": element.cell_height,
        "borderColor": element.border_color,
        "fontSize": element.font_size,
        "fontFamily": element.font_family,
        "cells": [{"row": c.row, "col": c.col, "text": c.text} for c in element.cells],
    }
    if element.width is not None:
        data["width"] = element.width
    if element.height is not None:
        data["height"] = element.height
    return data


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def _as_optional_float(value: Any) -> Optional[float]:
    if value is None or value == "":
        return None
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(result):
        return None
    return result


def _as_float(value: Any, default: float) -> float:
    result = _as_optional_float(value)
    return default if result is None else result


def _as_positive(value: Any, default: float) -> float:
    result = _as_optional_float(value)
    if result is None or result <= 0:
        return default
    return result


def _as_count(value: Any) -> int:
    """Grid dimension, clamped to at least 1."""
    result = _as_optional_float(value)
    if result is None or result < 1:
        return 1
    return int(result)
