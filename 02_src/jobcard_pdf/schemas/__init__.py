"""Data schemas for the job card PDF renderer."""

from .layout import (
    PAGE_HEIGHT,
    PAGE_WIDTH,
    Element,
    ImageElement,
    LayoutDocument,
    LayoutError,
    Page,
    TableCell,
    TableElement,
    TextElement,
)
from .record import RecordData
from .config import ExportConfig, RenderConfig

__all__ = [
    "PAGE_WIDTH",
    "PAGE_HEIGHT",
    "Element",
    "ImageElement",
    "LayoutDocument",
    "LayoutError",
    "Page",
    "TableCell",
    "TableElement",
    "TextElement",
    "RecordData",
    "ExportConfig",
    "RenderConfig",
]
