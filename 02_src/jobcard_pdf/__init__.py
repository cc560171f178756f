"""
Job Card PDF - renders job card layouts into PDF documents.

This package provides:
- LayoutDocument: pages of positioned text, image and table elements
- DocumentAssembler: layout + record data -> PDF bytes
- JobCardExporter: fetch from a store, render, write to the export directory
"""

__version__ = "0.1.0"

# Core classes
from .core.assembler import DocumentAssembler, RenderError, RenderResult
from .core.processor import (
    ExportResult,
    JobCardExporter,
    LayoutNotFoundError,
    RecordNotFoundError,
)
from .core.storage import DiskStorage, DocumentStore, MemoryStorage
from .core.export import ExportDirectorySink, import_pdf
from .core.placeholders import resolve_placeholders

# Schemas
from .schemas.config import ExportConfig, RenderConfig
from .schemas.layout import (
    ImageElement,
    LayoutDocument,
    LayoutError,
    Page,
    TableCell,
    TableElement,
    TextElement,
)
from .schemas.record import RecordData

__all__ = [
    # Version
    "__version__",

    # Core classes
    "DocumentAssembler",
    "RenderError",
    "RenderResult",
    "ExportResult",
    "JobCardExporter",
    "LayoutNotFoundError",
    "RecordNotFoundError",
    "DiskStorage",
    "DocumentStore",
    "MemoryStorage",
    "ExportDirectorySink",
    "import_pdf",
    "resolve_placeholders",

    # Schemas - Config
    "ExportConfig",
    "RenderConfig",

    # Schemas - Layout
    "ImageElement",
    "LayoutDocument",
    "LayoutError",
    "Page",
    "TableCell",
    "TableElement",
    "TextElement",

    # Schemas - Record
    "RecordData",
]
