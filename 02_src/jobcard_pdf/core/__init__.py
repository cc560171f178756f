"""Core components: placeholder and style resolution, page rendering, assembly, export."""

from .placeholders import find_placeholders, resolve_placeholders
from .styles import FontKey, FontResolver, ResolvedFont, parse_hex_color
from .images import (
    CorruptImageError,
    ImageDecoder,
    ImageEmbedError,
    MalformedCropError,
    PreparedImage,
    UnsupportedImageError,
    clamp_crop,
    parse_data_uri,
    prepare_image,
)
from .surface import PageSurface, PdfPageSurface
from .page_renderer import PageRenderer, PageReport, SkippedElement, table_geometry, text_origin
from .assembler import DocumentAssembler, RenderError, RenderResult
from .storage import DiskStorage, DocumentStore, MemoryStorage, StorageBackend
from .export import ExportDirectorySink, import_pdf
from .processor import (
    ExportResult,
    JobCardExporter,
    LayoutNotFoundError,
    RecordNotFoundError,
)

__all__ = [
    # Placeholders and styles
    "find_placeholders",
    "resolve_placeholders",
    "FontKey",
    "FontResolver",
    "ResolvedFont",
    "parse_hex_color",
    # Images
    "CorruptImageError",
    "ImageDecoder",
    "ImageEmbedError",
    "MalformedCropError",
    "PreparedImage",
    "UnsupportedImageError",
    "clamp_crop",
    "parse_data_uri",
    "prepare_image",
    # Rendering
    "PageSurface",
    "PdfPageSurface",
    "PageRenderer",
    "PageReport",
    "SkippedElement",
    "table_geometry",
    "text_origin",
    "DocumentAssembler",
    "RenderError",
    "RenderResult",
    # Storage and export
    "DiskStorage",
    "DocumentStore",
    "MemoryStorage",
    "StorageBackend",
    "ExportDirectorySink",
    "import_pdf",
    "ExportResult",
    "JobCardExporter",
    "LayoutNotFoundError",
    "RecordNotFoundError",
]
