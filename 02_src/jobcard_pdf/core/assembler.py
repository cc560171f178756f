"""DocumentAssembler - renders a layout document into PDF bytes."""

import logging
from dataclasses import dataclass, field
from typing import Any, List, Mapping, Optional, Union

import fitz  # pymupdf

from ..schemas.config import RenderConfig
from ..schemas.layout import PAGE_HEIGHT, PAGE_WIDTH, LayoutDocument, LayoutError
from ..schemas.record import RecordData
from .images import ImageDecoder
from .page_renderer import PageRenderer, SkippedElement
from .styles import FontResolver
from .surface import PdfPageSurface

logger = logging.getLogger(__name__)

PDF_CREATOR = "jobcard-pdf"


class RenderError(RuntimeError):
    """Raised when a document cannot be rendered at all."""


@dataclass
class RenderResult:
    """Result of a document render.

    Attributes:
        pdf_bytes: Serialized PDF document
        page_count: Number of pages written
        skipped: Elements left out because they failed to render
        fonts_loaded: Distinct font variants loaded for this render
    """
    pdf_bytes: bytes
    page_count: int
    skipped: List[SkippedElement] = field(default_factory=list)
    fonts_loaded: int = 0

    @property
    def degraded(self) -> bool:
        """True when at least one element was skipped."""
        return bool(self.skipped)


class DocumentAssembler:
    """Renders every page of a layout document, in order, into one PDF.

    Each call to render() owns its own font cache and image decoder;
    nothing is shared between calls.
    """

    def __init__(self, config: Optional[RenderConfig] = None):
        """Initialize assembler.

        Args:
            config: Render configuration (defaults if not provided)
        """
        self.config = config or RenderConfig()

    def render(
        self,
        layout: Union[LayoutDocument, Mapping[str, Any], None],
        record: Optional[RecordData],
    ) -> RenderResult:
        """Render a layout filled with record data.

        Args:
            layout: LayoutDocument or its parsed JSON form
            record: Record data for placeholder substitution

        Returns:
            RenderResult with PDF bytes and skipped elements

        Raises:
            RenderError: If the layout or record is missing, or the layout
                has no pages
        """
        document = self._coerce_layout(layout)
        if record is None:
            raise RenderError("Record data is missing")
        if not document.pages:
            raise RenderError("Layout document has no pages")

        values = record.placeholder_values()
        fonts = FontResolver()
        decoder = ImageDecoder(max_workers=self.config.max_image_workers)
        skipped: List[SkippedElement] = []

        logger.info(f"Rendering {len(document.pages)} pages")

        pdf = fitz.open()
        try:
            for index, page in enumerate(document.pages):
                pdf_page = pdf.new_page(width=PAGE_WIDTH, height=PAGE_HEIGHT)
                surface = PdfPageSurface(pdf_page)
                images = decoder.decode_page(page.elements)
                renderer = PageRenderer(surface, fonts, values, page_height=PAGE_HEIGHT)
                report = renderer.render(page, page_index=index, images=images)
                skipped.extend(report.skipped)

            pdf.set_metadata({"title": record.title, "creator": PDF_CREATOR, "producer": PDF_CREATOR})
            pdf_bytes = pdf.tobytes(garbage=3 if self.config.compress else 0, deflate=self.config.compress)
            page_count = pdf.page_count
        finally:
            pdf.close()

        if skipped:
            logger.warning(f"Rendered with {len(skipped)} skipped elements")
        logger.info(
            f"Rendered {page_count} pages ({len(pdf_bytes)} bytes, {fonts.loads} fonts)"
        )

        return RenderResult(
            pdf_bytes=pdf_bytes,
            page_count=page_count,
            skipped=skipped,
            fonts_loaded=fonts.loads,
        )

    def render_bytes(
        self,
        layout: Union[LayoutDocument, Mapping[str, Any], None],
        record: Optional[RecordData],
    ) -> bytes:
        """Render and return only the PDF payload."""
        return self.render(layout, record).pdf_bytes

    @staticmethod
    def _coerce_layout(layout: Union[LayoutDocument, Mapping[str, Any], None]) -> LayoutDocument:
        if layout is None:
            raise RenderError("Layout document is missing")
        if isinstance(layout, LayoutDocument):
            return layout
        try:
            return LayoutDocument.from_dict(layout)
        except LayoutError as e:
            raise RenderError(str(e)) from e
