"""JobCardExporter - fetch, render and write job card PDFs."""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Protocol

from ..schemas.config import RenderConfig
from ..schemas.layout import LayoutDocument
from ..schemas.record import RecordData
from .assembler import DocumentAssembler
from .page_renderer import SkippedElement

logger = logging.getLogger(__name__)


class RecordNotFoundError(LookupError):
    """Raised when the record provider has no record for an identifier."""


class LayoutNotFoundError(LookupError):
    """Raised when the layout provider has no layout for an identifier."""


class RecordProvider(Protocol):
    def get_record(self, record_id: str) -> Optional[RecordData]:
        ...


class LayoutProvider(Protocol):
    def get_layout(self, layout_id: str) -> Optional[LayoutDocument]:
        ...


class OutputSink(Protocol):
    def write(self, payload: bytes, suggested_filename: str) -> Path:
        ...


@dataclass
class ExportResult:
    """Outcome of a job card export.

    Attributes:
        path: Where the PDF was written
        filename: File name of the written PDF
        page_count: Number of rendered pages
        skipped: Elements left out of the document
    """
    path: Path
    filename: str
    page_count: int
    skipped: List[SkippedElement] = field(default_factory=list)


class JobCardExporter:
    """Renders a job card through a layout and hands the PDF to a sink.

    Collaborators:
    - records: provides RecordData by job card id
    - layouts: provides LayoutDocument by layout id
    - sink: stores the finished PDF and picks its final path
    """

    def __init__(
        self,
        records: RecordProvider,
        layouts: LayoutProvider,
        sink: OutputSink,
        config: Optional[RenderConfig] = None,
    ):
        """Initialize exporter.

        Args:
            records: Record provider
            layouts: Layout provider
            sink: Output sink
            config: Render configuration
        """
        self.records = records
        self.layouts = layouts
        self.sink = sink
        self.assembler = DocumentAssembler(config)

    def generate(self, job_card_id: str, layout_id: str) -> ExportResult:
        """Render a job card with a layout and write the PDF.

        Args:
            job_card_id: Record identifier
            layout_id: Layout identifier

        Returns:
            ExportResult describing the written file

        Raises:
            RecordNotFoundError: If the job card does not exist
            LayoutNotFoundError: If the layout does not exist
            RenderError: If the layout cannot be rendered
            OSError: If the sink fails to write
        """
        logger.info(f"Generating PDF for job card {job_card_id} with layout {layout_id}")

        record = self.records.get_record(job_card_id)
        if record is None:
            raise RecordNotFoundError(f"Job card not found: {job_card_id}")

        layout = self.layouts.get_layout(layout_id)
        if layout is None:
            raise LayoutNotFoundError(f"Layout not found: {layout_id}")

        result = self.assembler.render(layout, record)
        path = self.sink.write(result.pdf_bytes, f"jobcard_{job_card_id}.pdf")

        return ExportResult(
            path=path,
            filename=path.name,
            page_count=result.page_count,
            skipped=result.skipped,
        )
