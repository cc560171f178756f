"""Tests for the export pipeline and the export directory sink."""

from pathlib import Path

import fitz
import pytest

from jobcard_pdf.core.export import ExportDirectorySink, import_pdf
from jobcard_pdf.core.processor import (
    JobCardExporter,
    LayoutNotFoundError,
    RecordNotFoundError,
)
from jobcard_pdf.core.storage import DocumentStore, MemoryStorage
from jobcard_pdf.schemas.layout import LayoutDocument, LayoutError


def fixed_clock() -> int:
    return 1700000000000


class TestExportDirectorySink:
    """Test suite for ExportDirectorySink."""

    def test_creates_directory_and_names_file(self, tmp_path: Path) -> None:
        export_dir = tmp_path / "pdf-exports"
        sink = ExportDirectorySink(export_dir, clock=fixed_clock)

        path = sink.write(b"%PDF-1.7 test", "jobcard_7.pdf")

        assert path == export_dir / "jobcard_7_1700000000000.pdf"
        assert path.read_bytes() == b"%PDF-1.7 test"

    def test_collision_gets_counter(self, tmp_path: Path) -> None:
        sink = ExportDirectorySink(tmp_path, clock=fixed_clock)

        first = sink.write(b"one", "jobcard_7.pdf")
        second = sink.write(b"two", "jobcard_7.pdf")
        third = sink.write(b"three", "jobcard_7.pdf")

        assert first.name == "jobcard_7_1700000000000.pdf"
        assert second.name == "jobcard_7_1700000000000_1.pdf"
        assert third.name == "jobcard_7_1700000000000_2.pdf"
        assert first.read_bytes() == b"one"

    def test_directory_parts_in_name_are_dropped(self, tmp_path: Path) -> None:
        sink = ExportDirectorySink(tmp_path / "out", clock=fixed_clock)
        path = sink.write(b"x", "../../escape.pdf")
        assert path.parent == tmp_path / "out"

    def test_missing_suffix_defaults_to_pdf(self, tmp_path: Path) -> None:
        sink = ExportDirectorySink(tmp_path, clock=fixed_clock)
        assert sink.write(b"x", "report").suffix == ".pdf"

    def test_path_for(self, tmp_path: Path) -> None:
        sink = ExportDirectorySink(tmp_path)
        assert sink.path_for("jobcard_1.pdf") == tmp_path / "jobcard_1.pdf"

    def test_write_failure_propagates(self, tmp_path: Path) -> None:
        blocker = tmp_path / "not-a-dir"
        blocker.write_text("file in the way")
        sink = ExportDirectorySink(blocker / "exports")
        with pytest.raises(OSError):
            sink.write(b"x", "jobcard_1.pdf")


class TestImportPdf:
    def test_copies_into_import_dir(self, tmp_path: Path) -> None:
        source = tmp_path / "scan.pdf"
        source.write_bytes(b"%PDF-1.4 scanned")

        destination = import_pdf(source, tmp_path / "pdf-imports")

        assert destination == tmp_path / "pdf-imports" / "scan.pdf"
        assert destination.read_bytes() == b"%PDF-1.4 scanned"

    def test_custom_name(self, tmp_path: Path) -> None:
        source = tmp_path / "scan.pdf"
        source.write_bytes(b"%PDF")
        assert import_pdf(source, tmp_path / "in", filename="renamed.pdf").name == "renamed.pdf"

    def test_missing_source(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError, match="PDF file not found"):
            import_pdf(tmp_path / "missing.pdf", tmp_path / "in")


class FailingSink:
    def write(self, payload: bytes, suggested_filename: str) -> Path:
        raise PermissionError("export directory is read-only")


class TestJobCardExporter:
    """Test suite for JobCardExporter."""

    @pytest.fixture
    def store(self, record) -> DocumentStore:
        store = DocumentStore(MemoryStorage())
        store.save_record("42", record)
        store.save_layout(
            "card",
            LayoutDocument.from_dict({"pages": [
                {"elements": [{"type": "text", "id": "t", "text": "Job: {{title}}"}]},
                {"elements": [{"type": "text", "id": "n", "text": "For {{name}}"}]},
            ]}),
        )
        return store

    def test_generate_writes_pdf(self, store: DocumentStore, tmp_path: Path) -> None:
        sink = ExportDirectorySink(tmp_path, clock=fixed_clock)
        exporter = JobCardExporter(records=store, layouts=store, sink=sink)

        result = exporter.generate("42", "card")

        assert result.filename == "jobcard_42_1700000000000.pdf"
        assert result.path == tmp_path / result.filename
        assert result.page_count == 2
        assert result.skipped == []

        doc = fitz.open(result.path)
        try:
            assert "Job: Paint Job" in doc[0].get_text()
            assert "For Bob" in doc[1].get_text()
        finally:
            doc.close()

    def test_unknown_job_card(self, store: DocumentStore, tmp_path: Path) -> None:
        exporter = JobCardExporter(store, store, ExportDirectorySink(tmp_path))
        with pytest.raises(RecordNotFoundError, match="Job card not found: 99"):
            exporter.generate("99", "card")

    def test_unknown_layout(self, store: DocumentStore, tmp_path: Path) -> None:
        exporter = JobCardExporter(store, store, ExportDirectorySink(tmp_path))
        with pytest.raises(LayoutNotFoundError, match="Layout not found: missing"):
            exporter.generate("42", "missing")
        assert list(tmp_path.iterdir()) == []

    def test_empty_layout_is_fatal(self, store: DocumentStore, tmp_path: Path) -> None:
        store.storage.save("layouts/empty", {"pages": []})
        exporter = JobCardExporter(store, store, ExportDirectorySink(tmp_path))
        with pytest.raises(LayoutError, match="no pages"):
            exporter.generate("42", "empty")

    def test_sink_failure_propagates(self, store: DocumentStore) -> None:
        exporter = JobCardExporter(store, store, FailingSink())
        with pytest.raises(PermissionError, match="read-only"):
            exporter.generate("42", "card")
