"""CLI interface for job card PDF rendering.

Commands:
- render: layout JSON file + record YAML/JSON file -> PDF
- export: job card and layout ids from a state directory -> PDF
- import: copy an external PDF into the import directory
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

import yaml
from dotenv import load_dotenv

from .core.assembler import DocumentAssembler, RenderError
from .core.export import ExportDirectorySink, import_pdf
from .core.processor import JobCardExporter, LayoutNotFoundError, RecordNotFoundError
from .core.storage import DiskStorage, DocumentStore
from .schemas.config import ExportConfig, RenderConfig
from .schemas.layout import LayoutDocument, LayoutError
from .schemas.record import RecordData

LOG_FORMAT = "%(asctime)s | %(name)s | %(message)s"
LOG_DATEFMT = "%H:%M:%S"

logger = logging.getLogger(__name__)


def setup_logging(log_level: str, log_file: Optional[Path] = None) -> None:
    """Setup logging: console + optional file handler.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        log_file: Path to log file (UTF-8). If None, console only.
    """
    level = getattr(logging, log_level.upper(), logging.INFO)

    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        datefmt=LOG_DATEFMT,
        stream=sys.stdout,
        force=True,
    )

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(log_file, encoding="utf-8")
        fh.setLevel(level)
        fh.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATEFMT))
        logging.getLogger().addHandler(fh)


def validate_file(path: Path, label: str) -> None:
    """Exit with an error message unless path is an existing file.

    Raises:
        SystemExit: If validation fails
    """
    if not path.exists():
        print(f"Error: {label} file not found: {path}", file=sys.stderr)
        sys.exit(1)

    if not path.is_file():
        print(f"Error: Path is not a file: {path}", file=sys.stderr)
        sys.exit(1)


def load_layout_file(path: Path) -> LayoutDocument:
    """Read a layout document from a JSON file."""
    return LayoutDocument.from_json(path.read_text(encoding="utf-8"))


def load_record_file(path: Path) -> RecordData:
    """Read record data from a YAML (or JSON) file."""
    with path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f)
    if not isinstance(data, dict):
        raise ValueError(f"Record file must contain a mapping: {path}")
    return RecordData.from_job_card(data)


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="jobcard-pdf",
        description="Render job card layouts into PDF documents",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  jobcard-pdf render --layout layout.json --record job.yaml -o ./exports
  jobcard-pdf export --state-dir ./state --job-card 42 --layout invoice
  jobcard-pdf import --pdf scanned.pdf

Output files are named <stem>_<timestamp>.pdf inside the export directory.
        """,
    )

    parser.add_argument(
        "--log-level",
        type=str,
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Also write the log to this file",
    )
    parser.add_argument(
        "--image-workers",
        type=int,
        default=1,
        help="Parallel image decoding threads (default: 1)",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    render = subparsers.add_parser("render", help="Render a layout file with a record file")
    render.add_argument("--layout", type=Path, required=True, help="Layout JSON file")
    render.add_argument("--record", type=Path, required=True, help="Record YAML/JSON file")
    render.add_argument(
        "--output-dir", "-o",
        type=Path,
        default=None,
        help="Export directory (default: JOBCARD_EXPORT_DIR or ~/.jobcard-pdf/pdf-exports)",
    )

    export = subparsers.add_parser("export", help="Render a stored job card with a stored layout")
    export.add_argument("--state-dir", type=Path, required=True, help="Directory with layouts/ and records/")
    export.add_argument("--job-card", required=True, help="Job card id")
    export.add_argument("--layout", required=True, help="Layout id")
    export.add_argument(
        "--output-dir", "-o",
        type=Path,
        default=None,
        help="Export directory (default: JOBCARD_EXPORT_DIR or ~/.jobcard-pdf/pdf-exports)",
    )

    pdf_import = subparsers.add_parser("import", help="Copy an external PDF into the import directory")
    pdf_import.add_argument("--pdf", type=Path, required=True, help="PDF file to import")
    pdf_import.add_argument(
        "--import-dir",
        type=Path,
        default=None,
        help="Import directory (default: JOBCARD_IMPORT_DIR or ~/.jobcard-pdf/pdf-imports)",
    )

    return parser


def run_render(args: argparse.Namespace, config: RenderConfig, sink: ExportDirectorySink) -> Path:
    validate_file(args.layout, "Layout")
    validate_file(args.record, "Record")

    layout = load_layout_file(args.layout)
    record = load_record_file(args.record)

    result = DocumentAssembler(config).render(layout, record)
    path = sink.write(result.pdf_bytes, f"{args.layout.stem}.pdf")

    logger.info(f"Pages rendered: {result.page_count}, skipped elements: {len(result.skipped)}")
    return path


def run_export(args: argparse.Namespace, config: RenderConfig, sink: ExportDirectorySink) -> Path:
    store = DocumentStore(DiskStorage(args.state_dir))
    exporter = JobCardExporter(records=store, layouts=store, sink=sink, config=config)
    result = exporter.generate(args.job_card, args.layout)

    logger.info(f"Pages rendered: {result.page_count}, skipped elements: {len(result.skipped)}")
    return result.path


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point.

    Returns:
        0 on success, 1 on error
    """
    args = build_parser().parse_args(argv)

    load_dotenv()
    setup_logging(args.log_level, args.log_file)

    config = RenderConfig(max_image_workers=args.image_workers)
    export_config = ExportConfig(
        export_dir=getattr(args, "output_dir", None),
        import_dir=getattr(args, "import_dir", None),
    )
    sink = ExportDirectorySink(export_config.export_dir)

    try:
        if args.command == "render":
            path = run_render(args, config, sink)
        elif args.command == "export":
            path = run_export(args, config, sink)
        else:
            validate_file(args.pdf, "PDF")
            path = import_pdf(args.pdf, export_config.import_dir)

    except KeyboardInterrupt:
        print("\nRendering interrupted by user", file=sys.stderr)
        return 1

    except (LayoutError, RenderError, RecordNotFoundError, LayoutNotFoundError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    except (OSError, ValueError, yaml.YAMLError) as e:
        logger.exception(f"Error during rendering: {e}")
        return 1

    print(f"PDF written: {path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
