"""Output sink - writes rendered PDFs into the export directory."""

import logging
import shutil
import time
from pathlib import Path
from typing import Callable, Optional

logger = logging.getLogger(__name__)


def _millis() -> int:
    return int(time.time() * 1000)


class ExportDirectorySink:
    """Writes PDF payloads under an export directory with unique names.

    Filesystem errors (permissions, disk full) are not handled here;
    they propagate to the caller unchanged.
    """

    def __init__(self, export_dir: Path, clock: Callable[[], int] = _millis) -> None:
        """Initialize sink.

        Args:
            export_dir: Target directory (created on first write)
            clock: Millisecond timestamp source used in file names
        """
        self.export_dir = Path(export_dir)
        self._clock = clock

    def path_for(self, filename: str) -> Path:
        """Path a file with this name would have in the export directory."""
        return self.export_dir / Path(filename).name

    def write(self, payload: bytes, suggested_filename: str) -> Path:
        """Write payload as <stem>_<timestamp><suffix>.

        Args:
            payload: Rendered PDF bytes
            suggested_filename: Name proposed by the caller (e.g. "jobcard_7.pdf")

        Returns:
            Path of the written file
        """
        self.export_dir.mkdir(parents=True, exist_ok=True)

        suggested = Path(suggested_filename).name or "document.pdf"
        stem = Path(suggested).stem
        suffix = Path(suggested).suffix or ".pdf"
        base = f"{stem}_{self._clock()}"

        target = self.export_dir / f"{base}{suffix}"
        counter = 1
        while target.exists():
            target = self.export_dir / f"{base}_{counter}{suffix}"
            counter += 1

        target.write_bytes(payload)
        logger.info(f"Wrote {len(payload)} bytes to {target}")
        return target


def import_pdf(source: Path, import_dir: Path, filename: Optional[str] = None) -> Path:
    """Copy an external PDF into the import directory.

    Args:
        source: PDF file to import
        import_dir: Destination directory (created if missing)
        filename: Name to store under (defaults to the source name)

    Returns:
        Path of the imported copy

    Raises:
        FileNotFoundError: If source does not exist
    """
    source = Path(source)
    if not source.is_file():
        raise FileNotFoundError(f"PDF file not found: {source}")

    import_dir = Path(import_dir)
    import_dir.mkdir(parents=True, exist_ok=True)
    destination = import_dir / (filename or source.name)
    shutil.copyfile(source, destination)
    logger.info(f"Imported {source} to {destination}")
    return destination
