"""Configuration schemas for rendering and export."""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

DEFAULT_APP_DIR = Path.home() / ".jobcard-pdf"


@dataclass
class RenderConfig:
    """Configuration for DocumentAssembler.

    Attributes:
        max_image_workers: Threads used to decode images (1 = sequential)
        compress: Deflate content streams in the output PDF
    """
    max_image_workers: int = 1
    compress: bool = True


@dataclass
class ExportConfig:
    """Configuration for the export directory sink.

    Attributes:
        export_dir: Where generated PDFs are written
            (env JOBCARD_EXPORT_DIR, default ~/.jobcard-pdf/pdf-exports)
        import_dir: Where imported PDFs are copied
            (env JOBCARD_IMPORT_DIR, default ~/.jobcard-pdf/pdf-imports)
    """
    export_dir: Optional[Path] = None
    import_dir: Optional[Path] = None

    def __post_init__(self):
        """Fill unset directories from environment or defaults."""
        if self.export_dir is None:
            env_value = os.getenv("JOBCARD_EXPORT_DIR")
            self.export_dir = Path(env_value) if env_value else DEFAULT_APP_DIR / "pdf-exports"
        if self.import_dir is None:
            env_value = os.getenv("JOBCARD_IMPORT_DIR")
            self.import_dir = Path(env_value) if env_value else DEFAULT_APP_DIR / "pdf-imports"
        self.export_dir = Path(self.export_dir)
        self.import_dir = Path(self.import_dir)
