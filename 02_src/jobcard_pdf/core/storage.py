"""Layout and record storage with memory and disk backends."""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Protocol

import yaml

from ..schemas.layout import LayoutDocument
from ..schemas.record import RecordData

logger = logging.getLogger(__name__)


class StorageBackend(Protocol):
    """Protocol for storage backends."""

    def save(self, key: str, value: Any) -> None:
        """Save value by key.

        Args:
            key: Storage key (e.g., "layouts/invoice", "records/42")
            value: Value to save (JSON-compatible dict)
        """
        ...

    def load(self, key: str, default: Any = None) -> Any:
        """Load value by key.

        Args:
            key: Storage key
            default: Default value if key doesn't exist

        Returns:
            Stored value or default
        """
        ...

    def exists(self, key: str) -> bool:
        """Check if key exists."""
        ...


class MemoryStorage:
    """In-memory storage backend for tests and embedding."""

    def __init__(self) -> None:
        self._data: Dict[str, Any] = {}
        logger.debug("Initialized MemoryStorage backend")

    def save(self, key: str, value: Any) -> None:
        self._data[key] = value
        logger.debug(f"MemoryStorage: saved key '{key}'")

    def load(self, key: str, default: Any = None) -> Any:
        value = self._data.get(key, default)
        logger.debug(f"MemoryStorage: loaded key '{key}' (found: {key in self._data})")
        return value

    def exists(self, key: str) -> bool:
        return key in self._data


class DiskStorage:
    """File-based storage backend: layouts as JSON, records as YAML."""

    def __init__(self, state_dir: Path) -> None:
        """Initialize disk storage with directory structure.

        Args:
            state_dir: Root directory for stored layouts and records
        """
        self.state_dir = Path(state_dir)
        self.layouts_dir = self.state_dir / "layouts"
        self.records_dir = self.state_dir / "records"

        for directory in (self.layouts_dir, self.records_dir):
            directory.mkdir(parents=True, exist_ok=True)

        logger.info(f"Initialized DiskStorage backend at {self.state_dir}")

    def _get_file_path(self, key: str) -> tuple[Path, str]:
        """Parse key and determine file path and format.

        Args:
            key: Storage key ("layouts/<id>" or "records/<id>")

        Returns:
            Tuple of (file_path, format) where format is "json" or "yaml"
        """
        parts = key.split("/", 1)

        if len(parts) != 2 or not parts[1]:
            raise ValueError(f"Invalid key format: '{key}'. Expected 'type/name'")

        key_type, name = parts
        if "/" in name or name in (".", ".."):
            raise ValueError(f"Invalid key name: '{name}'")

        if key_type == "layouts":
            return self.layouts_dir / f"{name}.json", "json"

        elif key_type == "records":
            return self.records_dir / f"{name}.yaml", "yaml"

        else:
            raise ValueError(f"Unknown key type: '{key_type}'")

    def save(self, key: str, value: Any) -> None:
        file_path, format_type = self._get_file_path(key)

        try:
            with file_path.open("w", encoding="utf-8") as f:
                if format_type == "json":
                    json.dump(value, f, ensure_ascii=False, indent=2)
                else:
                    yaml.safe_dump(value, f, allow_unicode=True, default_flow_style=False)

            logger.info(f"DiskStorage: saved key '{key}' to {file_path}")

        except Exception as e:
            logger.error(f"DiskStorage: failed to save key '{key}': {e}")
            raise

    def load(self, key: str, default: Any = None) -> Any:
        file_path, format_type = self._get_file_path(key)

        if not file_path.exists():
            logger.debug(f"DiskStorage: key '{key}' not found, returning default")
            return default

        try:
            with file_path.open("r", encoding="utf-8") as f:
                if format_type == "json":
                    value = json.load(f)
                else:
                    value = yaml.safe_load(f)

            logger.debug(f"DiskStorage: loaded key '{key}' from {file_path}")
            return value

        except Exception as e:
            logger.error(f"DiskStorage: failed to load key '{key}': {e}")
            raise

    def exists(self, key: str) -> bool:
        file_path, _ = self._get_file_path(key)
        return file_path.exists()


class DocumentStore:
    """Layout and record provider on top of a storage backend."""

    def __init__(self, storage: StorageBackend) -> None:
        """Initialize store.

        Args:
            storage: Storage backend (MemoryStorage or DiskStorage)
        """
        self.storage = storage
        logger.debug(f"Initialized DocumentStore with {type(storage).__name__}")

    def save_layout(self, layout_id: str, layout: LayoutDocument) -> None:
        """Persist a layout in wire format (editor-only state removed)."""
        self.storage.save(f"layouts/{layout_id}", layout.to_dict())

    def get_layout(self, layout_id: str) -> Optional[LayoutDocument]:
        """Load a layout, or None if the identifier is unknown."""
        data = self.storage.load(f"layouts/{layout_id}")
        if data is None:
            return None
        return LayoutDocument.from_dict(data)

    def save_record(self, record_id: str, record: RecordData) -> None:
        """Persist a job card record."""
        self.storage.save(f"records/{record_id}", record.to_dict())

    def get_record(self, record_id: str) -> Optional[RecordData]:
        """Load a job card record, or None if the identifier is unknown."""
        data = self.storage.load(f"records/{record_id}")
        if data is None:
            return None
        return RecordData.from_job_card(data)
