"""Tests for storage backends and DocumentStore."""

import json
from pathlib import Path

import pytest
import yaml

from jobcard_pdf.core.storage import DiskStorage, DocumentStore, MemoryStorage
from jobcard_pdf.schemas.layout import LayoutDocument, TextElement
from jobcard_pdf.schemas.record import RecordData


class TestMemoryStorage:
    """Test suite for MemoryStorage backend."""

    @pytest.fixture
    def storage(self) -> MemoryStorage:
        return MemoryStorage()

    def test_save_and_load(self, storage: MemoryStorage) -> None:
        storage.save("layouts/a", {"pages": []})
        assert storage.load("layouts/a") == {"pages": []}

    def test_load_default(self, storage: MemoryStorage) -> None:
        assert storage.load("nonexistent", default="default") == "default"
        assert storage.load("nonexistent") is None

    def test_exists(self, storage: MemoryStorage) -> None:
        assert not storage.exists("records/1")
        storage.save("records/1", {})
        assert storage.exists("records/1")

    def test_save_overwrite(self, storage: MemoryStorage) -> None:
        storage.save("key", "value1")
        storage.save("key", "value2")
        assert storage.load("key") == "value2"


class TestDiskStorage:
    """Test suite for DiskStorage backend."""

    @pytest.fixture
    def storage(self, tmp_path: Path) -> DiskStorage:
        return DiskStorage(tmp_path)

    def test_directory_creation(self, storage: DiskStorage) -> None:
        assert storage.layouts_dir.is_dir()
        assert storage.records_dir.is_dir()

    def test_layout_saved_as_json(self, storage: DiskStorage) -> None:
        data = {"pages": [{"elements": [{"type": "text", "id": "t", "text": "Ünïcode"}]}]}
        storage.save("layouts/invoice", data)

        file_path = storage.layouts_dir / "invoice.json"
        assert file_path.exists()
        assert json.loads(file_path.read_text(encoding="utf-8")) == data
        assert storage.load("layouts/invoice") == data

    def test_record_saved_as_yaml(self, storage: DiskStorage) -> None:
        data = {"title": "Paint Job", "description": "", "customData": '{"name": "Bob"}'}
        storage.save("records/42", data)

        file_path = storage.records_dir / "42.yaml"
        assert file_path.exists()
        assert yaml.safe_load(file_path.read_text(encoding="utf-8")) == data
        assert storage.load("records/42") == data

    def test_missing_key_returns_default(self, storage: DiskStorage) -> None:
        assert storage.load("layouts/missing") is None
        assert storage.load("records/missing", default={}) == {}
        assert not storage.exists("layouts/missing")

    @pytest.mark.parametrize("key", ["no_slash", "layouts/", "layouts/../escape", "records/.."])
    def test_invalid_key(self, storage: DiskStorage, key: str) -> None:
        with pytest.raises(ValueError):
            storage.save(key, {})

    def test_unknown_key_type(self, storage: DiskStorage) -> None:
        with pytest.raises(ValueError, match="Unknown key type"):
            storage.load("images/logo")

    def test_corrupt_file_propagates(self, storage: DiskStorage) -> None:
        (storage.layouts_dir / "broken.json").write_text("{not json", encoding="utf-8")
        with pytest.raises(json.JSONDecodeError):
            storage.load("layouts/broken")


class TestDocumentStore:
    """Test suite for DocumentStore."""

    @pytest.fixture(params=["memory", "disk"])
    def store(self, request, tmp_path: Path) -> DocumentStore:
        if request.param == "memory":
            return DocumentStore(MemoryStorage())
        return DocumentStore(DiskStorage(tmp_path))

    def test_layout_round_trip(self, store: DocumentStore) -> None:
        layout = LayoutDocument.from_dict(
            {"pages": [{"elements": [{"type": "text", "id": "t", "text": "{{title}}", "draggable": True}]}]}
        )
        store.save_layout("card", layout)

        loaded = store.get_layout("card")
        assert loaded.pages[0].elements == layout.pages[0].elements
        assert loaded.pages[0].id == "page-1"
        assert isinstance(loaded.pages[0].elements[0], TextElement)

    def test_draggable_not_persisted(self, store: DocumentStore) -> None:
        layout = LayoutDocument.from_dict({"elements": [{"type": "text", "id": "t", "draggable": True}]})
        store.save_layout("card", layout)
        stored = store.storage.load("layouts/card")
        assert "draggable" not in stored["pages"][0]["elements"][0]

    def test_record_round_trip(self, store: DocumentStore, record: RecordData) -> None:
        store.save_record("7", record)
        assert store.get_record("7") == record

    def test_unknown_ids_return_none(self, store: DocumentStore) -> None:
        assert store.get_layout("nope") is None
        assert store.get_record("nope") is None
