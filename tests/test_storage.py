"""
Tests for the key-value storage backends.
"""

from pathlib import Path

import pytest

from bizbook.services.storage import (
    InMemoryStorage,
    JsonFileStorage,
    KeyValueStorageInterface,
    StorageError,
)


class TestJsonFileStorage:
    """Tests for the file backend."""

    def test_set_then_get(self, tmp_path):
        """Test values survive a new storage instance on the same directory."""
        JsonFileStorage(tmp_path).set("finance-storage", '{"expenses": []}')
        assert JsonFileStorage(tmp_path).get("finance-storage") == '{"expenses": []}'

    def test_one_file_per_key(self, tmp_path):
        """Test the on-disk layout."""
        storage = JsonFileStorage(tmp_path)
        storage.set("task-storage", "{}")
        assert storage.path_for("task-storage") == tmp_path / "task-storage.json"
        assert (tmp_path / "task-storage.json").read_text(encoding="utf-8") == "{}"

    def test_directory_created_on_demand(self, tmp_path):
        """Test a missing data directory is created on first write."""
        storage = JsonFileStorage(tmp_path / "nested" / "data")
        storage.set("k", "v")
        assert storage.get("k") == "v"

    def test_no_temp_file_left_behind(self, tmp_path):
        """Test the temporary write file is moved into place."""
        storage = JsonFileStorage(tmp_path)
        storage.set("k", "first")
        storage.set("k", "second")
        assert sorted(p.name for p in tmp_path.iterdir()) == ["k.json"]
        assert storage.get("k") == "second"

    def test_unicode_round_trip(self, tmp_path):
        """Test non-ASCII values are stored as UTF-8."""
        storage = JsonFileStorage(tmp_path)
        storage.set("k", '["거래처"]')
        assert storage.get("k") == '["거래처"]'

    def test_missing_key_returns_none(self, tmp_path):
        """Test reading a key that was never written."""
        assert JsonFileStorage(tmp_path).get("finance-storage") is None

    def test_delete(self, tmp_path):
        """Test delete reports whether something was removed."""
        storage = JsonFileStorage(tmp_path)
        storage.set("k", "v")
        assert storage.delete("k") is True
        assert storage.delete("k") is False
        assert storage.get("k") is None

    @pytest.mark.parametrize("key", ["", ".", "..", "../escape", "a/b", "a b"])
    def test_invalid_keys_rejected(self, tmp_path, key):
        """Test keys that cannot be safe file names."""
        with pytest.raises(StorageError):
            JsonFileStorage(tmp_path).set(key, "v")

    def test_failed_write_removes_temp_file(self, tmp_path, monkeypatch):
        """Test a write failing after the temp file exists leaves nothing behind."""
        storage = JsonFileStorage(tmp_path)
        storage.set("k", "old")

        def refuse(self, target):
            raise OSError("read-only file system")

        monkeypatch.setattr(Path, "replace", refuse)
        with pytest.raises(StorageError):
            storage.set("k", "new")
        monkeypatch.undo()

        assert sorted(p.name for p in tmp_path.iterdir()) == ["k.json"]
        assert storage.get("k") == "old"

    def test_os_error_wrapped(self, tmp_path):
        """Test filesystem failures surface as StorageError."""
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory", encoding="utf-8")

        with pytest.raises(StorageError) as exc_info:
            JsonFileStorage(blocker).set("k", "v")
        assert isinstance(exc_info.value.__cause__, OSError)


class TestInMemoryStorage:
    """Tests for the in-memory backend."""

    def test_implements_interface(self):
        """Test both backends share the abstract interface."""
        assert isinstance(InMemoryStorage(), KeyValueStorageInterface)

    def test_initial_values(self):
        """Test the storage can be pre-populated."""
        storage = InMemoryStorage({"k": "v"})
        assert storage.get("k") == "v"
        assert storage.keys() == ["k"]

    def test_initial_dict_is_copied(self):
        """Test the caller's dict is not shared."""
        initial = {"k": "v"}
        storage = InMemoryStorage(initial)
        storage.set("other", "x")
        assert "other" not in initial

    def test_delete(self):
        """Test delete semantics match the file backend."""
        storage = InMemoryStorage({"k": "v"})
        assert storage.delete("k") is True
        assert storage.delete("k") is False

    def test_invalid_key_rejected(self):
        """Test key rules match the file backend."""
        with pytest.raises(StorageError):
            InMemoryStorage().get("a/b")
