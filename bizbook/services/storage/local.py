"""
Local Storage Implementations

JsonFileStorage keeps one UTF-8 file per key inside a data directory,
the desktop counterpart of a browser's localStorage. InMemoryStorage
backs tests and the 'memory' backend.

Writes go to a temporary file first and are moved into place with
Path.replace, which is atomic on POSIX.
"""

import re
from pathlib import Path
from typing import Optional

from bizbook.services.storage.interface import KeyValueStorageInterface, StorageError


KEY_PATTERN = re.compile(r"^[A-Za-z0-9_.-]+$")


def _check_key(key: str) -> str:
    if not isinstance(key, str) or not KEY_PATTERN.fullmatch(key) or key in (".", ".."):
        raise StorageError(f"Invalid storage key: {key!r}")
    return key


class JsonFileStorage(KeyValueStorageInterface):
    """File-based key-value storage with crash-safe writes."""

    def __init__(self, base_dir: Path):
        self._base_dir = Path(base_dir)

    @property
    def base_dir(self) -> Path:
        return self._base_dir

    def path_for(self, key: str) -> Path:
        """File holding the value for a key."""
        return self._base_dir / f"{_check_key(key)}.json"

    def get(self, key: str) -> Optional[str]:
        path = self.path_for(key)
        if not path.exists():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except OSError as e:
            raise StorageError(f"Unable to read {path}: {e}") from e

    def set(self, key: str, value: str) -> None:
        path = self.path_for(key)
        temp_path = path.with_suffix(path.suffix + ".tmp")
        try:
            self._base_dir.mkdir(parents=True, exist_ok=True)
            with temp_path.open("w", encoding="utf-8") as handle:
                handle.write(value)
                handle.flush()
            temp_path.replace(path)
        except OSError as e:
            try:
                temp_path.unlink(missing_ok=True)
            except OSError:
                # The write error below is the one reported.
                pass
            raise StorageError(f"Unable to write {path}: {e}") from e

    def delete(self, key: str) -> bool:
        path = self.path_for(key)
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        except OSError as e:
            raise StorageError(f"Unable to delete {path}: {e}") from e
        return True


class InMemoryStorage(KeyValueStorageInterface):
    """Dict-backed storage. Nothing survives the process."""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(_check_key(key))

    def set(self, key: str, value: str) -> None:
        self._data[_check_key(key)] = value

    def delete(self, key: str) -> bool:
        return self._data.pop(_check_key(key), None) is not None

    def keys(self) -> list[str]:
        return list(self._data)
