"""Services package."""

from bizbook.services.storage import (
    CorruptedSnapshotError,
    InMemoryStorage,
    JsonFileStorage,
    KeyValueStorageInterface,
    StorageError,
)

__all__ = [
    # Storage services
    "CorruptedSnapshotError",
    "InMemoryStorage",
    "JsonFileStorage",
    "KeyValueStorageInterface",
    "StorageError",
]
