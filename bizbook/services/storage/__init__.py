"""
Storage Services Package

Provides the abstract key-value interface and its local implementations.
"""

from bizbook.services.storage.interface import (
    CorruptedSnapshotError,
    KeyValueStorageInterface,
    StorageError,
)
from bizbook.services.storage.local import InMemoryStorage, JsonFileStorage

__all__ = [
    # Interfaces
    "KeyValueStorageInterface",
    # Exceptions
    "CorruptedSnapshotError",
    "StorageError",
    # Implementations
    "InMemoryStorage",
    "JsonFileStorage",
]
