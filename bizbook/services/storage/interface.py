"""
Abstract Storage Interface

DESIGN DECISION: The stores persist through an abstract key-value interface.
This allows us to:
1. Keep snapshots in JSON files on disk
2. Use in-memory storage for testing
3. Swap in another durable medium later without touching the stores

The interface is intentionally tiny: synchronous get/set/delete of an
opaque string value under an opaque string key. The stores decide what
the value looks like (a JSON snapshot).
"""

from abc import ABC, abstractmethod
from typing import Optional


class KeyValueStorageInterface(ABC):
    """
    Abstract interface for durable key-value storage.

    Any storage implementation must implement these methods.
    Values survive process restarts for file-backed implementations.
    """

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """
        Read the value stored under a key.

        Args:
            key: Snapshot key (e.g. 'finance-storage')

        Returns:
            The stored string, or None if nothing was ever written

        Raises:
            StorageError: If the medium cannot be read
        """
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """
        Replace the value stored under a key.

        Args:
            key: Snapshot key
            value: Serialized snapshot

        Raises:
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    def delete(self, key: str) -> bool:
        """
        Remove a key.

        Returns:
            True if something was removed, False if the key was absent
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class CorruptedSnapshotError(StorageError):
    """A stored snapshot could not be decoded into store state."""
    pass
