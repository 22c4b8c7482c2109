"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for storage operations.
This allows us to:
1. Keep the ledger in a local JSON file today
2. Use in-memory storage for testing
3. Swap in another key-value backend later
4. Keep business logic decoupled from storage implementation

The interface is intentionally tiny. The engine writes the whole ledger as
one serialized snapshot under a fixed key, so a key-value store with
load/save/remove is all it needs.
"""

from abc import ABC, abstractmethod
from typing import Optional


class SnapshotStorageInterface(ABC):
    """
    Abstract interface for snapshot storage.

    Any storage implementation (JSON file, in-memory, ...)
    must implement these methods.
    """

    @abstractmethod
    def load(self, key: str) -> Optional[str]:
        """
        Read the value stored under a key.

        Args:
            key: Storage namespace

        Returns:
            The stored string, or None if nothing was ever saved

        Raises:
            StorageError: If the backend cannot be read
        """
        pass

    @abstractmethod
    def save(self, key: str, value: str) -> None:
        """
        Store a value under a key, replacing any previous value.

        Args:
            key: Storage namespace
            value: Serialized snapshot

        Raises:
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    def remove(self, key: str) -> bool:
        """
        Delete the value stored under a key.

        Args:
            key: Storage namespace

        Returns:
            True if a value was removed, False if there was none

        Raises:
            StorageError: If the backend cannot be written
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class CorruptSnapshotError(StorageError):
    """The stored snapshot could not be parsed."""
    pass


class PersistenceError(StorageError):
    """
    Saving the ledger failed after the in-memory state was already changed.

    The engine's memory and the store now disagree. The caller must either
    retry the save or reload the persisted state.
    """

    def __init__(self, message: str, storage_key: str):
        super().__init__(message)
        self.storage_key = storage_key
