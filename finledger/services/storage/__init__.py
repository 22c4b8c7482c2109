"""
Storage Services Package

Provides the abstract snapshot storage interface and its implementations.
The JSON file store is the real backend; the in-memory store is for tests.
"""

from finledger.services.storage.interface import (
    CorruptSnapshotError,
    PersistenceError,
    SnapshotStorageInterface,
    StorageError,
)
from finledger.services.storage.json_file import JsonFileSnapshotStorage
from finledger.services.storage.memory import InMemorySnapshotStorage

__all__ = [
    # Interfaces
    "SnapshotStorageInterface",
    # Exceptions
    "CorruptSnapshotError",
    "PersistenceError",
    "StorageError",
    # Implementations
    "InMemorySnapshotStorage",
    "JsonFileSnapshotStorage",
]
