"""Services package."""

from finledger.services.ids import IdGenerator, generate_id
from finledger.services.storage import (
    CorruptSnapshotError,
    InMemorySnapshotStorage,
    JsonFileSnapshotStorage,
    PersistenceError,
    SnapshotStorageInterface,
    StorageError,
)

__all__ = [
    # Identifiers
    "IdGenerator",
    "generate_id",
    # Storage services
    "CorruptSnapshotError",
    "InMemorySnapshotStorage",
    "JsonFileSnapshotStorage",
    "PersistenceError",
    "SnapshotStorageInterface",
    "StorageError",
]
