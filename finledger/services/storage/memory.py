"""In-memory storage, for tests and throwaway sessions."""

from typing import Optional

from finledger.services.storage.interface import SnapshotStorageInterface


class InMemorySnapshotStorage(SnapshotStorageInterface):
    """Dict-backed key-value store. Nothing survives the process."""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self._data: dict[str, str] = dict(initial or {})
        self.save_count = 0

    def load(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def save(self, key: str, value: str) -> None:
        self._data[key] = value
        self.save_count += 1

    def remove(self, key: str) -> bool:
        return self._data.pop(key, None) is not None
