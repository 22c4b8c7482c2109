"""
JSON File Storage Implementation

DESIGN DECISION: A single local JSON file is used as the key-value store
because:
1. The ledger belongs to one person on one machine
2. No database setup required
3. The file can be read, copied and backed up by hand

TRADEOFFS:
- The whole document is rewritten on every save (fine for personal use)
- No cross-process locking (one engine per store)

Writes go to a temporary file in the same directory and are moved into
place with os.replace, so a crash mid-write never leaves a truncated store.
Transient OS errors are retried.
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Optional

from tenacity import (
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from finledger.config import get_settings
from finledger.services.storage.interface import (
    SnapshotStorageInterface,
    StorageError,
)


class JsonFileSnapshotStorage(SnapshotStorageInterface):
    """
    Key-value store kept in one JSON document on disk.

    The document maps each key to its stored string value:
        {"finance_app_data_v2": "{\"accounts\": [...], ...}"}
    """

    def __init__(
        self,
        path: Optional[Path] = None,
        retry_attempts: Optional[int] = None,
    ):
        settings = get_settings()
        self._path = Path(path) if path is not None else settings.storage_path
        self._retry_attempts = retry_attempts or settings.save_retry_attempts

    @property
    def path(self) -> Path:
        return self._path

    def _read_document(self) -> dict[str, str]:
        """Read the whole store. A missing file is an empty store."""
        try:
            raw = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except OSError as e:
            raise StorageError(f"Failed to read store {self._path}: {e}")

        if not raw.strip():
            return {}

        try:
            document = json.loads(raw)
        except json.JSONDecodeError as e:
            raise StorageError(f"Store {self._path} is not valid JSON: {e}")

        if not isinstance(document, dict):
            raise StorageError(f"Store {self._path} must contain a JSON object")
        return document

    def _write_once(self, document: dict[str, str]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=self._path.parent,
            prefix=f".{self._path.name}.",
            suffix=".tmp",
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(document, fh, ensure_ascii=False)
                fh.flush()
                os.fsync(fh.fileno())
            os.replace(tmp_name, self._path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def _write_document(self, document: dict[str, str]) -> None:
        retrying = Retrying(
            stop=stop_after_attempt(self._retry_attempts),
            wait=wait_exponential(multiplier=0.1, min=0.1, max=1),
            retry=retry_if_exception_type(OSError),
            reraise=True,
        )
        try:
            retrying(self._write_once, document)
        except OSError as e:
            raise StorageError(f"Failed to write store {self._path}: {e}")

    def load(self, key: str) -> Optional[str]:
        """Read the value stored under a key."""
        value = self._read_document().get(key)
        if value is not None and not isinstance(value, str):
            raise StorageError(f"Value under {key!r} in {self._path} is not a string")
        return value

    def save(self, key: str, value: str) -> None:
        """Store a value under a key, keeping every other key as it is."""
        document = self._read_document()
        document[key] = value
        self._write_document(document)

    def remove(self, key: str) -> bool:
        """Delete the value stored under a key."""
        document = self._read_document()
        if key not in document:
            return False
        del document[key]
        self._write_document(document)
        return True
