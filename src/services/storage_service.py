"""
Key-value storage for Carelink collections.

Every logical collection (patients, providers, import history) is held as a
single JSON document under its own key. Writers replace the whole document,
so callers doing read-modify-write must hold the key's lock.
"""

import json
import logging
import os
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any
from uuid import uuid4

from src.exceptions import StorageError

logger = logging.getLogger(__name__)


class KeyValueStore(ABC):
    """Opaque key-value store holding JSON-serializable values."""

    def __init__(self) -> None:
        self._locks: dict[str, threading.RLock] = {}
        self._locks_guard = threading.Lock()

    def lock(self, key: str) -> threading.RLock:
        """Return the re-entrant lock guarding a key."""
        with self._locks_guard:
            if key not in self._locks:
                self._locks[key] = threading.RLock()
            return self._locks[key]

    @abstractmethod
    def get(self, key: str, default: Any = None) -> Any:
        """Read the value stored under a key, or default if absent."""

    @abstractmethod
    def set(self, key: str, value: Any) -> None:
        """Replace the value stored under a key."""

    @abstractmethod
    def remove(self, key: str) -> bool:
        """Delete a key. Returns True if it existed."""

    @abstractmethod
    def keys(self) -> list[str]:
        """List stored keys."""

    def is_writable(self) -> bool:
        """Check that the store accepts writes."""
        return True


class MemoryStore(KeyValueStore):
    """In-process store. Values are JSON round-tripped to mimic disk storage."""

    def __init__(self) -> None:
        super().__init__()
        self._data: dict[str, str] = {}

    def get(self, key: str, default: Any = None) -> Any:
        raw = self._data.get(key)
        if raw is None:
            return default
        return json.loads(raw)

    def set(self, key: str, value: Any) -> None:
        self._data[key] = json.dumps(value)

    def remove(self, key: str) -> bool:
        return self._data.pop(key, None) is not None

    def keys(self) -> list[str]:
        return sorted(self._data)


class JsonFileStore(KeyValueStore):
    """Store keeping one ``<key>.json`` file per key inside a directory."""

    def __init__(self, directory: str | Path) -> None:
        super().__init__()
        self.directory = Path(directory)
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageError(f"Cannot create data directory {self.directory}: {e}") from e

    def _path(self, key: str) -> Path:
        if not key or "/" in key or "\\" in key or key.startswith("."):
            raise StorageError(f"Invalid storage key: {key!r}")
        return self.directory / f"{key}.json"

    def get(self, key: str, default: Any = None) -> Any:
        """
        Read a key from disk.

        Args:
            key: Storage key
            default: Value returned when the key is absent

        Returns:
            Decoded JSON value

        Raises:
            StorageError: If the file exists but cannot be read or decoded
        """
        path = self._path(key)
        if not path.exists():
            return default
        try:
            with path.open(encoding="utf-8") as f:
                return json.load(f)
        except (OSError, ValueError) as e:
            raise StorageError(f"Failed to read {key}: {e}") from e

    def set(self, key: str, value: Any) -> None:
        """
        Write a key to disk.

        The value is written to a temporary file first and moved into place,
        so readers never see a half-written document.

        Args:
            key: Storage key
            value: JSON-serializable value

        Raises:
            StorageError: If the value cannot be serialized or written
        """
        path = self._path(key)
        tmp_path = path.with_name(f".{path.name}.{uuid4().hex[:8]}.tmp")
        try:
            with tmp_path.open("w", encoding="utf-8") as f:
                json.dump(value, f, ensure_ascii=False)
            os.replace(tmp_path, path)
        except (OSError, TypeError, ValueError) as e:
            tmp_path.unlink(missing_ok=True)
            raise StorageError(f"Failed to write {key}: {e}") from e
        logger.debug("Wrote %s to %s", key, path)

    def remove(self, key: str) -> bool:
        """
        Delete a key from disk.

        Returns:
            True if deleted, False if not found
        """
        path = self._path(key)
        try:
            path.unlink()
            return True
        except FileNotFoundError:
            return False
        except OSError as e:
            raise StorageError(f"Failed to remove {key}: {e}") from e

    def keys(self) -> list[str]:
        return sorted(p.stem for p in self.directory.glob("*.json"))

    def is_writable(self) -> bool:
        """Check that the data directory accepts writes."""
        return os.access(self.directory, os.W_OK)
