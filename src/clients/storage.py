"""Dependency injection provider for the key-value store."""

import os

from src.services.storage_service import JsonFileStore, KeyValueStore
from src.settings import settings

_store: KeyValueStore | None = None


def get_store() -> KeyValueStore:
    """Get or create the JsonFileStore singleton."""
    global _store
    if _store is None:
        # In tests, we'll override this dependency
        if os.getenv("PYTEST_CURRENT_TEST"):
            raise RuntimeError(
                "KeyValueStore should be replaced in tests via dependency override"
            )
        _store = JsonFileStore(settings.data_dir)
    return _store
