"""
Repository over a persisted record collection.

Records are heterogeneous dicts (CSV imports carry arbitrary columns), so the
repository only relies on the ``id`` field. Ids may be strings or numbers in
stored data and are compared as strings.
"""

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from src.services.storage_service import KeyValueStore

Record = dict[str, Any]

PATIENTS_COLLECTION = "patients"
PROVIDERS_COLLECTION = "providers"
IMPORT_HISTORY_COLLECTION = "import_history"


class RecordRepository:
    """Read and write one collection of records in a key-value store."""

    def __init__(self, store: KeyValueStore, collection: str):
        self.store = store
        self.collection = collection

    @contextmanager
    def locked(self) -> Iterator[None]:
        """Hold the collection lock for a read-modify-write sequence."""
        with self.store.lock(self.collection):
            yield

    def list_all(self) -> list[Record]:
        data = self.store.get(self.collection, [])
        if not isinstance(data, list):
            return []
        return [r for r in data if isinstance(r, dict)]

    def get(self, record_id: Any) -> Record | None:
        """Find a record by id. Returns None when no record matches."""
        wanted = str(record_id)
        for record in self.list_all():
            if str(record.get("id")) == wanted:
                return record
        return None

    def upsert(self, record: Record) -> Record:
        """Replace the record with the same id, or append it."""
        with self.locked():
            records = self.list_all()
            wanted = str(record.get("id"))
            for index, existing in enumerate(records):
                if str(existing.get("id")) == wanted:
                    records[index] = record
                    break
            else:
                records.append(record)
            self.store.set(self.collection, records)
        return record

    def delete(self, record_id: Any) -> bool:
        """Remove a record by id. Returns True if a record was removed."""
        with self.locked():
            records = self.list_all()
            wanted = str(record_id)
            remaining = [r for r in records if str(r.get("id")) != wanted]
            if len(remaining) == len(records):
                return False
            self.store.set(self.collection, remaining)
        return True

    def replace_all(self, records: list[Record]) -> None:
        """Persist the full collection in one write."""
        with self.locked():
            self.store.set(self.collection, records)

    def clear(self) -> int:
        """Remove every record. Returns the number removed."""
        with self.locked():
            count = len(self.list_all())
            self.store.remove(self.collection)
        return count
