"""
Direct writes to patient and provider records.

Records created or replaced through the API go through the same
normalization as imported CSV rows, so they always carry an id, a display
name, a status and timestamps.
"""

import logging
from typing import Any

from src.exceptions import RecordConflictError, RowError, ValidationError
from src.import_.dynamic.models import RecordType
from src.import_.dynamic.post_process import post_process_record
from src.services.record_repository import Record, RecordRepository

logger = logging.getLogger(__name__)

# Maintained here, never taken from a request body.
SERVICE_FIELDS = ("dateCreated", "lastModified")


class RecordService:
    """Create and replace records of one type."""

    def __init__(self, repository: RecordRepository, record_type: RecordType):
        self.repository = repository
        self.record_type = record_type

    def _normalize(self, data: dict[str, Any]) -> Record:
        record = {k: v for k, v in data.items() if not k.startswith("_")}
        try:
            return post_process_record(record, self.record_type)
        except RowError as e:
            raise ValidationError(f"Record has {e.message}") from e

    def create(self, data: dict[str, Any]) -> Record:
        """
        Add a new record.

        An id is generated unless the body brings one (or, for providers, a
        providerId).

        Raises:
            ValidationError: If the record has no identifying value
            RecordConflictError: If a record with that id already exists
        """
        record = self._normalize({k: v for k, v in data.items() if k not in SERVICE_FIELDS})

        with self.repository.locked():
            if self.repository.get(record["id"]) is not None:
                raise RecordConflictError(f"Record {record['id']} already exists")
            self.repository.upsert(record)

        logger.info("Created %s record %s", self.record_type.value, record["id"])
        return record

    def replace(self, record_id: str, data: dict[str, Any]) -> Record | None:
        """
        Replace a record's fields, keeping its id and creation date.

        Returns:
            The stored record, or None if no record has that id

        Raises:
            ValidationError: If the new body has no identifying value
        """
        with self.repository.locked():
            existing = self.repository.get(record_id)
            if existing is None:
                return None

            body = {k: v for k, v in data.items() if k not in SERVICE_FIELDS}
            body["id"] = existing.get("id")
            body["dateCreated"] = existing.get("dateCreated")
            record = self._normalize(body)
            self.repository.upsert(record)

        logger.info("Replaced %s record %s", self.record_type.value, record_id)
        return record
