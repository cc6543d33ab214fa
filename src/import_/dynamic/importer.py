"""
Dynamic CSV importer.

Orchestrates the roster import flow:
1. Parse CSV and map headers to canonical fields
2. Merge records into the persisted collection for the detected type
3. Persist the merged collection in a single write
4. Record the outcome in the import history
"""

import logging
from uuid import uuid4

from src.exceptions import ValidationError
from src.import_.dynamic.merge import merge_data
from src.import_.dynamic.models import (
    DuplicateStrategy,
    ImportResult,
    ImportType,
    RecordType,
)
from src.import_.dynamic.parser import parse_csv
from src.services.record_repository import IMPORT_HISTORY_COLLECTION, Record, RecordRepository
from src.services.storage_service import KeyValueStore
from src.settings import settings
from src.utils.dates import utc_now_iso

logger = logging.getLogger(__name__)


class DynamicCSVImporter:
    """Imports patient or provider CSV files of any column layout."""

    def __init__(self, store: KeyValueStore):
        self.store = store
        self.history = RecordRepository(store, IMPORT_HISTORY_COLLECTION)

    def repository(self, record_type: RecordType) -> RecordRepository:
        """Repository of the collection a record type is stored in."""
        return RecordRepository(self.store, record_type.value)

    def import_data(
        self,
        csv_text: str,
        record_type: ImportType | RecordType | str = ImportType.AUTO,
        duplicate_strategy: DuplicateStrategy | str | None = None,
    ) -> ImportResult:
        """
        Import CSV text into the persisted record set.

        Rows that cannot become a record are reported in ``errors`` and the
        rest of the file is still imported. A structurally invalid file
        raises before anything is written.

        Args:
            csv_text: Raw CSV content
            record_type: "patients", "providers" or "auto"
            duplicate_strategy: "skip", "overwrite" or "merge"; defaults to
                the configured strategy

        Returns:
            ImportResult with counts, parsed records, type and headers

        Raises:
            ValidationError: If the CSV has no header row plus data row, or
                the record type is unknown
        """
        requested_strategy = duplicate_strategy or settings.default_duplicate_strategy
        try:
            strategy = DuplicateStrategy(getattr(requested_strategy, "value", requested_strategy))
        except ValueError as e:
            raise ValidationError(f"Unknown duplicate strategy: {requested_strategy}") from e

        parsed = parse_csv(csv_text, record_type)
        repository = self.repository(parsed.type)

        with repository.locked():
            existing = repository.list_all()
            merged = merge_data(existing, parsed.records, parsed.type, strategy)
            repository.replace_all(merged.records)

        result = ImportResult(
            imported=merged.imported,
            updated=merged.updated,
            skipped=merged.skipped,
            records=parsed.records,
            type=parsed.type,
            headers=parsed.headers,
            errors=parsed.errors,
            total=len(merged.records),
            field_map=parsed.field_map,
        )
        self._record_history(result)

        logger.info(
            "Imported %s CSV: imported=%d updated=%d skipped=%d errors=%d",
            result.type.value,
            result.imported,
            result.updated,
            result.skipped,
            len(result.errors),
        )
        return result

    def import_history(self) -> list[Record]:
        """Past imports, oldest first."""
        return self.history.list_all()

    def _record_history(self, result: ImportResult) -> None:
        self.history.upsert(
            {
                "id": uuid4().hex,
                "timestamp": utc_now_iso(),
                "type": result.type.value,
                "recordCount": len(result.records),
                "imported": result.imported,
                "updated": result.updated,
                "skipped": result.skipped,
                "errors": len(result.errors),
            }
        )
