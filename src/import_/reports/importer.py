"""
Provider report importer.

Orchestrates the provider report import flow:
1. Split the CSV and detect the report layout (unless given)
2. Apply each data row to the persisted provider set, collecting row errors
3. Recalculate utilization when availability changed
4. Persist the provider set in a single write
"""

import logging
import re
from collections.abc import Callable

from src.exceptions import RowError, ValidationError
from src.import_.dynamic.models import Record, RowFailure
from src.import_.reports.availability_report import apply_availability_row
from src.import_.reports.credentialing_report import apply_credentialing_row
from src.import_.reports.detection import detect_provider_report_type
from src.import_.reports.details_report import apply_details_row
from src.import_.reports.models import (
    ProviderReportType,
    ReportImportResult,
    ReportRow,
    RowOutcome,
    read_report_rows,
)
from src.scheduling.utilization import calculate_all_provider_utilization
from src.services.record_repository import (
    PATIENTS_COLLECTION,
    PROVIDERS_COLLECTION,
    RecordRepository,
)
from src.services.storage_service import KeyValueStore
from src.utils.dates import utc_now_iso

logger = logging.getLogger(__name__)

RowHandler = Callable[[list[Record], ReportRow, str], RowOutcome]

ROW_HANDLERS: dict[ProviderReportType, RowHandler] = {
    ProviderReportType.DETAILS: apply_details_row,
    ProviderReportType.INSURANCE: apply_credentialing_row,
    ProviderReportType.AVAILABILITY: apply_availability_row,
}

# Reports that change availability, after which utilization is stale.
RECALCULATE_UTILIZATION = (ProviderReportType.DETAILS, ProviderReportType.AVAILABILITY)

_LINE_BREAK = re.compile(r"\r?\n")


class ProviderReportImporter:
    """Imports the provider details, credentialing and availability reports."""

    def __init__(self, store: KeyValueStore):
        self.providers = RecordRepository(store, PROVIDERS_COLLECTION)
        self.patients = RecordRepository(store, PATIENTS_COLLECTION)

    def import_report(
        self,
        csv_text: str,
        report_type: ProviderReportType | str | None = None,
    ) -> ReportImportResult:
        """
        Import a provider report into the persisted provider set.

        Args:
            csv_text: Raw CSV content, header row first
            report_type: Report layout; detected from the headers when omitted

        Returns:
            ReportImportResult with counts and row errors

        Raises:
            ValidationError: If the CSV has no data row or the layout is not
                a known provider report
        """
        lines = [line for line in _LINE_BREAK.split(csv_text or "") if line.strip()]
        if len(lines) < 2:
            raise ValidationError("CSV must have at least a header row and one data row")

        headers, rows = read_report_rows(lines)
        resolved = self._resolve_type(headers, report_type)
        handler = ROW_HANDLERS[resolved]
        result = ReportImportResult(report_type=resolved)
        now = utc_now_iso()

        with self.providers.locked():
            providers = self.providers.list_all()

            for row in rows:
                try:
                    outcome = handler(providers, row, now)
                except RowError as e:
                    logger.warning(
                        "Skipping %s row %d: %s", resolved.value, row.line_number, e.message
                    )
                    result.errors.append(RowFailure(row=row.line_number, error=e.message))
                    continue

                if outcome == RowOutcome.IMPORTED:
                    result.imported += 1
                elif outcome == RowOutcome.UPDATED:
                    result.updated += 1
                else:
                    result.skipped += 1

            if resolved in RECALCULATE_UTILIZATION:
                providers = calculate_all_provider_utilization(
                    providers, self.patients.list_all()
                )

            self.providers.replace_all(providers)

        result.total = len(providers)
        logger.info(
            "Imported %s report: imported=%d updated=%d skipped=%d errors=%d",
            resolved.value,
            result.imported,
            result.updated,
            result.skipped,
            len(result.errors),
        )
        return result

    def _resolve_type(
        self,
        headers: list[str],
        report_type: ProviderReportType | str | None,
    ) -> ProviderReportType:
        if report_type:
            try:
                resolved = ProviderReportType(getattr(report_type, "value", report_type))
            except ValueError as e:
                raise ValidationError(f"Unknown provider report type: {report_type}") from e
        else:
            resolved = detect_provider_report_type(headers)
            logger.info("Detected provider report type: %s", resolved.value)

        if resolved == ProviderReportType.UNKNOWN:
            raise ValidationError(
                "Unrecognized provider report; expected a provider details, "
                "insurance or availability report"
            )
        return resolved
