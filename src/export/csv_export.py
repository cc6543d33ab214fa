"""
CSV export of persisted records.

The inverse of the roster import: canonical fields become columns in their
import order, followed by any other fields the records carry.
"""

import csv
import io
import json
from typing import Any

from src.import_.dynamic.field_mapping import canonical_fields
from src.import_.dynamic.models import Record, RecordType
from src.scheduling.utilization import utilization_summary

# Fields kept out of exports besides internal ``_``-prefixed ones.
EXCLUDED_FIELDS = ("utilizationStats",)

UTILIZATION_REPORT_COLUMNS = [
    "Provider Name",
    "Borough",
    "Contact",
    "Email",
    "Available Hours",
    "Scheduled Hours",
    "Utilization %",
    "Status",
    "Last Updated",
]

NOT_AVAILABLE = "N/A"


def _exported(key: str) -> bool:
    return not key.startswith("_") and key not in EXCLUDED_FIELDS


def export_columns(records: list[Record], record_type: RecordType) -> list[str]:
    """Canonical fields first, then remaining fields in first-seen order."""
    columns = ["id"] + [f for f in canonical_fields(record_type) if f != "id"]
    for record in records:
        for key in record:
            if key not in columns:
                columns.append(key)
    return [c for c in columns if _exported(c)]


def format_cell(value: Any) -> str:
    """
    Flatten a field value into one CSV cell.

    Lists are joined with ", ", a structured availability schedule is
    written as its source text and other objects as JSON.
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, list):
        return ", ".join(format_cell(v) for v in value)
    if isinstance(value, dict):
        if "schedule" in value and "notes" in value:
            return str(value.get("notes") or "")
        return json.dumps(value, sort_keys=True)
    return str(value)


def _write_csv(header: list[str], rows: list[list[str]]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(header)
    writer.writerows(rows)
    return buffer.getvalue()


def export_records_csv(records: list[Record], record_type: RecordType) -> str:
    """
    Render records as CSV text with every field quoted.

    Args:
        records: Records of one collection
        record_type: Decides the canonical column order

    Returns:
        CSV text, header row first
    """
    columns = export_columns(records, record_type)
    rows = [[format_cell(record.get(column)) for column in columns] for record in records]
    return _write_csv(columns, rows)


def export_utilization_report_csv(providers: list[Record]) -> str:
    """Render the utilization report of active providers as CSV text."""
    summary = utilization_summary(providers)
    rows = [
        [
            row.name,
            row.borough or NOT_AVAILABLE,
            row.contact or NOT_AVAILABLE,
            row.email or NOT_AVAILABLE,
            format_cell(row.available_hours),
            format_cell(row.scheduled_hours),
            format_cell(row.utilization_percentage),
            row.status,
            (row.last_calculated or "")[:10] or NOT_AVAILABLE,
        ]
        for row in summary.providers
    ]
    return _write_csv(UTILIZATION_REPORT_COLUMNS, rows)
