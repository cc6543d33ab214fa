"""
Normalization applied to each parsed CSV record.

Fills in identity and bookkeeping fields so downstream code can rely on
``id``, ``name``/``firstName``/``lastName``, ``status`` and timestamps being
present regardless of which columns the source file had.
"""

import time
from uuid import uuid4

from src.exceptions import RowError
from src.import_.dynamic.models import Record, RecordType
from src.utils.dates import utc_now_iso

# Fields of which at least one must be non-empty for a row to become a record.
IDENTITY_FIELDS = (
    "id",
    "patientId",
    "providerId",
    "name",
    "firstName",
    "lastName",
    "email",
    "phone",
)

LIST_FIELDS = ("serviceZipCodes", "availabilityDays")


def generate_record_id(record_type: RecordType) -> str:
    """Synthesize an id of the form ``{type}_{ms timestamp}_{random}``."""
    return f"{record_type.value}_{int(time.time() * 1000)}_{uuid4().hex[:9]}"


def split_list_field(value: str) -> list[str]:
    """Split a comma-separated cell into trimmed, non-empty items."""
    return [item.strip() for item in value.split(",") if item.strip()]


def post_process_record(record: Record, record_type: RecordType) -> Record:
    """
    Normalize a freshly parsed record in place.

    Args:
        record: Record built from one CSV row (``_originalRow`` already set)
        record_type: Type the CSV was parsed as

    Returns:
        The same record, for chaining

    Raises:
        RowError: If the row has no identifying value at all
    """
    if not any(record.get(f) for f in IDENTITY_FIELDS):
        raise RowError(
            record.get("_originalRow", 0),
            "no identifying value (name, email, phone or id)",
        )

    _ensure_id(record, record_type)
    _reconcile_name(record)

    if record_type == RecordType.PATIENTS:
        record["status"] = record.get("status") or "active"
        record["contactNumber"] = record.get("contactNumber") or record.get("phone") or ""

    elif record_type == RecordType.PROVIDERS:
        for field in LIST_FIELDS:
            if isinstance(record.get(field), str):
                record[field] = split_list_field(record[field])

        record["status"] = record.get("status") or "active"
        record["mobile"] = record.get("mobile") or record.get("phone") or ""
        record["position"] = record.get("position") or record.get("specialty") or ""
        record["specialty"] = record.get("specialty") or record.get("position") or ""

    now = utc_now_iso()
    record["dateCreated"] = record.get("dateCreated") or now
    record["lastModified"] = now
    return record


def _ensure_id(record: Record, record_type: RecordType) -> None:
    if record.get("id"):
        return
    # A type-specific id column doubles as the record id.
    type_id = record.get("providerId") or record.get("patientId")
    record["id"] = type_id or generate_record_id(record_type)


def _reconcile_name(record: Record) -> None:
    first = str(record.get("firstName") or "").strip()
    last = str(record.get("lastName") or "").strip()
    name = str(record.get("name") or "").strip()

    if not name and (first or last):
        record["name"] = f"{first} {last}".strip()
    elif name and not first and not last:
        parts = name.split()
        record["firstName"] = parts[0] if parts else ""
        record["lastName"] = " ".join(parts[1:])
