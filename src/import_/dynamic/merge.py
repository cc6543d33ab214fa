"""
Reconciliation of incoming records against an existing record set.

Incoming records are matched to existing ones by derived key (see
``record_keys``). Unmatched records are appended; matched ones are handled by
the requested duplicate strategy.
"""

import logging
from typing import Any

from src.import_.dynamic.models import DuplicateStrategy, MergeResult, Record, RecordType
from src.import_.dynamic.record_keys import record_key
from src.utils.dates import parse_datetime, utc_now_iso

logger = logging.getLogger(__name__)

# Identity and creation stamp of an existing record survive a merge.
PRESERVED_FIELDS = ("id", "dateCreated")

_DATE_KEY_MARKERS = ("date", "Date", "timestamp")


def _is_empty(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _is_date_key(key: str) -> bool:
    return any(marker in key for marker in _DATE_KEY_MARKERS)


def _union(existing: list[Any], incoming: list[Any]) -> list[Any]:
    merged = list(existing)
    for item in incoming:
        if item not in merged:
            merged.append(item)
    return merged


def _later_date(existing: Any, incoming: Any) -> Any:
    existing_dt = parse_datetime(existing)
    incoming_dt = parse_datetime(incoming)
    if existing_dt is None or incoming_dt is None:
        return incoming
    return incoming if incoming_dt > existing_dt else existing


def merge_records(existing: Record, incoming: Record, now: str | None = None) -> Record:
    """
    Merge an incoming record into an existing one, field by field.

    Rules, per incoming field:
    - empty incoming value: keep existing
    - empty existing value: adopt incoming
    - both lists: union, existing order first
    - date-like field name: keep the later date (incoming if either fails to parse)
    - otherwise: incoming wins

    ``id`` and ``dateCreated`` of the existing record are never replaced, and
    ``lastModified`` is always stamped to the merge time.

    Returns:
        A new merged record; neither input is modified
    """
    merged = dict(existing)

    for key, incoming_value in incoming.items():
        if _is_empty(incoming_value):
            continue

        existing_value = existing.get(key)
        if _is_empty(existing_value):
            merged[key] = incoming_value
            continue

        if key in PRESERVED_FIELDS:
            continue

        if isinstance(existing_value, list) and isinstance(incoming_value, list):
            merged[key] = _union(existing_value, incoming_value)
        elif _is_date_key(key):
            merged[key] = _later_date(existing_value, incoming_value)
        else:
            merged[key] = incoming_value

    merged["lastModified"] = now or utc_now_iso()
    return merged


def resolve_duplicate(
    existing: Record,
    incoming: Record,
    strategy: DuplicateStrategy,
    now: str | None = None,
) -> Record | None:
    """
    Apply a duplicate strategy to a matched pair.

    Returns:
        The record that replaces ``existing``, or None when the strategy
        leaves it untouched
    """
    if strategy == DuplicateStrategy.SKIP:
        return None
    if strategy == DuplicateStrategy.OVERWRITE:
        return {**incoming, "id": existing.get("id")}
    return merge_records(existing, incoming, now=now)


def merge_data(
    existing: list[Record],
    incoming: list[Record],
    record_type: RecordType,
    duplicate_strategy: DuplicateStrategy = DuplicateStrategy.MERGE,
) -> MergeResult:
    """
    Merge incoming records into an existing record set.

    Records appended earlier in the same batch take part in duplicate
    detection, so a file repeating a person yields one record. Rows with
    neither a name nor an email or phone have an empty key and are never
    treated as duplicates.

    Args:
        existing: Current record set (not modified)
        incoming: Parsed and post-processed records
        record_type: Decides the key function
        duplicate_strategy: Handling of matched records

    Returns:
        MergeResult with the full merged set and outcome counts
    """
    result = MergeResult(records=list(existing))
    lookup: dict[str, int] = {}
    now = utc_now_iso()

    for index, record in enumerate(existing):
        key = record_key(record, record_type)
        if key:
            lookup.setdefault(key, index)

    for record in incoming:
        key = record_key(record, record_type)
        index = lookup.get(key) if key else None

        if index is None:
            result.records.append(record)
            if key:
                lookup[key] = len(result.records) - 1
            result.imported += 1
            continue

        replacement = resolve_duplicate(
            result.records[index], record, duplicate_strategy, now=now
        )
        if replacement is None:
            result.skipped += 1
        else:
            result.records[index] = replacement
            result.updated += 1

    logger.debug(
        "Merged %d %s records: imported=%d updated=%d skipped=%d",
        len(incoming),
        record_type.value,
        result.imported,
        result.updated,
        result.skipped,
    )
    return result
