"""
Dynamic CSV import for patient and provider rosters.

This module handles:
- Fuzzy mapping of arbitrary header spellings to canonical fields
- Detection of the record type from the header row
- Normalization of parsed records
- Duplicate detection and reconciliation against persisted records
"""

from src.import_.dynamic.field_mapping import (
    FIELD_MAPPINGS,
    detect_csv_type,
    find_field_match,
    normalize_header,
)
from src.import_.dynamic.importer import DynamicCSVImporter
from src.import_.dynamic.merge import merge_data, merge_records, resolve_duplicate
from src.import_.dynamic.models import (
    DuplicateStrategy,
    ImportResult,
    ImportType,
    MergeResult,
    ParseResult,
    RecordType,
)
from src.import_.dynamic.parser import parse_csv, parse_csv_line
from src.import_.dynamic.post_process import post_process_record
from src.import_.dynamic.record_keys import record_key

__all__ = [
    "FIELD_MAPPINGS",
    "DuplicateStrategy",
    "DynamicCSVImporter",
    "ImportResult",
    "ImportType",
    "MergeResult",
    "ParseResult",
    "RecordType",
    "detect_csv_type",
    "find_field_match",
    "merge_data",
    "merge_records",
    "normalize_header",
    "parse_csv",
    "parse_csv_line",
    "post_process_record",
    "record_key",
    "resolve_duplicate",
]
