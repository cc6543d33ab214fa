"""
CSV parser for roster exports of unknown layout.

Maps every column to a canonical field through ``field_mapping`` and turns
each data row into a normalized record.
"""

import csv
import logging
import re

from src.exceptions import RowError, ValidationError
from src.import_.dynamic.field_mapping import detect_csv_type, find_field_match
from src.import_.dynamic.models import (
    FieldMapping,
    ImportType,
    ParseResult,
    Record,
    RecordType,
    RowFailure,
)
from src.import_.dynamic.post_process import post_process_record

logger = logging.getLogger(__name__)

_LINE_BREAK = re.compile(r"\r?\n")


def parse_csv_line(line: str) -> list[str]:
    """
    Split one CSV line into trimmed fields.

    Handles double-quoted fields, commas inside quotes and ``""`` escapes.
    Malformed quoting never raises: an unterminated quote runs to the end of
    the line and whatever was read is returned.

    Examples:
        'a, "b, c" ,d'        -> ["a", "b, c", "d"]
        '"say ""hi"" x",y'    -> ['say "hi" x', "y"]
        '"unterminated, tail' -> ["unterminated, tail"]
    """
    try:
        fields = next(csv.reader([line], skipinitialspace=True), [""])
    except csv.Error as e:
        logger.warning("Falling back to plain split for malformed CSV line: %s", e)
        fields = line.split(",")
    return [field.strip() for field in fields]


def parse_csv(
    csv_text: str,
    record_type: ImportType | RecordType | str = ImportType.AUTO,
) -> ParseResult:
    """
    Parse CSV text into canonical records.

    Args:
        csv_text: Raw CSV content; the first non-blank line is the header
        record_type: "patients", "providers" or "auto" to detect from headers

    Returns:
        ParseResult with headers, column mapping, records and failed rows

    Raises:
        ValidationError: If there is no header row plus at least one data row
    """
    lines = [line for line in _LINE_BREAK.split(csv_text or "") if line.strip()]
    if len(lines) < 2:
        raise ValidationError("CSV must have at least a header row and one data row")

    headers = parse_csv_line(lines[0])
    logger.info("Detected CSV headers: %s", headers)

    try:
        requested = ImportType(getattr(record_type, "value", record_type))
    except ValueError as e:
        raise ValidationError(f"Unknown record type: {record_type}") from e

    if requested == ImportType.AUTO:
        resolved_type = detect_csv_type(headers)
        logger.info("Auto-detected CSV type: %s", resolved_type.value)
    else:
        resolved_type = RecordType(requested.value)

    field_map: dict[int, FieldMapping] = {}
    for index, header in enumerate(headers):
        field = find_field_match(header, resolved_type) or f"column_{index + 1}"
        field_map[index] = FieldMapping(original_header=header, field=field)

    records: list[Record] = []
    errors: list[RowFailure] = []

    for line_number, line in enumerate(lines[1:], start=2):
        values = parse_csv_line(line)
        record: Record = {"_originalRow": line_number}
        for index, value in enumerate(values):
            mapping = field_map.get(index)
            if mapping:
                record[mapping.field] = value.strip() if value else ""

        try:
            records.append(post_process_record(record, resolved_type))
        except RowError as e:
            logger.warning("Skipping CSV row %d: %s", line_number, e.message)
            errors.append(RowFailure(row=line_number, error=e.message))

    logger.info(
        "Parsed %d %s records (%d rows rejected)",
        len(records),
        resolved_type.value,
        len(errors),
    )
    return ParseResult(
        headers=headers,
        field_map=field_map,
        records=records,
        type=resolved_type,
        errors=errors,
    )
