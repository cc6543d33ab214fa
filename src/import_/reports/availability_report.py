"""
Provider availability report.

The report is positional, one provider per row:

    name, contact number, email, borough, position, rate, payment type,
    availability, general notes

Availability prose is parsed into a weekly schedule and zip codes mentioned in
the notes become the provider's service zip codes.
"""

import logging

from src.import_.dynamic.models import Record
from src.import_.reports.models import ReportRow, RowOutcome
from src.import_.reports.providers import find_provider_index, new_provider
from src.scheduling.availability import extract_zip_codes, parse_availability_schedule

logger = logging.getLogger(__name__)

COLUMNS = (
    "name",
    "contactNumber",
    "email",
    "borough",
    "position",
    "rate",
    "paymentType",
    "availability",
    "generalNotes",
)

# The notes column is optional.
MIN_COLUMNS = 8


def apply_availability_row(providers: list[Record], row: ReportRow, now: str) -> RowOutcome:
    """
    Apply one availability row to the provider list in place.

    Rows with fewer than 8 columns or without a provider name are skipped.
    An existing provider (matched by name) keeps its identity and any field
    the report does not carry.
    """
    if len(row.values) < MIN_COLUMNS:
        logger.warning(
            "Skipping availability row %d: only %d columns", row.line_number, len(row.values)
        )
        return RowOutcome.SKIPPED

    data = dict(zip(COLUMNS, row.values))
    data.setdefault("generalNotes", "")
    if not data["name"]:
        logger.warning("Skipping availability row %d: missing provider name", row.line_number)
        return RowOutcome.SKIPPED

    schedule = parse_availability_schedule(data["availability"])
    update = {
        "contactNumber": data["contactNumber"],
        "email": data["email"],
        "borough": data["borough"],
        "rate": data["rate"],
        "paymentType": data["paymentType"],
        "availability": schedule.to_dict(),
        "zipCodes": extract_zip_codes(data["generalNotes"]),
        "generalNotes": data["generalNotes"],
    }

    index = find_provider_index(providers, name=data["name"])
    if index is not None:
        providers[index] = {**providers[index], **update, "lastModified": now}
        return RowOutcome.UPDATED

    providers.append(
        new_provider(
            now,
            name=data["name"],
            position=data["position"],
            **update,
        )
    )
    return RowOutcome.IMPORTED
