"""
Provider details report.

One row per provider with demographics, licensure, service area and
availability. Availability is given either as prose ("General Availability")
or as selected days plus a from/till time; both become a weekly schedule.
"""

from src.exceptions import RowError
from src.import_.dynamic.models import Record
from src.import_.dynamic.post_process import split_list_field
from src.import_.reports.models import ReportRow, RowOutcome
from src.import_.reports.providers import find_provider_index, new_provider
from src.scheduling.availability import parse_availability_schedule

# Fields an update must not replace on an existing provider.
PRESERVED_FIELDS = ("id", "dateCreated")


def _availability_text(general: str, days: list[str], time_from: str, time_till: str) -> str:
    if general:
        return general
    if not days:
        return ""
    text = ", ".join(days)
    if time_from and time_till:
        text = f"{text} {time_from}-{time_till}"
    return text


def apply_details_row(providers: list[Record], row: ReportRow, now: str) -> RowOutcome:
    """
    Apply one details row to the provider list in place.

    Providers are matched by external provider id, then by full name. A
    matched provider keeps its id and creation date; every other field the
    report carries is replaced.

    Raises:
        RowError: If the row has no first or last name
    """
    first_name = row.get("First Name")
    last_name = row.get("Last Name")
    full_name = f"{first_name} {last_name}".strip()
    if not full_name:
        raise RowError(row.line_number, "Provider name is required")

    provider_id = row.get("Provider ID")
    license_number = row.get("PT License #", "PT License", "License")
    position = row.get("Position")
    zip_codes = row.get("Service Area Zip Codes (Comma Separated)", "Service Area Zip Codes")
    days = split_list_field(
        row.get("Availability Days (Select All Available)", "Availability Days")
    )
    time_from = row.get("Availability Timings from")
    time_till = row.get("Availability Timings till")
    general = row.get("General Availability")

    schedule = parse_availability_schedule(
        _availability_text(general, days, time_from, time_till)
    )
    notes = row.get("Notes")

    data: Record = {
        "providerId": provider_id,
        "name": full_name,
        "firstName": first_name,
        "lastName": last_name,
        "specialty": position or "PT",
        "position": position,
        "license": license_number,
        "licenseState": row.get("State of Licensure"),
        "email": row.get("Email Address", "Email"),
        "phone": row.get("Mobile Phone", "Phone"),
        "address": row.get("Address"),
        "borough": row.get("Borough (Select All Available)", "Borough"),
        "serviceZipCodes": split_list_field(zip_codes),
        "rate": row.get("Rate"),
        "paymentType": row.get("Payment Type"),
        "availability": schedule.to_dict(),
        "availabilityDays": days,
        "availabilityFrom": time_from,
        "availabilityTill": time_till,
        "startDate": row.get("Start Date"),
        "status": (row.get("Status") or "active").lower(),
        "notes": [notes] if notes else [],
        "emergencyContactName": row.get("Emergency Contact Name"),
        "emergencyContactPhone": row.get("Emergency Contact Phone"),
    }

    index = find_provider_index(providers, provider_id=provider_id, name=full_name)
    if index is None:
        providers.append(new_provider(now, **data))
        return RowOutcome.IMPORTED

    existing = providers[index]
    updated = {**existing, **data}
    for field in PRESERVED_FIELDS:
        if field in existing:
            updated[field] = existing[field]
    updated["lastModified"] = now
    providers[index] = updated
    return RowOutcome.UPDATED
