"""
Fuzzy mapping of CSV header spellings to canonical record fields.

Spreadsheet exports name the same column many ways ("Mobile Phone", "cell",
"phone_number"). Each canonical field lists the spellings we know; a header
resolves to the first field (in declaration order) with a matching spelling.
Headers that match nothing are kept as their own field so no column is lost.
"""

import logging
import re

from src.import_.dynamic.models import RecordType

logger = logging.getLogger(__name__)

# Declaration order is the tie-break between fields.
FIELD_MAPPINGS: dict[RecordType, dict[str, list[str]]] = {
    RecordType.PATIENTS: {
        "firstName": ["first name", "firstname", "first_name", "fname"],
        "lastName": ["last name", "lastname", "last_name", "lname"],
        "name": ["name", "patient name", "full name", "patient_name"],
        "phone": ["phone", "phone number", "mobile", "cell", "contact", "phone_number"],
        "email": ["email", "email address", "e-mail", "email_address"],
        "dob": ["dob", "date of birth", "birthdate", "birth_date", "patient dob"],
        "address": ["address", "street address", "home address", "patient address"],
        "city": ["city", "patient city", "address city"],
        "zipCode": ["zip", "zipcode", "zip code", "postal code", "zip_code"],
        "insurance": [
            "insurance",
            "primary insurance",
            "insurance company",
            "insurance_company",
        ],
        "status": ["status", "patient status", "current status"],
        "clinic": ["clinic", "clinic name", "facility", "location"],
        "area": ["area", "borough", "neighborhood"],
    },
    RecordType.PROVIDERS: {
        "providerId": ["provider id", "id", "provider_id", "providerid"],
        "firstName": ["first name", "firstname", "first_name", "fname"],
        "lastName": ["last name", "lastname", "last_name", "lname"],
        "name": ["name", "provider name", "full name", "provider_name"],
        "email": ["email", "email address", "e-mail", "email_address"],
        "phone": ["phone", "mobile", "cell", "mobile phone", "phone_number"],
        "license": [
            "license",
            "license number",
            "pt license",
            "license_number",
            "pt license #",
        ],
        "licenseState": ["state", "license state", "state of licensure", "license_state"],
        "specialty": ["specialty", "position", "title", "role", "specialization"],
        "rate": ["rate", "hourly rate", "pay rate", "rate $", "hourly_rate"],
        "status": ["status", "provider status", "current status"],
        "address": ["address", "street address", "home address"],
        # Ahead of borough so "Service Area Zip Codes" is not taken by "area".
        "serviceZipCodes": [
            "zip codes",
            "service zips",
            "service zip codes",
            "service_zip_codes",
        ],
        "borough": ["borough", "area", "region"],
        "availability": ["availability", "general availability", "availability_general"],
        "availabilityDays": ["availability days", "days available", "available_days"],
        "emergencyContactName": ["emergency contact name", "emergency_contact_name"],
        "emergencyContactPhone": ["emergency contact phone", "emergency_contact_phone"],
        "paymentType": ["payment type", "payment_type"],
        "startDate": ["start date", "start_date", "hire date"],
        "notes": ["notes", "comments", "remarks"],
    },
}

_NON_WORD = re.compile(r"[^\w\s]")
_WHITESPACE = re.compile(r"\s+")


def normalize_header(header: str) -> str:
    """
    Normalize a header for comparison.

    Examples:
        "  PT License # " -> "pt license"
        "E-Mail"          -> "e mail"
        "Zip_Code"        -> "zip_code"
    """
    normalized = str(header).lower().strip()
    normalized = _NON_WORD.sub(" ", normalized)
    normalized = _WHITESPACE.sub(" ", normalized)
    return normalized.strip()


def _normalized_mappings(record_type: RecordType) -> list[tuple[str, list[str]]]:
    return [
        (field, [normalize_header(v) for v in variations])
        for field, variations in FIELD_MAPPINGS.get(record_type, {}).items()
    ]


def find_field_match(header: str, record_type: RecordType) -> str:
    """
    Resolve a CSV header to a canonical field name.

    A variant matches when it equals the normalized header or either contains
    the other. The first field in declaration order with a matching variant
    wins, so "Name" resolves to firstName because "first name" contains it.

    Args:
        header: Header as written in the CSV
        record_type: Table to match against

    Returns:
        Canonical field name, or the normalized header with spaces replaced
        by underscores when nothing matches ("" for a blank header)
    """
    normalized = normalize_header(header)
    if not normalized:
        return ""

    for field, variations in _normalized_mappings(record_type):
        if any(v and (v in normalized or normalized in v) for v in variations):
            return field

    return normalized.replace(" ", "_")


def detect_csv_type(headers: list[str]) -> RecordType:
    """
    Guess whether a CSV holds patients or providers.

    Each record type scores one point per canonical field that has a spelling
    found in some header. The higher score wins; ties go to patients.
    """
    normalized_headers = [normalize_header(h) for h in headers]
    scores: dict[RecordType, int] = {}

    for record_type in (RecordType.PATIENTS, RecordType.PROVIDERS):
        score = 0
        for _field, variations in _normalized_mappings(record_type):
            if any(
                v and any(h == v or v in h for h in normalized_headers)
                for v in variations
            ):
                score += 1
        scores[record_type] = score

    logger.debug(
        "CSV type detection scores: patients=%d providers=%d",
        scores[RecordType.PATIENTS],
        scores[RecordType.PROVIDERS],
    )
    if scores[RecordType.PROVIDERS] > scores[RecordType.PATIENTS]:
        return RecordType.PROVIDERS
    return RecordType.PATIENTS


def canonical_fields(record_type: RecordType) -> list[str]:
    """Canonical field names of a record type, in table order."""
    return list(FIELD_MAPPINGS.get(record_type, {}))
