"""Detection of the provider report layout from its header row."""

import logging

from src.import_.dynamic.field_mapping import normalize_header
from src.import_.reports.models import ProviderReportType

logger = logging.getLogger(__name__)

DETAILS_HEADERS = [
    "provider id",
    "first name",
    "last name",
    "pt license",
    "state of licensure",
    "email address",
    "mobile phone",
    "emergency contact",
    "address",
    "borough",
    "service area zip codes",
    "position",
    "rate",
    "payment type",
    "general availability",
    "availability days",
    "availability timings from",
    "availability timings till",
    "start date",
    "status",
    "notes",
]

INSURANCE_HEADERS = [
    "provider id",
    "provider name",
    "insurance name",
    "credentialing status",
    "date approved/denied",
    "notes/follow-up",
]

MIN_DETAILS_MATCHES = 5
MIN_INSURANCE_MATCHES = 3


def detect_provider_report_type(headers: list[str]) -> ProviderReportType:
    """
    Identify a provider report from its headers.

    The availability report is positional: its first column is the provider
    name and it has an availability column but no first name or insurance
    columns. Otherwise a report is a details report when at least 5 known
    details headers occur, an insurance (credentialing) report when at least
    3 known insurance headers occur, and without enough matches key header
    pairs decide.
    """
    header_text = "|".join(headers).lower()
    first_header = normalize_header(headers[0]) if headers else ""

    if (
        first_header in ("name", "provider name")
        and "availability" in header_text
        and "first name" not in header_text
        and "insurance name" not in header_text
    ):
        return ProviderReportType.AVAILABILITY

    details_matches = sum(1 for h in DETAILS_HEADERS if h in header_text)
    insurance_matches = sum(1 for h in INSURANCE_HEADERS if h in header_text)
    logger.debug(
        "Provider report header matches: details=%d insurance=%d",
        details_matches,
        insurance_matches,
    )

    if details_matches >= MIN_DETAILS_MATCHES:
        return ProviderReportType.DETAILS
    if insurance_matches >= MIN_INSURANCE_MATCHES:
        return ProviderReportType.INSURANCE
    if "first name" in header_text and "last name" in header_text:
        return ProviderReportType.DETAILS
    if "insurance name" in header_text and "credentialing status" in header_text:
        return ProviderReportType.INSURANCE
    return ProviderReportType.UNKNOWN
