"""Lenient date parsing for values coming out of CSV files and stored records."""

from datetime import date, datetime, timezone

_DATE_FORMATS = (
    "%Y-%m-%d",  # "2026-01-22"
    "%m/%d/%Y",  # "1/22/2026"
    "%m/%d/%y",  # "1/22/26"
    "%m-%d-%Y",  # "01-22-2026"
    "%d-%b-%y",  # "22-Jan-26"
    "%b %d, %Y",  # "Jan 22, 2026"
    "%B %d, %Y",  # "January 22, 2026"
    "%m/%d/%Y %H:%M",  # "1/22/2026 12:00"
    "%m/%d/%y %H:%M",  # "1/22/26 12:00"
    "%m/%d/%Y %I:%M %p",  # "1/22/2026 12:00 PM"
)


def parse_datetime(value: object) -> datetime | None:
    """
    Parse a timestamp or calendar date into an aware UTC datetime.

    Accepts ISO 8601 strings (with or without time and offset, including a
    trailing ``Z``), the US-style formats common in spreadsheet exports, and
    ``date``/``datetime`` objects. Naive values are taken as UTC.

    Returns:
        Parsed datetime, or None if the value is not recognizable
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    elif isinstance(value, str) and value.strip():
        parsed = _parse_string(value.strip())
        if parsed is None:
            return None
    else:
        return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def parse_date(value: object) -> date | None:
    """Parse a value into a calendar date, or None if unrecognizable."""
    if isinstance(value, date) and not isinstance(value, datetime):
        return value
    if isinstance(value, str) and value.strip():
        # Keep the written calendar day; do not shift through UTC.
        parsed = _parse_string(value.strip())
        return parsed.date() if parsed else None
    parsed = parse_datetime(value)
    return parsed.date() if parsed else None


def _parse_string(text: str) -> datetime | None:
    iso_text = text[:-1] + "+00:00" if text.endswith("Z") else text
    try:
        return datetime.fromisoformat(iso_text)
    except ValueError:
        pass

    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue
    return None


def utc_now_iso() -> str:
    """Current time as an ISO 8601 UTC timestamp."""
    return datetime.now(timezone.utc).isoformat()
