"""
Parsing of free-text provider availability.

Providers describe availability as prose ("Mon to Fri 9am-5pm, flexible",
"Tuesday 10-2 and Saturday mornings"). These helpers turn that into a weekly
schedule. They are best-effort heuristics: nothing here raises on odd input,
unparseable pieces fall back to documented defaults instead.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Any

logger = logging.getLogger(__name__)

DEFAULT_START_HOUR = 9.0
DEFAULT_SHIFT_HOURS = 8.0
DEFAULT_START_TIME = "9:00am"
DEFAULT_END_TIME = "5:00pm"

PLACEHOLDER_TEXT = "availability will be sent soon"
DAY_WINDOW_CHARS = 100

WEEKDAYS = ["Mon", "Tue", "Wed", "Thu", "Fri"]

# Full names are listed before abbreviations; the first hit for a day wins.
DAY_PATTERNS: dict[str, str] = {
    "monday": "Mon",
    "tuesday": "Tue",
    "wednesday": "Wed",
    "thursday": "Thu",
    "friday": "Fri",
    "saturday": "Sat",
    "sunday": "Sun",
    "mon": "Mon",
    "tue": "Tue",
    "wed": "Wed",
    "thu": "Thu",
    "fri": "Fri",
    "sat": "Sat",
    "sun": "Sun",
}

_TIME_RANGE = re.compile(
    r"(\d{1,2}(?::\d{2})?\s*(?:am|pm)?).*?(\d{1,2}(?::\d{2})?\s*(?:am|pm)?)"
)
_TIME = re.compile(r"(\d{1,2})(?::(\d{2}))?")
_ZIP_CODE = re.compile(r"\b\d{5}\b")


@dataclass
class ScheduleEntry:
    """One available block on one weekday."""

    day: str
    start_time: str
    end_time: str
    hours: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "day": self.day,
            "startTime": self.start_time,
            "endTime": self.end_time,
            "hours": self.hours,
        }


@dataclass
class AvailabilitySchedule:
    """Weekly schedule derived from availability text."""

    schedule: list[ScheduleEntry] = field(default_factory=list)
    is_flexible: bool = False
    notes: str = ""

    @property
    def total_weekly_hours(self) -> float:
        """Sum of entry hours, recomputed on every access."""
        return sum(entry.hours for entry in self.schedule)

    def to_dict(self) -> dict[str, Any]:
        """Persisted shape, stored on the provider record."""
        return {
            "schedule": [entry.to_dict() for entry in self.schedule],
            "totalWeeklyHours": self.total_weekly_hours,
            "isFlexible": self.is_flexible,
            "notes": self.notes,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AvailabilitySchedule":
        """
        Rebuild a schedule from its stored shape.

        A stored ``totalWeeklyHours`` is ignored; the total is always derived
        from the entries.
        """
        entries = []
        for raw in data.get("schedule") or []:
            if not isinstance(raw, dict):
                continue
            try:
                hours = float(raw.get("hours") or 0)
            except (TypeError, ValueError):
                hours = 0.0
            entries.append(
                ScheduleEntry(
                    day=str(raw.get("day") or ""),
                    start_time=str(raw.get("startTime") or ""),
                    end_time=str(raw.get("endTime") or ""),
                    hours=hours,
                )
            )
        return cls(
            schedule=entries,
            is_flexible=bool(data.get("isFlexible")),
            notes=str(data.get("notes") or ""),
        )


def parse_time(value: str | None) -> float:
    """
    Parse a clock time into decimal hours (0-24).

    Examples:
        "9"       -> 9.0
        "9:30am"  -> 9.5
        "12am"    -> 0.0
        "12 PM"   -> 12.0
        "5:15pm"  -> 17.25
        "noonish" -> 9.0 (default)
    """
    if not value:
        return DEFAULT_START_HOUR

    clean = re.sub(r"\s+", "", str(value).lower())
    is_pm = "pm" in clean
    is_am = "am" in clean

    match = _TIME.search(clean)
    if not match:
        return DEFAULT_START_HOUR

    hours = int(match.group(1))
    minutes = int(match.group(2) or 0)

    if is_pm and hours != 12:
        hours += 12
    elif is_am and hours == 12:
        hours = 0

    return hours + minutes / 60


def calculate_hours_between(start_time: str | None, end_time: str | None) -> float:
    """
    Hours from start to end, treating an end before the start as overnight.

    Examples:
        ("9am", "5pm")  -> 8.0
        ("10pm", "6am") -> 8.0
    """
    try:
        start = parse_time(start_time)
        end = parse_time(end_time)
    except (TypeError, ValueError) as e:
        logger.warning("Could not compute hours between %r and %r: %s", start_time, end_time, e)
        return DEFAULT_SHIFT_HOURS

    if end < start:
        return (24 - start) + end
    return max(0.0, end - start)


def _entry(day: str, start_time: str, end_time: str) -> ScheduleEntry:
    return ScheduleEntry(
        day=day,
        start_time=start_time,
        end_time=end_time,
        hours=calculate_hours_between(start_time, end_time),
    )


def parse_availability_schedule(text: str | None) -> AvailabilitySchedule:
    """
    Turn availability prose into a weekly schedule.

    - Empty text, or the "availability will be sent soon" placeholder, yields
      an empty schedule.
    - "Mon to Fri" / "Monday to Friday" applies the first time range found to
      every weekday; Thursday is dropped when the text also says "except" and
      "thursday".
    - Otherwise each day mentioned takes the first time range within the next
      100 characters, or 9am-5pm when none is written. A day gets one entry
      even when both its full name and abbreviation appear.

    The schedule is flexible when the text mentions "flexible" or "open to".
    """
    notes = text or ""
    lowered = notes.lower()

    if not lowered.strip() or PLACEHOLDER_TEXT in lowered:
        return AvailabilitySchedule(notes=notes)

    entries: list[ScheduleEntry] = []

    if "mon to fri" in lowered or "monday to friday" in lowered:
        match = _TIME_RANGE.search(lowered)
        if match:
            skip_thursday = "except" in lowered and "thursday" in lowered
            for day in WEEKDAYS:
                if skip_thursday and day == "Thu":
                    continue
                entries.append(_entry(day, match.group(1), match.group(2)))
    else:
        seen_days: set[str] = set()
        for day_name, day in DAY_PATTERNS.items():
            position = lowered.find(day_name)
            if position < 0 or day in seen_days:
                continue
            seen_days.add(day)

            window = lowered[position : position + DAY_WINDOW_CHARS]
            match = _TIME_RANGE.search(window)
            if match:
                entries.append(_entry(day, match.group(1), match.group(2)))
            else:
                entries.append(
                    ScheduleEntry(
                        day=day,
                        start_time=DEFAULT_START_TIME,
                        end_time=DEFAULT_END_TIME,
                        hours=DEFAULT_SHIFT_HOURS,
                    )
                )

    return AvailabilitySchedule(
        schedule=entries,
        is_flexible="flexible" in lowered or "open to" in lowered,
        notes=notes,
    )


def extract_zip_codes(text: str | None) -> list[str]:
    """Distinct 5-digit zip codes in order of first appearance."""
    if not text:
        return []
    return list(dict.fromkeys(_ZIP_CODE.findall(text)))


def provider_availability(provider: dict[str, Any]) -> AvailabilitySchedule | None:
    """
    Structured availability of a provider record, whatever shape it is stored in.

    Imported rosters keep availability as the raw text column while the
    availability report stores the parsed schedule; both are accepted.
    """
    availability = provider.get("availability")
    if isinstance(availability, dict):
        return AvailabilitySchedule.from_dict(availability)
    if isinstance(availability, str):
        return parse_availability_schedule(availability)
    return None
