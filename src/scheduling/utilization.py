"""
Provider utilization: scheduled hours this week against declared availability.

Appointments live on patient records (``patient["appointments"]``). An
appointment belongs to a provider through ``providerId``; older records only
carry the provider's display name in ``provider`` and are matched on that.
"""

import logging
import math
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Any

from src.scheduling.appointments import AppointmentStatus, patient_appointments
from src.scheduling.availability import provider_availability
from src.services.record_repository import Record
from src.settings import settings
from src.utils.dates import parse_date, utc_now_iso

logger = logging.getLogger(__name__)

DEFAULT_APPOINTMENT_HOURS = 1.0

STATUS_AVAILABLE = "Available"
STATUS_BUSY = "Busy"
STATUS_OVERBOOKED = "Overbooked"


@dataclass
class UtilizationStats:
    """Utilization of one provider for the current week."""

    total_available_hours: float
    scheduled_hours: float
    utilization_percentage: int
    last_calculated: str = field(default_factory=utc_now_iso)

    def to_dict(self) -> dict[str, Any]:
        """Persisted shape, stored as ``utilizationStats`` on the provider."""
        return {
            "totalAvailableHours": self.total_available_hours,
            "scheduledHours": self.scheduled_hours,
            "utilizationPercentage": self.utilization_percentage,
            "lastCalculated": self.last_calculated,
        }


@dataclass
class UtilizationRow:
    """One provider line of the utilization report."""

    provider_id: str
    name: str
    borough: str
    contact: str
    email: str
    available_hours: float
    scheduled_hours: float
    utilization_percentage: int
    status: str
    last_calculated: str | None


@dataclass
class UtilizationSummary:
    """Utilization across all active providers."""

    active_providers: int
    total_available_hours: float
    total_scheduled_hours: float
    overall_utilization: int
    providers: list[UtilizationRow]


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positives (7.5 -> 8)."""
    return math.floor(value + 0.5)


def week_bounds(today: date) -> tuple[date, date]:
    """First (Sunday) and last (Saturday) day of the week containing ``today``."""
    start = today - timedelta(days=(today.weekday() + 1) % 7)
    return start, start + timedelta(days=6)


def is_current_week(value: Any, today: date | None = None) -> bool:
    """
    Whether a date falls in the Sunday-aligned week containing ``today``.

    Both ends of the seven-day window are inclusive. Missing or unparseable
    dates are never in the current week.
    """
    parsed = parse_date(value)
    if parsed is None:
        return False
    start, end = week_bounds(today or date.today())
    return start <= parsed <= end


def _appointment_hours(appointment: Record) -> float:
    duration = appointment.get("duration")
    if duration in (None, ""):
        return DEFAULT_APPOINTMENT_HOURS
    try:
        return float(duration)
    except (TypeError, ValueError):
        logger.warning(
            "Unreadable appointment duration %r, counting %s hour",
            duration,
            DEFAULT_APPOINTMENT_HOURS,
        )
        return DEFAULT_APPOINTMENT_HOURS


def _belongs_to(appointment: Record, provider: Record) -> bool:
    provider_id = appointment.get("providerId")
    if provider_id not in (None, ""):
        return str(provider_id) == str(provider.get("id"))
    name = provider.get("name")
    return bool(name) and appointment.get("provider") == name


def scheduled_hours_this_week(
    provider: Record,
    patients: list[Record],
    today: date | None = None,
) -> float:
    """Sum of scheduled appointment hours this week across all patients."""
    today = today or date.today()
    total = 0.0
    for patient in patients:
        for appointment in patient_appointments(patient):
            if (
                _belongs_to(appointment, provider)
                and appointment.get("status") == AppointmentStatus.SCHEDULED
                and is_current_week(appointment.get("date"), today)
            ):
                total += _appointment_hours(appointment)
    return total


def calculate_provider_utilization(
    provider: Record,
    patients: list[Record],
    today: date | None = None,
) -> UtilizationStats | None:
    """
    Calculate this week's utilization for one provider.

    Args:
        provider: Provider record; its availability may be structured or text
        patients: All patient records, carrying appointments
        today: Reference day for the current week (defaults to today)

    Returns:
        UtilizationStats, or None if the provider has no availability
    """
    schedule = provider_availability(provider)
    if schedule is None:
        return None

    available = schedule.total_weekly_hours
    scheduled = scheduled_hours_this_week(provider, patients, today)
    percentage = round_half_up(scheduled / available * 100) if available > 0 else 0

    return UtilizationStats(
        total_available_hours=available,
        scheduled_hours=scheduled,
        utilization_percentage=percentage,
    )


def calculate_all_provider_utilization(
    providers: list[Record],
    patients: list[Record],
    today: date | None = None,
) -> list[Record]:
    """
    Recalculate utilization for every provider with weekly hours.

    Returns:
        New provider list; providers without hours are returned unchanged
    """
    updated: list[Record] = []
    calculated = 0
    for provider in providers:
        stats = calculate_provider_utilization(provider, patients, today)
        if stats is None or stats.total_available_hours <= 0:
            updated.append(provider)
            continue
        updated.append({**provider, "utilizationStats": stats.to_dict()})
        calculated += 1

    logger.info("Recalculated utilization for %d of %d providers", calculated, len(providers))
    return updated


def utilization_status(percentage: float) -> str:
    """Label a utilization percentage as Available, Busy or Overbooked."""
    if percentage > settings.utilization_overbooked_threshold:
        return STATUS_OVERBOOKED
    if percentage > settings.utilization_busy_threshold:
        return STATUS_BUSY
    return STATUS_AVAILABLE


def _is_active(record: Record) -> bool:
    return str(record.get("status") or "").lower() == "active"


def utilization_summary(providers: list[Record]) -> UtilizationSummary:
    """
    Summarize stored utilization stats over active providers.

    Providers that were never calculated report zero hours.
    """
    rows: list[UtilizationRow] = []
    total_available = 0.0
    total_scheduled = 0.0

    for provider in providers:
        if not _is_active(provider):
            continue
        stats = provider.get("utilizationStats") or {}
        percentage = stats.get("utilizationPercentage") or 0
        available = stats.get("totalAvailableHours") or 0
        scheduled = stats.get("scheduledHours") or 0
        total_available += available
        total_scheduled += scheduled
        rows.append(
            UtilizationRow(
                provider_id=str(provider.get("id") or ""),
                name=str(provider.get("name") or ""),
                borough=str(provider.get("borough") or ""),
                contact=str(provider.get("contactNumber") or provider.get("phone") or ""),
                email=str(provider.get("email") or ""),
                available_hours=available,
                scheduled_hours=scheduled,
                utilization_percentage=percentage,
                status=utilization_status(percentage),
                last_calculated=stats.get("lastCalculated"),
            )
        )

    overall = (
        round_half_up(total_scheduled / total_available * 100) if total_available > 0 else 0
    )
    return UtilizationSummary(
        active_providers=len(rows),
        total_available_hours=total_available,
        total_scheduled_hours=total_scheduled,
        overall_utilization=overall,
        providers=rows,
    )
