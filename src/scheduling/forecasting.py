"""
Patient demand forecasting, staffing needs and credentialing alerts.

Demand is read from the records we already hold: a patient is new in the
month it was added, and active in any month with sessions. Sessions are the
patient's appointments in that month, or its payments when it has no
appointments then.

Forecasts compound the growth between the last three months and the three
before them onto the last complete month. Staffing needs divide forecast
sessions by what one provider delivers at the utilization target.
"""

import logging
import math
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Any

from src.scheduling.appointments import patient_appointments
from src.scheduling.utilization import round_half_up
from src.services.record_repository import Record
from src.settings import settings
from src.utils.dates import parse_date

logger = logging.getLogger(__name__)

TREND_WINDOW_MONTHS = 3
# Active patients grow a little slower than new ones.
ACTIVE_PATIENT_GROWTH_DAMPING = 0.8
# Staff is only reduced once the surplus exceeds this many providers.
OVERSTAFFED_MARGIN = 2

APPOINTMENT_DATE_FIELDS = ("date", "appointmentDate", "dateOfService")
PAYMENT_DATE_FIELDS = ("dateOfService", "dateOfTransaction")
PATIENT_ADDED_FIELDS = ("dateAdded", "dateCreated")
PROVIDER_START_FIELDS = ("startDate", "dateAdded", "dateCreated")

LICENSE_RENEWAL_DAYS = 2 * 365
BACKGROUND_CHECK_RENEWAL_DAYS = 365

CONFIDENCE_LOW = "low"
CONFIDENCE_MEDIUM = "medium"
CONFIDENCE_HIGH = "high"

PRIORITY_LOW = "low"
PRIORITY_MEDIUM = "medium"
PRIORITY_HIGH = "high"


@dataclass
class ClinicActivity:
    patients: int = 0
    sessions: int = 0


@dataclass
class MonthActivity:
    """Patient activity in one calendar month."""

    month: str
    new_patients: int = 0
    active_patients: int = 0
    total_sessions: int = 0
    average_sessions_per_patient: float = 0
    clinic_breakdown: dict[str, ClinicActivity] = field(default_factory=dict)


@dataclass
class DemandTrends:
    """Growth in percent between the last two three-month windows."""

    new_patients_growth: float = 0
    sessions_growth: float = 0
    confidence: str = CONFIDENCE_LOW


@dataclass
class DemandForecast:
    month: str
    forecasted_new_patients: int
    forecasted_active_patients: int
    forecasted_total_sessions: int
    confidence: str


@dataclass
class StaffingNeed:
    month: str
    forecasted_sessions: int
    required_providers: int
    current_providers: int
    staffing_gap: int
    recommendation: str
    priority: str


@dataclass
class CredentialingAlert:
    provider_id: Any
    provider_name: str
    alert_type: str
    expiry_date: date
    days_until_expiry: int
    priority: str
    message: str


@dataclass
class ForecastReport:
    history: list[MonthActivity]
    trends: DemandTrends
    forecast: list[DemandForecast]
    staffing_needs: list[StaffingNeed]


def month_start(day: date, offset: int = 0) -> date:
    """First day of the month ``offset`` months away from ``day``'s month."""
    index = day.year * 12 + day.month - 1 + offset
    return date(index // 12, index % 12 + 1, 1)


def month_key(day: date) -> str:
    return f"{day.year}-{day.month:02d}"


def _first_date(record: Record, fields: tuple[str, ...]) -> date | None:
    for name in fields:
        parsed = parse_date(record.get(name))
        if parsed is not None:
            return parsed
    return None


def _in_month(value: date | None, month: date) -> bool:
    return value is not None and (value.year, value.month) == (month.year, month.month)


def sessions_in_month(patient: Record, month: date) -> int:
    """
    Sessions a patient had in a month.

    Appointments count first; payments stand in only when no appointment
    falls in the month.
    """
    sessions = sum(
        1
        for appointment in patient_appointments(patient)
        if _in_month(_first_date(appointment, APPOINTMENT_DATE_FIELDS), month)
    )
    if sessions:
        return sessions

    payments = patient.get("payments")
    if not isinstance(payments, list):
        return 0
    return sum(
        1
        for payment in payments
        if isinstance(payment, dict)
        and _in_month(_first_date(payment, PAYMENT_DATE_FIELDS), month)
    )


def month_activity(patients: list[Record], month: date) -> MonthActivity:
    activity = MonthActivity(month=month_key(month))

    for patient in patients:
        if _in_month(_first_date(patient, PATIENT_ADDED_FIELDS), month):
            activity.new_patients += 1

        sessions = sessions_in_month(patient, month)
        if not sessions:
            continue

        activity.active_patients += 1
        activity.total_sessions += sessions
        clinic = str(patient.get("clinicName") or patient.get("clinic") or "Unknown")
        breakdown = activity.clinic_breakdown.setdefault(clinic, ClinicActivity())
        breakdown.patients += 1
        breakdown.sessions += sessions

    if activity.active_patients:
        average = activity.total_sessions / activity.active_patients
        activity.average_sessions_per_patient = round_half_up(average * 10) / 10
    return activity


def historical_patient_activity(
    patients: list[Record],
    months: int,
    today: date | None = None,
) -> list[MonthActivity]:
    """
    Monthly patient activity, oldest first.

    Covers the ``months`` complete months before the current one, plus the
    current month so far.
    """
    today = today or date.today()
    return [month_activity(patients, month_start(today, -offset)) for offset in range(months, -1, -1)]


def _growth(recent: list[MonthActivity], previous: list[MonthActivity], attr: str) -> float:
    # Both windows average over the full window, so missing months count as zero.
    recent_average = sum(getattr(m, attr) for m in recent) / TREND_WINDOW_MONTHS
    previous_average = sum(getattr(m, attr) for m in previous) / TREND_WINDOW_MONTHS
    if previous_average <= 0:
        return 0
    return (recent_average - previous_average) / previous_average * 100


def calculate_demand_trends(history: list[MonthActivity]) -> DemandTrends:
    """
    Compare the last three months with the three before them.

    Fewer than three months of history gives no growth at low confidence;
    six or more gives high confidence.
    """
    if len(history) < TREND_WINDOW_MONTHS:
        return DemandTrends()

    recent = history[-TREND_WINDOW_MONTHS:]
    previous = history[-2 * TREND_WINDOW_MONTHS : -TREND_WINDOW_MONTHS]
    return DemandTrends(
        new_patients_growth=_growth(recent, previous, "new_patients"),
        sessions_growth=_growth(recent, previous, "total_sessions"),
        confidence=CONFIDENCE_HIGH if len(history) >= 2 * TREND_WINDOW_MONTHS else CONFIDENCE_MEDIUM,
    )


def generate_demand_forecast(
    trends: DemandTrends,
    baseline: MonthActivity,
    months_ahead: int,
    today: date | None = None,
) -> list[DemandForecast]:
    """
    Project demand for the months after the current one.

    Args:
        trends: Growth rates to compound month over month
        baseline: Activity the projection starts from
        months_ahead: Number of months to forecast
        today: Reference day (defaults to today)
    """
    today = today or date.today()
    growth = 1 + trends.new_patients_growth / 100
    sessions_growth = 1 + trends.sessions_growth / 100

    forecast = []
    for ahead in range(1, months_ahead + 1):
        forecast.append(
            DemandForecast(
                month=month_key(month_start(today, ahead)),
                forecasted_new_patients=round_half_up(baseline.new_patients * growth**ahead),
                forecasted_active_patients=round_half_up(
                    baseline.active_patients * growth ** (ahead * ACTIVE_PATIENT_GROWTH_DAMPING)
                ),
                forecasted_total_sessions=round_half_up(
                    baseline.total_sessions * sessions_growth**ahead
                ),
                confidence=trends.confidence,
            )
        )
    return forecast


def _is_active(provider: Record) -> bool:
    return str(provider.get("status") or "").lower() == "active"


def _staffing_recommendation(gap: int) -> str:
    if gap > 0:
        return f"Hire {gap} additional provider(s)"
    if gap < -OVERSTAFFED_MARGIN:
        return f"Consider reducing staff by {abs(gap)} provider(s)"
    return "Current staffing is adequate"


def _staffing_priority(gap: int) -> str:
    if gap > 2:
        return PRIORITY_HIGH
    if gap > 0:
        return PRIORITY_MEDIUM
    return PRIORITY_LOW


def calculate_staffing_needs(
    forecast: list[DemandForecast],
    providers: list[Record],
) -> list[StaffingNeed]:
    """Providers needed per forecast month against the active headcount."""
    capacity = settings.sessions_per_provider_per_month * settings.staffing_utilization_target
    current = sum(1 for p in providers if _is_active(p))

    needs = []
    for month in forecast:
        required = math.ceil(month.forecasted_total_sessions / capacity)
        gap = required - current
        needs.append(
            StaffingNeed(
                month=month.month,
                forecasted_sessions=month.forecasted_total_sessions,
                required_providers=required,
                current_providers=current,
                staffing_gap=gap,
                recommendation=_staffing_recommendation(gap),
                priority=_staffing_priority(gap),
            )
        )
    return needs


def _alert_priority(days: int) -> str:
    if days <= 30:
        return PRIORITY_HIGH
    if days <= 60:
        return PRIORITY_MEDIUM
    return PRIORITY_LOW


def check_credentialing_expirations(
    providers: list[Record],
    today: date | None = None,
) -> list[CredentialingAlert]:
    """
    Licenses and background checks expiring within the alert window.

    Renewal cycles run from the provider's start date (or the date it was
    added): two years for the license, one for the background check. Items
    already expired or expiring today are not reported.
    """
    today = today or date.today()
    horizon = today + timedelta(days=settings.credentialing_alert_days)
    checks = (
        ("license_expiration", LICENSE_RENEWAL_DAYS, "PT License"),
        ("background_check", BACKGROUND_CHECK_RENEWAL_DAYS, "Background check"),
    )

    alerts = []
    for provider in providers:
        started = _first_date(provider, PROVIDER_START_FIELDS)
        if started is None:
            continue
        for alert_type, renewal_days, label in checks:
            expiry = started + timedelta(days=renewal_days)
            if not today < expiry <= horizon:
                continue
            days = (expiry - today).days
            alerts.append(
                CredentialingAlert(
                    provider_id=provider.get("id"),
                    provider_name=str(provider.get("name") or ""),
                    alert_type=alert_type,
                    expiry_date=expiry,
                    days_until_expiry=days,
                    priority=_alert_priority(days),
                    message=f"{label} expires in {days} days",
                )
            )

    alerts.sort(key=lambda a: a.days_until_expiry)
    return alerts


def build_forecast_report(
    patients: list[Record],
    providers: list[Record],
    months_ahead: int | None = None,
    today: date | None = None,
) -> ForecastReport:
    """
    Forecast demand and staffing from stored patients and providers.

    The forecast starts from the last complete month.
    """
    today = today or date.today()
    months_ahead = settings.forecast_months_ahead if months_ahead is None else months_ahead

    history = historical_patient_activity(patients, settings.forecast_history_months, today)
    trends = calculate_demand_trends(history)
    baseline = history[-2] if len(history) > 1 else history[-1]
    forecast = generate_demand_forecast(trends, baseline, months_ahead, today)
    staffing = calculate_staffing_needs(forecast, providers)

    logger.info(
        "Forecast %d months from %s: sessions growth %.1f%%, %s confidence",
        months_ahead,
        baseline.month,
        trends.sessions_growth,
        trends.confidence,
    )
    return ForecastReport(
        history=history,
        trends=trends,
        forecast=forecast,
        staffing_needs=staffing,
    )
