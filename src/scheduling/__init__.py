"""
Provider scheduling heuristics.

This module handles:
- Parsing free-text availability into weekly schedules
- Weekly utilization of providers against their availability
- Ranking providers for a patient
- Appointments booked on patients
- Demand forecasting, staffing needs and credentialing alerts
"""

from src.scheduling.appointments import (
    AppointmentStatus,
    new_appointment,
    patient_appointments,
    with_appointment,
)
from src.scheduling.availability import (
    AvailabilitySchedule,
    ScheduleEntry,
    calculate_hours_between,
    extract_zip_codes,
    parse_availability_schedule,
    parse_time,
    provider_availability,
)
from src.scheduling.forecasting import (
    CredentialingAlert,
    DemandForecast,
    DemandTrends,
    ForecastReport,
    MonthActivity,
    StaffingNeed,
    build_forecast_report,
    calculate_demand_trends,
    calculate_staffing_needs,
    check_credentialing_expirations,
    generate_demand_forecast,
    historical_patient_activity,
)
from src.scheduling.matching import (
    MatchEvaluation,
    ProviderMatch,
    calculate_match_score,
    evaluate_match,
    find_matching_providers,
    get_match_reasons,
)
from src.scheduling.utilization import (
    UtilizationStats,
    UtilizationSummary,
    calculate_all_provider_utilization,
    calculate_provider_utilization,
    is_current_week,
    utilization_status,
    utilization_summary,
)

__all__ = [
    "AppointmentStatus",
    "AvailabilitySchedule",
    "CredentialingAlert",
    "DemandForecast",
    "DemandTrends",
    "ForecastReport",
    "MatchEvaluation",
    "MonthActivity",
    "ProviderMatch",
    "ScheduleEntry",
    "StaffingNeed",
    "UtilizationStats",
    "UtilizationSummary",
    "build_forecast_report",
    "calculate_all_provider_utilization",
    "calculate_demand_trends",
    "calculate_hours_between",
    "calculate_match_score",
    "calculate_provider_utilization",
    "calculate_staffing_needs",
    "check_credentialing_expirations",
    "evaluate_match",
    "extract_zip_codes",
    "find_matching_providers",
    "generate_demand_forecast",
    "get_match_reasons",
    "historical_patient_activity",
    "is_current_week",
    "new_appointment",
    "parse_availability_schedule",
    "parse_time",
    "patient_appointments",
    "provider_availability",
    "utilization_status",
    "utilization_summary",
    "with_appointment",
]
