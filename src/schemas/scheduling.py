"""Schemas for availability, utilization and matching endpoints."""

from typing import Any

from pydantic import BaseModel, Field


class AvailabilityParseRequest(BaseModel):
    """Free-text availability to parse."""

    text: str = Field(description="Availability as written, e.g. 'Mon to Fri 9am-5pm'")
    notes: str | None = Field(
        default=None,
        description="Optional notes to extract service zip codes from",
    )


class ScheduleEntrySchema(BaseModel):
    day: str
    start_time: str
    end_time: str
    hours: float


class AvailabilityScheduleSchema(BaseModel):
    """Weekly schedule parsed from availability text."""

    schedule: list[ScheduleEntrySchema] = Field(default_factory=list)
    total_weekly_hours: float = 0
    is_flexible: bool = False
    notes: str = ""


class AvailabilityParseResponse(BaseModel):
    availability: AvailabilityScheduleSchema
    zip_codes: list[str] = Field(default_factory=list)


class UtilizationStatsSchema(BaseModel):
    """Utilization of one provider for the current week."""

    provider_id: str
    total_available_hours: float
    scheduled_hours: float
    utilization_percentage: int
    status: str
    last_calculated: str | None = None


class UtilizationRecalculationResponse(BaseModel):
    calculated: int = Field(description="Providers with weekly hours that were recalculated")
    total: int = Field(description="Providers in the collection")


class UtilizationSummaryResponse(BaseModel):
    """Utilization across active providers."""

    active_providers: int
    total_available_hours: float
    total_scheduled_hours: float
    overall_utilization: int
    providers: list[UtilizationStatsSchema]


class ProviderMatchSchema(BaseModel):
    provider: dict[str, Any]
    match_score: int
    reasons: list[str] = Field(default_factory=list)


class MatchesResponse(BaseModel):
    """Providers ranked for a patient, best first."""

    patient_id: str
    matches: list[ProviderMatchSchema] = Field(default_factory=list)
