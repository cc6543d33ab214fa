"""Schemas for demand forecasting and credentialing alert endpoints."""

import datetime
from typing import Any

from pydantic import BaseModel, Field


class ClinicActivitySchema(BaseModel):
    patients: int
    sessions: int


class MonthActivitySchema(BaseModel):
    """Patient activity in one month."""

    month: str = Field(description="Month as YYYY-MM")
    new_patients: int
    active_patients: int
    total_sessions: int
    average_sessions_per_patient: float
    clinic_breakdown: dict[str, ClinicActivitySchema] = Field(default_factory=dict)


class DemandTrendsSchema(BaseModel):
    new_patients_growth: float = Field(description="Percent change in new patients")
    sessions_growth: float = Field(description="Percent change in sessions")
    confidence: str = Field(description="'low', 'medium' or 'high'")


class DemandForecastSchema(BaseModel):
    month: str
    forecasted_new_patients: int
    forecasted_active_patients: int
    forecasted_total_sessions: int
    confidence: str


class StaffingNeedSchema(BaseModel):
    month: str
    forecasted_sessions: int
    required_providers: int
    current_providers: int
    staffing_gap: int = Field(description="Required minus current providers")
    recommendation: str
    priority: str


class ForecastResponse(BaseModel):
    """Demand history, forecast and staffing needs."""

    history: list[MonthActivitySchema]
    trends: DemandTrendsSchema
    forecast: list[DemandForecastSchema]
    staffing_needs: list[StaffingNeedSchema]


class CredentialingAlertSchema(BaseModel):
    """An upcoming license or background check expiry."""

    provider_id: Any
    provider_name: str
    alert_type: str = Field(description="'license_expiration' or 'background_check'")
    expiry_date: datetime.date
    days_until_expiry: int
    priority: str
    message: str
