"""Demand forecasting and credentialing alert endpoints."""

from dataclasses import asdict

from fastapi import APIRouter, Query

from src.routers.deps import PatientRepositoryDep, ProviderRepositoryDep
from src.scheduling.forecasting import build_forecast_report, check_credentialing_expirations
from src.schemas.forecast import CredentialingAlertSchema, ForecastResponse

router = APIRouter(prefix="/forecast", tags=["Forecasting"])


@router.get("", response_model=ForecastResponse)
def get_forecast(
    patients: PatientRepositoryDep,
    providers: ProviderRepositoryDep,
    months_ahead: int | None = Query(default=None, ge=1, le=12),
) -> ForecastResponse:
    """
    Forecast patient demand and the providers needed to meet it.

    Growth between the last two three-month windows is compounded onto the
    last complete month. Staffing compares the providers required at the
    utilization target with the active headcount.
    """
    report = build_forecast_report(patients.list_all(), providers.list_all(), months_ahead)
    return ForecastResponse.model_validate(asdict(report))


@router.get("/credentialing-alerts", response_model=list[CredentialingAlertSchema])
def get_credentialing_alerts(providers: ProviderRepositoryDep) -> list[CredentialingAlertSchema]:
    """Licenses and background checks coming up for renewal, soonest first."""
    return [
        CredentialingAlertSchema.model_validate(asdict(alert))
        for alert in check_credentialing_expirations(providers.list_all())
    ]
