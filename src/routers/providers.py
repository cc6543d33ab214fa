"""Provider record and utilization endpoints."""

import logging
from typing import Any

from fastapi import APIRouter, HTTPException, status

from src.exceptions import RecordConflictError, ValidationError
from src.routers.deps import PatientRepositoryDep, ProviderRepositoryDep, ProviderServiceDep
from src.scheduling.utilization import (
    calculate_all_provider_utilization,
    calculate_provider_utilization,
    utilization_status,
    utilization_summary,
)
from src.schemas.records import DeleteResponse
from src.schemas.scheduling import (
    UtilizationRecalculationResponse,
    UtilizationStatsSchema,
    UtilizationSummaryResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/providers", tags=["Providers"])


def _not_found(provider_id: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"Provider {provider_id} not found",
    )


@router.get("", response_model=list[dict[str, Any]])
def list_providers(providers: ProviderRepositoryDep) -> list[dict[str, Any]]:
    """List all providers."""
    return providers.list_all()


@router.post("", response_model=dict[str, Any], status_code=status.HTTP_201_CREATED)
def create_provider(record: dict[str, Any], service: ProviderServiceDep) -> dict[str, Any]:
    """
    Add a provider.

    A providerId in the body doubles as the record id. Comma-separated
    serviceZipCodes and availabilityDays are split into lists.
    """
    try:
        return service.create(record)
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
    except RecordConflictError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e)) from e


@router.delete("", response_model=DeleteResponse)
def delete_all_providers(providers: ProviderRepositoryDep) -> DeleteResponse:
    """Remove every provider."""
    return DeleteResponse(deleted=providers.clear())


# Registered before "/{provider_id}" so "utilization" is not taken for an id.
@router.get("/utilization", response_model=UtilizationSummaryResponse)
def get_utilization_summary(providers: ProviderRepositoryDep) -> UtilizationSummaryResponse:
    """Summarize the last calculated utilization of active providers."""
    summary = utilization_summary(providers.list_all())
    return UtilizationSummaryResponse(
        active_providers=summary.active_providers,
        total_available_hours=summary.total_available_hours,
        total_scheduled_hours=summary.total_scheduled_hours,
        overall_utilization=summary.overall_utilization,
        providers=[
            UtilizationStatsSchema(
                provider_id=row.provider_id,
                total_available_hours=row.available_hours,
                scheduled_hours=row.scheduled_hours,
                utilization_percentage=row.utilization_percentage,
                status=row.status,
                last_calculated=row.last_calculated,
            )
            for row in summary.providers
        ],
    )


@router.post("/utilization", response_model=UtilizationRecalculationResponse)
def recalculate_all_utilization(
    providers: ProviderRepositoryDep,
    patients: PatientRepositoryDep,
) -> UtilizationRecalculationResponse:
    """Recalculate this week's utilization for every provider with weekly hours."""
    with providers.locked():
        current = providers.list_all()
        updated = calculate_all_provider_utilization(current, patients.list_all())
        providers.replace_all(updated)

    calculated = sum(1 for before, after in zip(current, updated) if before is not after)
    return UtilizationRecalculationResponse(calculated=calculated, total=len(updated))


@router.get("/{provider_id}", response_model=dict[str, Any])
def get_provider(provider_id: str, providers: ProviderRepositoryDep) -> dict[str, Any]:
    """Get a provider by id."""
    provider = providers.get(provider_id)
    if provider is None:
        raise _not_found(provider_id)
    return provider


@router.put("/{provider_id}", response_model=dict[str, Any])
def replace_provider(
    provider_id: str,
    record: dict[str, Any],
    service: ProviderServiceDep,
) -> dict[str, Any]:
    """Replace a provider's fields, keeping its id and creation date."""
    try:
        replaced = service.replace(provider_id, record)
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e

    if replaced is None:
        raise _not_found(provider_id)
    return replaced


@router.delete("/{provider_id}", response_model=DeleteResponse)
def delete_provider(provider_id: str, providers: ProviderRepositoryDep) -> DeleteResponse:
    """Remove a provider by id."""
    if not providers.delete(provider_id):
        raise _not_found(provider_id)
    return DeleteResponse(deleted=1)


@router.post("/{provider_id}/utilization", response_model=UtilizationStatsSchema)
def recalculate_provider_utilization(
    provider_id: str,
    providers: ProviderRepositoryDep,
    patients: PatientRepositoryDep,
) -> UtilizationStatsSchema:
    """Recalculate and store this week's utilization for one provider."""
    with providers.locked():
        provider = providers.get(provider_id)
        if provider is None:
            raise _not_found(provider_id)

        stats = calculate_provider_utilization(provider, patients.list_all())
        if stats is None:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=f"Provider {provider_id} has no availability on record",
            )
        providers.upsert({**provider, "utilizationStats": stats.to_dict()})

    logger.info(
        "Provider %s utilization: %d%% (%s of %s hours)",
        provider_id,
        stats.utilization_percentage,
        stats.scheduled_hours,
        stats.total_available_hours,
    )
    return UtilizationStatsSchema(
        provider_id=provider_id,
        total_available_hours=stats.total_available_hours,
        scheduled_hours=stats.scheduled_hours,
        utilization_percentage=stats.utilization_percentage,
        status=utilization_status(stats.utilization_percentage),
        last_calculated=stats.last_calculated,
    )
