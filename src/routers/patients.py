"""Patient record endpoints."""

import logging
from typing import Any

from fastapi import APIRouter, HTTPException, status

from src.exceptions import RecordConflictError, ValidationError
from src.routers.deps import PatientRepositoryDep, PatientServiceDep, ProviderRepositoryDep
from src.scheduling.appointments import new_appointment, patient_appointments, with_appointment
from src.scheduling.matching import find_matching_providers
from src.schemas.records import AppointmentCreate, DeleteResponse
from src.schemas.scheduling import MatchesResponse, ProviderMatchSchema
from src.services.record_repository import RecordRepository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/patients", tags=["Patients"])


def _get_or_404(patients: RecordRepository, patient_id: str) -> dict[str, Any]:
    patient = patients.get(patient_id)
    if patient is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Patient {patient_id} not found",
        )
    return patient


@router.get("", response_model=list[dict[str, Any]])
def list_patients(patients: PatientRepositoryDep) -> list[dict[str, Any]]:
    """List all patients."""
    return patients.list_all()


@router.post("", response_model=dict[str, Any], status_code=status.HTTP_201_CREATED)
def create_patient(record: dict[str, Any], service: PatientServiceDep) -> dict[str, Any]:
    """
    Add a patient.

    The body is normalized like an imported row: an id is generated when
    missing, name and firstName/lastName are reconciled and status defaults
    to active.
    """
    try:
        return service.create(record)
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
    except RecordConflictError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e)) from e


@router.delete("", response_model=DeleteResponse)
def delete_all_patients(patients: PatientRepositoryDep) -> DeleteResponse:
    """Remove every patient."""
    return DeleteResponse(deleted=patients.clear())


@router.get("/{patient_id}", response_model=dict[str, Any])
def get_patient(patient_id: str, patients: PatientRepositoryDep) -> dict[str, Any]:
    """Get a patient by id."""
    return _get_or_404(patients, patient_id)


@router.put("/{patient_id}", response_model=dict[str, Any])
def replace_patient(
    patient_id: str,
    record: dict[str, Any],
    service: PatientServiceDep,
) -> dict[str, Any]:
    """Replace a patient's fields, keeping its id and creation date."""
    try:
        replaced = service.replace(patient_id, record)
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e

    if replaced is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Patient {patient_id} not found",
        )
    return replaced


@router.delete("/{patient_id}", response_model=DeleteResponse)
def delete_patient(patient_id: str, patients: PatientRepositoryDep) -> DeleteResponse:
    """Remove a patient by id."""
    if not patients.delete(patient_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Patient {patient_id} not found",
        )
    return DeleteResponse(deleted=1)


@router.get("/{patient_id}/appointments", response_model=list[dict[str, Any]])
def list_patient_appointments(
    patient_id: str,
    patients: PatientRepositoryDep,
) -> list[dict[str, Any]]:
    """List a patient's appointments."""
    return patient_appointments(_get_or_404(patients, patient_id))


@router.post(
    "/{patient_id}/appointments",
    response_model=dict[str, Any],
    status_code=status.HTTP_201_CREATED,
)
def book_appointment(
    patient_id: str,
    request: AppointmentCreate,
    patients: PatientRepositoryDep,
    providers: ProviderRepositoryDep,
) -> dict[str, Any]:
    """
    Book an appointment for a patient with a provider.

    Scheduled appointments in the current week count toward the provider's
    utilization the next time it is recalculated.
    """
    provider = providers.get(request.provider_id)
    if provider is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Provider {request.provider_id} not found",
        )

    appointment = new_appointment(
        provider,
        appointment_date=request.date,
        duration=request.duration,
        status=request.status,
        time=request.time,
        appointment_type=request.type,
        notes=request.notes,
    )
    with patients.locked():
        patient = _get_or_404(patients, patient_id)
        patients.upsert(with_appointment(patient, appointment))

    logger.info(
        "Booked %s for patient %s with provider %s on %s",
        appointment["id"],
        patient_id,
        request.provider_id,
        appointment["date"],
    )
    return appointment


@router.get("/{patient_id}/matches", response_model=MatchesResponse)
def get_patient_matches(
    patient_id: str,
    patients: PatientRepositoryDep,
    providers: ProviderRepositoryDep,
) -> MatchesResponse:
    """
    Rank active providers for a patient, best match first.

    Providers score on zip code, borough, insurance network, availability
    and spare capacity; providers scoring zero are left out.
    """
    patient = _get_or_404(patients, patient_id)
    matches = find_matching_providers(patient, providers.list_all())
    return MatchesResponse(
        patient_id=patient_id,
        matches=[
            ProviderMatchSchema(
                provider=m.provider,
                match_score=m.match_score,
                reasons=m.reasons,
            )
            for m in matches
        ],
    )
