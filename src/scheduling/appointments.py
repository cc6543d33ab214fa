"""
Appointments booked on patient records.

Appointments are stored on the patient under ``appointments``. A scheduled
appointment in the current week counts toward its provider's utilization.
"""

from datetime import date
from enum import Enum
from uuid import uuid4

from src.services.record_repository import Record
from src.utils.dates import utc_now_iso


class AppointmentStatus(str, Enum):
    """Appointment lifecycle states."""

    SCHEDULED = "scheduled"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    NO_SHOW = "no-show"


def new_appointment(
    provider: Record,
    appointment_date: date,
    duration: float = 1.0,
    status: AppointmentStatus | str = AppointmentStatus.SCHEDULED,
    time: str | None = None,
    appointment_type: str | None = None,
    notes: str | None = None,
) -> Record:
    """
    Build an appointment with a provider.

    The provider's display name is copied next to its id so older readers
    that link on ``provider`` keep working.
    """
    appointment: Record = {
        "id": f"apt_{uuid4().hex[:12]}",
        "providerId": provider.get("id"),
        "provider": provider.get("name") or "",
        "date": appointment_date.isoformat(),
        "time": time,
        "type": appointment_type,
        "duration": duration,
        "status": AppointmentStatus(status).value,
        "notes": notes,
        "dateCreated": utc_now_iso(),
    }
    return {k: v for k, v in appointment.items() if v is not None}


def patient_appointments(patient: Record) -> list[Record]:
    appointments = patient.get("appointments")
    if not isinstance(appointments, list):
        return []
    return [a for a in appointments if isinstance(a, dict)]


def with_appointment(patient: Record, appointment: Record) -> Record:
    """Return a copy of the patient with the appointment appended."""
    return {
        **patient,
        "appointments": [*patient_appointments(patient), appointment],
        "lastModified": utc_now_iso(),
    }
