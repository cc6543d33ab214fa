"""Schemas for patient and provider record endpoints."""

import datetime

from pydantic import BaseModel, Field

from src.scheduling.appointments import AppointmentStatus


class DeleteResponse(BaseModel):
    """Response model for record deletion."""

    deleted: int = Field(description="Number of records removed")


class AppointmentCreate(BaseModel):
    """Request model for booking an appointment on a patient."""

    provider_id: str = Field(description="Id of the provider seeing the patient")
    date: datetime.date = Field(description="Day of the appointment")
    time: str | None = Field(default=None, description="Start time as written, e.g. '10:00 AM'")
    duration: float = Field(default=1.0, gt=0, le=24, description="Length in hours")
    status: AppointmentStatus = Field(
        default=AppointmentStatus.SCHEDULED,
        description="Only scheduled appointments count toward utilization",
    )
    type: str | None = Field(default=None, description="Visit type, e.g. 'Evaluation'")
    notes: str | None = None
