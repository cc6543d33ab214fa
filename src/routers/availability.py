"""Availability parsing endpoint."""

from fastapi import APIRouter

from src.scheduling.availability import extract_zip_codes, parse_availability_schedule
from src.schemas.scheduling import (
    AvailabilityParseRequest,
    AvailabilityParseResponse,
    AvailabilityScheduleSchema,
    ScheduleEntrySchema,
)

router = APIRouter(prefix="/availability", tags=["Availability"])


@router.post("/parse", response_model=AvailabilityParseResponse)
async def parse_availability(request: AvailabilityParseRequest) -> AvailabilityParseResponse:
    """
    Parse free-text availability into a weekly schedule.

    Parsing is best effort: days without a written time range default to
    9am-5pm, and unreadable times default to 9am. Zip codes are taken from
    ``notes`` when given, otherwise from the availability text.
    """
    schedule = parse_availability_schedule(request.text)
    zip_source = request.notes if request.notes is not None else request.text

    return AvailabilityParseResponse(
        availability=AvailabilityScheduleSchema(
            schedule=[
                ScheduleEntrySchema(
                    day=entry.day,
                    start_time=entry.start_time,
                    end_time=entry.end_time,
                    hours=entry.hours,
                )
                for entry in schedule.schedule
            ],
            total_weekly_hours=schedule.total_weekly_hours,
            is_flexible=schedule.is_flexible,
            notes=schedule.notes,
        ),
        zip_codes=extract_zip_codes(zip_source),
    )
