# backend/courtside/routes/v1/availability.py
"""
Availability routes - API v1

Endpoints:
    GET /courts/{court_id}/availability - Resolved calendar plus commitments of one date
    GET /courts/{court_id}/slots - Bookable start times for a duration
"""

import logging

from fastapi import APIRouter, Depends, Query

from ...api.dependencies import get_availability_service
from ...domain.scheduling import parse_ymd
from ...schemas.availability import DayAvailabilityResponse, SlotGridResponse
from ...services.availability_service import AvailabilityService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["availability-v1"])


@router.get(
    "/courts/{court_id}/availability",
    response_model=DayAvailabilityResponse,
    responses={404: {"description": "Court not found"}},
)
def get_day_availability(
    court_id: str,
    date: str = Query(..., description="YYYY-MM-DD"),
    availability_service: AvailabilityService = Depends(get_availability_service),
) -> DayAvailabilityResponse:
    """Calendar of the date (closed flag, hours, holiday notice) and its active bookings and blocks."""
    day = parse_ymd(date)
    return DayAvailabilityResponse.model_validate(
        availability_service.get_day_availability(court_id, day)
    )


@router.get(
    "/courts/{court_id}/slots",
    response_model=SlotGridResponse,
    responses={404: {"description": "Court not found"}},
)
def get_available_slots(
    court_id: str,
    date: str = Query(..., description="YYYY-MM-DD"),
    duration: int = Query(60, description="Minutes, a positive multiple of 30"),
    include_past: bool = Query(False),
    availability_service: AvailabilityService = Depends(get_availability_service),
) -> SlotGridResponse:
    day = parse_ymd(date)
    grid = availability_service.get_available_slots(
        court_id, day, duration, include_past=include_past
    )
    return SlotGridResponse.model_validate(grid.to_dict())
