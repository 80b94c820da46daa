"""Availability read model and availability alert schemas."""

from datetime import date, datetime
from typing import List, Optional

from pydantic import Field

from ._strict_base import StrictModel, StrictRequestModel


class DayCalendarResponse(StrictModel):
    date: date
    is_closed: bool
    opening_time: str = Field(description="HH:MM")
    closing_time: str = Field(description="HH:MM")
    notice: Optional[str] = Field(default=None, description="Holiday notice for the date")


class BookedInterval(StrictModel):
    id: str
    start_time: datetime
    end_time: datetime
    status: str


class BlockedInterval(StrictModel):
    id: str
    start_time: datetime
    end_time: datetime
    note: Optional[str] = None
    monthly_pass_id: Optional[str] = None


class DayAvailabilityResponse(DayCalendarResponse):
    """Resolved calendar of one date plus the active commitments on the court."""

    court_id: str
    bookings: List[BookedInterval] = Field(default_factory=list)
    blocks: List[BlockedInterval] = Field(default_factory=list)


class SlotGridResponse(DayCalendarResponse):
    duration_minutes: int
    available_starts: List[str] = Field(
        default_factory=list, description="HH:MM starts that fit the requested duration"
    )


class AvailabilityAlertCreate(StrictRequestModel):
    court_id: str
    date: str = Field(..., description="YYYY-MM-DD")
    start_time: str = Field(..., description="HH:MM on the hour or half hour")
    duration_minutes: int = Field(default=60, description="Minimum 30")


class AvailabilityAlertResponse(StrictModel):
    id: str
    court_id: str
    start_time: datetime
    end_time: datetime
    is_active: bool
    notified_at: Optional[datetime] = None
