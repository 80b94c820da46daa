"""
Booking request and response schemas.

Times travel as ISO-8601 strings; services parse and validate them so every
malformed value surfaces as a VALIDATION error with the same body shape.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import Field

from ..core.constants import MAX_ADMIN_BOOKING_REPEAT_WEEKS
from ._strict_base import StrictModel, StrictRequestModel


class BookingCreate(StrictRequestModel):
    """
    Customer booking (``customer_name`` absent) or owner walk-in booking.

    A request carrying ``customer_name`` is recorded by the owner on a
    guest's behalf and is confirmed immediately.
    """

    court_id: str = Field(..., description="Court to book")
    start_time: str = Field(..., description="ISO-8601 start, on the hour or half hour")
    end_time: str = Field(..., description="ISO-8601 end, on the hour or half hour")
    repeat_weeks: int = Field(default=0, ge=0, le=MAX_ADMIN_BOOKING_REPEAT_WEEKS)
    pay_at_court: bool = Field(default=False)
    customer_name: Optional[str] = Field(default=None, max_length=200)
    customer_email: Optional[str] = Field(default=None, max_length=255)
    customer_phone: Optional[str] = Field(default=None, max_length=40)

    @property
    def is_walk_in(self) -> bool:
        return bool(self.customer_name)


class BookingCancel(StrictRequestModel):
    reason: Optional[str] = Field(default=None, max_length=500)


class BookingReschedule(StrictRequestModel):
    """New interval for an existing booking; one occurrence, same court."""

    start_time: str = Field(..., description="ISO-8601 start, on the hour or half hour")
    end_time: str = Field(..., description="ISO-8601 end, on the hour or half hour")


class BookingResponse(StrictModel):
    id: str
    court_id: str
    customer_id: Optional[str] = None
    customer_name: Optional[str] = None
    start_time: datetime
    end_time: datetime
    status: str
    total_price_cents: int
    cancel_reason: Optional[str] = None
    rescheduled_from_id: Optional[str] = None


class BookingCreateResponse(StrictModel):
    """First occurrence plus the ids of every weekly copy."""

    id: str
    ids: List[str]
    status: str
    start_time: datetime
    end_time: datetime
    total_price_cents: int
    payment: Optional[Dict[str, Any]] = None

