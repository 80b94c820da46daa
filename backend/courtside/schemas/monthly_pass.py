"""Monthly pass schemas."""

from datetime import datetime
from typing import Optional

from pydantic import Field

from ._strict_base import StrictModel, StrictRequestModel


class MonthlyPassRequest(StrictRequestModel):
    court_id: str
    month: str = Field(..., description="YYYY-MM; the current or the next month")
    weekday: int = Field(..., description="0 = Sunday ... 6 = Saturday")
    start_time: str = Field(..., description="HH:MM")
    end_time: str = Field(..., description="HH:MM")
    accept_terms: bool = Field(default=False)


class MonthlyPassResponse(StrictModel):
    id: str
    court_id: str
    customer_id: str
    month: str
    weekday: int
    start_time: str
    end_time: str
    status: str
    price_cents: int
    confirmed_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
