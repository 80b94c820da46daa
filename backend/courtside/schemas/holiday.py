"""Establishment holiday override schemas."""

from datetime import date
from typing import Optional

from pydantic import Field

from ._strict_base import StrictModel, StrictRequestModel


class HolidayUpsert(StrictRequestModel):
    date: str = Field(..., description="YYYY-MM-DD")
    is_open: bool = Field(default=False, description="False closes the whole day")
    opening_time: Optional[str] = Field(default=None, description="HH:MM, required when open")
    closing_time: Optional[str] = Field(default=None, description="HH:MM, required when open")
    note: Optional[str] = Field(default=None, max_length=200)


class HolidayResponse(StrictModel):
    id: str
    date: date
    is_open: bool
    opening_time: Optional[str] = None
    closing_time: Optional[str] = None
    note: Optional[str] = None
