"""Court block schemas."""

from datetime import datetime
from typing import List, Optional

from pydantic import Field

from ._strict_base import StrictModel, StrictRequestModel


class BlockCreate(StrictRequestModel):
    court_id: str
    start_time: str = Field(..., description="ISO-8601 start")
    end_time: str = Field(..., description="ISO-8601 end")
    note: Optional[str] = Field(default=None, max_length=500)
    repeat_weeks: Optional[int] = Field(default=0, description="Extra weekly copies; clamped to 0..52")


class BlockSeriesCreate(StrictRequestModel):
    """Same time range on every selected weekday between two dates, inclusive."""

    court_id: str
    start_date: str = Field(..., description="YYYY-MM-DD")
    end_date: str = Field(..., description="YYYY-MM-DD")
    weekdays: List[int] = Field(..., description="0 = Sunday ... 6 = Saturday")
    start_time: str = Field(..., description="HH:MM")
    end_time: str = Field(..., description="HH:MM")
    note: Optional[str] = Field(default=None, max_length=500)


class BlockResponse(StrictModel):
    id: str
    court_id: str
    start_time: datetime
    end_time: datetime
    note: Optional[str] = None
    monthly_pass_id: Optional[str] = None


class BlockAdmissionResponse(StrictModel):
    ids: List[str]
    blocks: List[BlockResponse]
