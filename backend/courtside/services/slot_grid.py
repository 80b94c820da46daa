# backend/courtside/services/slot_grid.py
"""
Slot Grid Builder.

Produces the bookable start times of one day for a requested duration.
Only available starts are surfaced: a blocked start is omitted, never
shown disabled.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Iterable, List, Optional

from ..core.constants import SLOT_MINUTES
from ..core.exceptions import ValidationException
from ..domain.scheduling import Interval, format_hhmm
from .calendar_resolver import DayCalendar


@dataclass(frozen=True)
class SlotGrid:
    calendar: DayCalendar
    duration_minutes: int
    available_starts: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            **self.calendar.to_dict(),
            "duration_minutes": self.duration_minutes,
            "available_starts": list(self.available_starts),
        }


def validate_duration(duration_minutes: int) -> None:
    if duration_minutes <= 0 or duration_minutes % SLOT_MINUTES != 0:
        raise ValidationException(
            f"Duration must be a positive multiple of {SLOT_MINUTES} minutes",
            details={"duration_minutes": duration_minutes},
        )


def build_slot_grid(
    calendar: DayCalendar,
    duration_minutes: int,
    bookings: Iterable[Interval],
    blocks: Iterable[Interval],
    buffer_minutes: int = 0,
    now: Optional[datetime] = None,
) -> SlotGrid:
    """
    Step through the operating window in 30-minute increments.

    A candidate ``[start, start + duration)`` is kept when it ends by closing
    time, overlaps no buffer-padded booking, overlaps no (unpadded) block,
    and, when ``now`` is given, starts after it.
    """
    validate_duration(duration_minutes)
    window = calendar.window
    if window is None:
        return SlotGrid(calendar, duration_minutes, [])

    padded_bookings = [booking.padded(buffer_minutes) for booking in bookings]
    block_intervals = list(blocks)
    step = timedelta(minutes=SLOT_MINUTES)
    length = timedelta(minutes=duration_minutes)

    starts: List[str] = []
    cursor = window.start
    while cursor + length <= window.end:
        candidate = Interval(cursor, cursor + length)
        if now is not None and cursor <= now:
            cursor += step
            continue
        taken = any(b.overlaps(candidate) for b in padded_bookings) or any(
            b.overlaps(candidate) for b in block_intervals
        )
        if not taken:
            starts.append(format_hhmm(cursor))
        cursor += step

    return SlotGrid(calendar, duration_minutes, starts)
