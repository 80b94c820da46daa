"""
Timezone utilities for the scheduling engine.

Stored intervals are naive wall-clock datetimes in the establishment
timezone; "now" must be taken in the same frame before comparing.
"""

from datetime import datetime
from typing import Callable, Optional

import pytz

from .config import settings

Clock = Callable[[], datetime]


def get_establishment_timezone(name: Optional[str] = None) -> pytz.BaseTzInfo:
    return pytz.timezone(name or settings.timezone)


def local_now(tz_name: Optional[str] = None) -> datetime:
    """Current wall-clock time in the establishment timezone, as a naive datetime."""
    tz = get_establishment_timezone(tz_name)
    return datetime.now(tz).replace(tzinfo=None, microsecond=0)


def to_local_naive(dt: datetime, tz_name: Optional[str] = None) -> datetime:
    """
    Normalize an incoming timestamp to the stored frame.

    Aware values (e.g. ISO strings with an offset) are converted to the
    establishment timezone; naive values are taken as already local.
    """
    if dt.tzinfo is None:
        return dt
    tz = get_establishment_timezone(tz_name)
    return dt.astimezone(tz).replace(tzinfo=None)
