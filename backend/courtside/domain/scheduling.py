# backend/courtside/domain/scheduling.py
"""
Scheduling primitives shared by every admission path.

Calendar logic works on ``datetime.date`` (a local calendar day, never a
UTC midnight); stored intervals are naive wall-clock ``datetime`` pairs in
the establishment timezone. Weekdays are numbered 0 = Sunday ... 6 = Saturday.
"""

from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
import re
from typing import TYPE_CHECKING, Iterator, List, Optional, Tuple, Union

from ..core.constants import ALIGNED_MINUTES
from ..core.exceptions import ValidationException
from ..core.timezone_utils import to_local_naive

if TYPE_CHECKING:
    from ..models.monthly_pass import MonthlyPass

_HHMM_RE = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")
_YMD_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_MONTH_RE = re.compile(r"^(\d{4})-(\d{2})$")


# Parsing / formatting


def parse_hhmm(value: str, field: str = "time") -> time:
    match = _HHMM_RE.match(value or "")
    if not match:
        raise ValidationException(
            f"Invalid {field} (use HH:MM)", details={"field": field, "value": value}
        )
    return time(int(match.group(1)), int(match.group(2)))


def format_hhmm(value: Union[datetime, time]) -> str:
    return f"{value.hour:02d}:{value.minute:02d}"


def hhmm_to_minutes(value: str) -> int:
    parsed = parse_hhmm(value)
    return parsed.hour * 60 + parsed.minute


def parse_ymd(value: Union[str, date], field: str = "date") -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not _YMD_RE.match(value or ""):
        raise ValidationException(
            f"Invalid {field} (use YYYY-MM-DD)", details={"field": field, "value": value}
        )
    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        raise ValidationException(
            f"Invalid {field} (use YYYY-MM-DD)", details={"field": field, "value": value}
        ) from exc


def parse_month(value: str) -> Tuple[int, int]:
    match = _MONTH_RE.match(value or "")
    if not match:
        raise ValidationException("Invalid month (use YYYY-MM)", details={"value": value})
    year, month = int(match.group(1)), int(match.group(2))
    if not 1 <= month <= 12:
        raise ValidationException("Invalid month (use YYYY-MM)", details={"value": value})
    return year, month


def month_key(day: date) -> str:
    return f"{day.year:04d}-{day.month:02d}"


def first_day_of_month(month: str) -> date:
    year, mon = parse_month(month)
    return date(year, mon, 1)


def next_month_first_day(day: date) -> date:
    if day.month == 12:
        return date(day.year + 1, 1, 1)
    return date(day.year, day.month + 1, 1)


def parse_iso_datetime(value: Union[str, datetime], field: str = "time") -> datetime:
    """Parse an ISO-8601 timestamp into the naive establishment-local frame."""
    if isinstance(value, datetime):
        return to_local_naive(value)
    if not value:
        raise ValidationException(f"Invalid {field}", details={"field": field})
    raw = value.strip()
    if raw.endswith("Z"):
        raw = raw[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(raw)
    except ValueError as exc:
        raise ValidationException(
            f"Invalid {field} (use an ISO-8601 timestamp)",
            details={"field": field, "value": value},
        ) from exc
    return to_local_naive(parsed)


def combine(day: date, hhmm: str) -> datetime:
    return datetime.combine(day, parse_hhmm(hhmm))


def js_weekday(day: date) -> int:
    """0 = Sunday ... 6 = Saturday."""
    return (day.weekday() + 1) % 7


# Alignment


def is_half_hour_aligned(value: datetime) -> bool:
    return value.minute in ALIGNED_MINUTES and value.second == 0 and value.microsecond == 0


def assert_half_hour_aligned(value: datetime, field: str = "time") -> None:
    if not is_half_hour_aligned(value):
        raise ValidationException(
            "Times must be on the hour or half hour (e.g. 19:00 or 19:30)",
            details={"field": field, "value": value.isoformat()},
        )


def assert_hhmm_aligned(value: str, field: str = "time") -> None:
    if parse_hhmm(value, field).minute not in ALIGNED_MINUTES:
        raise ValidationException(
            "Times must be on the hour or half hour (e.g. 19:00 or 19:30)",
            details={"field": field, "value": value},
        )


# Date iteration


def iter_dates(start: date, end: date) -> Iterator[date]:
    """Every calendar date from ``start`` to ``end`` inclusive."""
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def weekday_dates_in_month(month: str, weekday: int) -> List[date]:
    year, mon = parse_month(month)
    last_day = calendar.monthrange(year, mon)[1]
    return [d for d in iter_dates(date(year, mon, 1), date(year, mon, last_day)) if js_weekday(d) == weekday]


# Intervals


@dataclass(frozen=True)
class Interval:
    """Half-open ``[start, end)`` wall-clock interval."""

    start: datetime
    end: datetime

    @classmethod
    def validated(cls, start: datetime, end: datetime) -> "Interval":
        """Build an admissible interval: ``end > start`` and both ends on the 30-minute grid."""
        if end <= start:
            raise ValidationException(
                "Invalid time range: end must be after start",
                details={"start": start.isoformat(), "end": end.isoformat()},
            )
        assert_half_hour_aligned(start, "start_time")
        assert_half_hour_aligned(end, "end_time")
        return cls(start, end)

    @property
    def duration_minutes(self) -> int:
        return int((self.end - self.start).total_seconds() // 60)

    @property
    def day(self) -> date:
        return self.start.date()

    def overlaps(self, other: "Interval") -> bool:
        # Touching endpoints do not overlap
        return self.start < other.end and self.end > other.start

    def padded(self, minutes: int) -> "Interval":
        if minutes <= 0:
            return self
        pad = timedelta(minutes=minutes)
        return Interval(self.start - pad, self.end + pad)

    def shifted(self, days: int) -> "Interval":
        delta = timedelta(days=days)
        return Interval(self.start + delta, self.end + delta)

    def weekly_occurrences(self, repeat_weeks: int) -> List["Interval"]:
        """This interval plus ``repeat_weeks`` copies spaced 7 days apart."""
        return [self.shifted(7 * week) for week in range(repeat_weeks + 1)]

    def __str__(self) -> str:
        return f"{self.start.date().isoformat()} {format_hhmm(self.start)}-{format_hhmm(self.end)}"


@dataclass(frozen=True)
class RecurringWeeklyReservation:
    """
    A weekday + time-of-day pattern repeated over one calendar month.

    PENDING passes are checked through their implicit occurrences; ACTIVE
    ones are ``materialized`` as concrete blocks, but both expose the same
    ``occurrences_in_month`` so conflict checks take a single path.
    """

    court_id: str
    month: str
    weekday: int
    start_hhmm: str
    end_hhmm: str
    materialized: bool = False
    pass_id: Optional[str] = None

    def __post_init__(self) -> None:
        parse_month(self.month)
        if not 0 <= self.weekday <= 6:
            raise ValidationException("Invalid weekday", details={"weekday": self.weekday})
        if parse_hhmm(self.end_hhmm, "end_time") <= parse_hhmm(self.start_hhmm, "start_time"):
            raise ValidationException("Invalid time range: end must be after start")

    @classmethod
    def from_pass(cls, monthly_pass: "MonthlyPass") -> "RecurringWeeklyReservation":
        from ..models.monthly_pass import MonthlyPassStatus

        return cls(
            court_id=monthly_pass.court_id,
            month=monthly_pass.month,
            weekday=monthly_pass.weekday,
            start_hhmm=monthly_pass.start_time,
            end_hhmm=monthly_pass.end_time,
            materialized=monthly_pass.status == MonthlyPassStatus.ACTIVE,
            pass_id=monthly_pass.id,
        )

    def occurrence_dates(self) -> List[date]:
        return weekday_dates_in_month(self.month, self.weekday)

    def occurrence_on(self, day: date) -> Interval:
        return Interval(combine(day, self.start_hhmm), combine(day, self.end_hhmm))

    def occurrences_in_month(self) -> List[Interval]:
        return [self.occurrence_on(day) for day in self.occurrence_dates()]

    def first_occurrence(self) -> Optional[Interval]:
        dates = self.occurrence_dates()
        return self.occurrence_on(dates[0]) if dates else None

    def overlaps_weekly(self, other: "RecurringWeeklyReservation") -> bool:
        """Same weekday and overlapping time of day; dates are irrelevant within a month."""
        if self.weekday != other.weekday:
            return False
        return hhmm_to_minutes(self.start_hhmm) < hhmm_to_minutes(other.end_hhmm) and hhmm_to_minutes(
            self.end_hhmm
        ) > hhmm_to_minutes(other.start_hhmm)
