# backend/courtside/services/calendar_resolver.py
"""
Calendar Resolver.

Merges an establishment's weekly calendar with single-date holiday
overrides into the effective operating window of one date:

1. Weekday default: open iff the weekday is in ``open_weekdays``; hours
   from the per-weekday override list, else the default hours.
2. Holiday override (at most one per date) wins in both directions:
   ``is_open = False`` closes an otherwise-open day, ``is_open = True``
   opens an otherwise-closed day and substitutes its own hours when given.
"""

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
import logging
from typing import Dict, Optional

from sqlalchemy.orm import Session

from ..core.constants import HOLIDAY_CLOSED_NOTICE, HOLIDAY_SPECIAL_HOURS_NOTICE, NOTICE_SEPARATOR
from ..core.exceptions import CourtClosedException, NotFoundException, OutOfHoursException
from ..domain.scheduling import Interval, combine, hhmm_to_minutes, js_weekday
from ..models.establishment import Establishment, EstablishmentHoliday
from ..repositories import RepositoryFactory
from ..repositories.establishment_repository import EstablishmentRepository
from .base import BaseService

logger = logging.getLogger(__name__)

HolidayMap = Dict[date, EstablishmentHoliday]


@dataclass(frozen=True)
class DayCalendar:
    """Resolved operating calendar of one date."""

    date: date
    is_closed: bool
    opening_time: str
    closing_time: str
    notice: Optional[str] = None
    holiday_note: Optional[str] = None

    @property
    def has_valid_window(self) -> bool:
        return hhmm_to_minutes(self.closing_time) > hhmm_to_minutes(self.opening_time)

    @property
    def window(self) -> Optional[Interval]:
        """Opening-to-closing interval, or None when closed or misconfigured."""
        if self.is_closed or not self.has_valid_window:
            return None
        return Interval(combine(self.date, self.opening_time), combine(self.date, self.closing_time))

    def to_dict(self) -> dict:
        return {
            "date": self.date.isoformat(),
            "is_closed": self.is_closed,
            "opening_time": self.opening_time,
            "closing_time": self.closing_time,
            "notice": self.notice,
        }


def _with_note(notice: str, note: Optional[str]) -> str:
    note = (note or "").strip()
    return f"{notice}{NOTICE_SEPARATOR}{note}" if note else notice


def resolve_day_calendar(
    establishment: Establishment, day: date, holiday: Optional[EstablishmentHoliday] = None
) -> DayCalendar:
    """Pure resolution of one date; ``holiday`` is the override for ``day`` if any."""
    weekday = js_weekday(day)
    is_closed = not establishment.is_weekday_open(weekday)
    opening = establishment.weekday_opening(weekday)
    closing = establishment.weekday_closing(weekday)
    notice = None
    holiday_note = None

    if holiday is not None:
        holiday_note = (holiday.note or "").strip() or None
        if not holiday.is_open:
            is_closed = True
            notice = _with_note(HOLIDAY_CLOSED_NOTICE, holiday.note)
        else:
            is_closed = False
            opening = holiday.opening_time or opening
            closing = holiday.closing_time or closing
            notice = _with_note(HOLIDAY_SPECIAL_HOURS_NOTICE, holiday.note)

    return DayCalendar(
        date=day,
        is_closed=is_closed,
        opening_time=opening,
        closing_time=closing,
        notice=notice,
        holiday_note=holiday_note,
    )


class CalendarResolver(BaseService):
    """Resolves effective operating calendars and checks intervals against them."""

    def __init__(self, db: Session, establishment_repository: Optional[EstablishmentRepository] = None):
        super().__init__(db)
        self.establishment_repository = (
            establishment_repository or RepositoryFactory.create_establishment_repository(db)
        )

    def resolve(
        self, establishment: Establishment, day: date, holidays: Optional[HolidayMap] = None
    ) -> DayCalendar:
        """
        Resolve one date.

        Args:
            establishment: Establishment whose calendar applies
            day: Local calendar date
            holidays: Preloaded overrides keyed by date; loaded from storage when omitted
        """
        if holidays is None:
            holiday = self.establishment_repository.get_holiday(establishment.id, day)
        else:
            holiday = holidays.get(day)
        return resolve_day_calendar(establishment, day, holiday)

    @BaseService.measure_operation("resolve_for_establishment_id")
    def resolve_for_establishment_id(self, establishment_id: str, day: date) -> DayCalendar:
        establishment = self.establishment_repository.get_by_id(establishment_id)
        if establishment is None:
            raise NotFoundException("Establishment not found", details={"establishment_id": establishment_id})
        return self.resolve(establishment, day)

    def load_holidays(self, establishment: Establishment, start: date, end: date) -> HolidayMap:
        return self.establishment_repository.get_holidays_between(establishment.id, start, end)

    def assert_within_hours(
        self,
        establishment: Establishment,
        interval: Interval,
        holidays: Optional[HolidayMap] = None,
    ) -> DayCalendar:
        """
        Require ``interval`` to sit inside its date's operating window.

        Raises:
            OutOfHoursException: spans two dates, invalid window, or outside the hours
            CourtClosedException: the resolved calendar is closed on that date
        """
        day = interval.start.date()
        if interval.end.date() != day:
            raise OutOfHoursException(
                "Bookings must start and end on the same day",
                details={"date": day.isoformat()},
            )
        calendar = self.resolve(establishment, day, holidays)
        check_within_calendar(calendar, interval)
        return calendar


def check_within_calendar(calendar: DayCalendar, interval: Interval) -> None:
    day_key = calendar.date.isoformat()
    if calendar.is_closed:
        message = f"Closed on {day_key}"
        if calendar.holiday_note:
            message = f"{message} ({calendar.holiday_note})"
        raise CourtClosedException(message, details={"date": day_key, "notice": calendar.notice})

    window = calendar.window
    if window is None:
        raise OutOfHoursException(
            f"Invalid establishment hours on {day_key}", details={"date": day_key}
        )
    if interval.start < window.start or interval.end > window.end:
        raise OutOfHoursException(
            f"Time outside of operating hours on {day_key} "
            f"({calendar.opening_time}-{calendar.closing_time})",
            details={
                "date": day_key,
                "opening_time": calendar.opening_time,
                "closing_time": calendar.closing_time,
            },
        )


def day_bounds(day: date) -> Interval:
    """Midnight-to-midnight interval of a local date."""
    start = datetime.combine(day, time.min)
    return Interval(start, start + timedelta(days=1))
