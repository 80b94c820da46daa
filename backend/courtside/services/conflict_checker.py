# backend/courtside/services/conflict_checker.py
"""
Interval Conflict Checker.

Decides whether a candidate interval on a court overlaps anything already
committed there. Two intervals conflict iff ``start < other.end and
end > other.start``; touching endpoints never conflict.

Padding rules:
- existing bookings are padded by the establishment buffer on both ends
  when a new booking or block is checked against them;
- blocks (including blocks materialized from an ACTIVE pass) are never
  padded;
- monthly pass occurrences are checked without padding.

Every read happens through the caller's session, inside the admission
transaction, never from a cached read model.
"""

from dataclasses import dataclass
from enum import Enum
import logging
from typing import Optional

from sqlalchemy.orm import Session

from ..core.exceptions import (
    OverlapBlockException,
    OverlapBookingException,
    OverlapCustomerException,
    OverlapPassException,
    SlotTakenException,
)
from ..domain.scheduling import Interval, RecurringWeeklyReservation
from ..models.court_block import CourtBlock
from ..models.establishment import Establishment
from ..repositories import RepositoryFactory
from ..repositories.conflict_checker_repository import ConflictCheckerRepository
from .base import BaseService
from .calendar_resolver import CalendarResolver, check_within_calendar

logger = logging.getLogger(__name__)


class ConflictKind(str, Enum):
    BOOKING = "BOOKING"
    BLOCK = "BLOCK"
    PASS = "PASS"


@dataclass(frozen=True)
class Conflict:
    kind: ConflictKind
    commitment_id: str
    interval: Interval

    def to_exception(self, message: Optional[str] = None) -> SlotTakenException:
        exc_class = {
            ConflictKind.BOOKING: OverlapBookingException,
            ConflictKind.BLOCK: OverlapBlockException,
            ConflictKind.PASS: OverlapPassException,
        }[self.kind]
        return exc_class(
            message,
            details={
                "conflict_kind": self.kind.value,
                "conflicting_id": self.commitment_id,
                "conflicting_start": self.interval.start.isoformat(),
                "conflicting_end": self.interval.end.isoformat(),
            },
        )


def block_conflict(block: CourtBlock) -> Conflict:
    kind = ConflictKind.PASS if block.monthly_pass_id else ConflictKind.BLOCK
    return Conflict(kind, block.id, block.interval)


class ConflictChecker(BaseService):
    """
    Service for detecting overlaps between a candidate interval and the
    bookings, blocks and active monthly passes already on a court.
    """

    def __init__(
        self,
        db: Session,
        repository: Optional[ConflictCheckerRepository] = None,
        calendar_resolver: Optional[CalendarResolver] = None,
    ):
        super().__init__(db)
        self.repository = repository or RepositoryFactory.create_conflict_checker_repository(db)
        self.calendar_resolver = calendar_resolver or CalendarResolver(db)

    def find_booking_conflict(
        self,
        court_id: str,
        interval: Interval,
        *,
        buffer_minutes: int = 0,
        exclude_booking_id: Optional[str] = None,
        statuses: Optional[tuple] = None,
    ) -> Optional[Conflict]:
        """First existing booking whose buffer-padded interval overlaps ``interval``."""
        widened = interval.padded(buffer_minutes)
        for booking in self.repository.get_bookings_in_window(
            court_id, widened.start, widened.end, exclude_booking_id, statuses
        ):
            if booking.interval.padded(buffer_minutes).overlaps(interval):
                return Conflict(ConflictKind.BOOKING, booking.id, booking.interval)
        return None

    def find_block_conflict(
        self,
        court_id: str,
        interval: Interval,
        *,
        exclude_block_id: Optional[str] = None,
        exclude_pass_id: Optional[str] = None,
    ) -> Optional[Conflict]:
        """First block overlapping ``interval``; blocks from a pass report kind PASS."""
        blocks = self.repository.get_blocks_in_window(
            court_id, interval.start, interval.end, exclude_block_id, exclude_pass_id
        )
        for block in blocks:
            if block.interval.overlaps(interval):
                return block_conflict(block)
        return None

    def find_conflict(
        self,
        court_id: str,
        interval: Interval,
        *,
        buffer_minutes: int = 0,
        pad_against_blocks: bool = False,
        exclude_booking_id: Optional[str] = None,
        exclude_block_id: Optional[str] = None,
        exclude_pass_id: Optional[str] = None,
    ) -> Optional[Conflict]:
        """
        First commitment overlapping ``interval``: blocks first, then bookings.

        Args:
            court_id: Court whose time axis is checked
            interval: Candidate interval
            buffer_minutes: Padding applied to existing bookings
            pad_against_blocks: Also pad the candidate by the buffer before
                checking blocks (booking admission)
            exclude_booking_id: Booking to ignore
            exclude_block_id: Block to ignore
            exclude_pass_id: Pass whose materialized blocks are ignored

        Returns:
            The conflict, or None when the interval is free
        """
        block_window = interval.padded(buffer_minutes) if pad_against_blocks else interval
        conflict = self.find_block_conflict(
            court_id, block_window, exclude_block_id=exclude_block_id, exclude_pass_id=exclude_pass_id
        )
        if conflict is not None:
            return conflict
        return self.find_booking_conflict(
            court_id, interval, buffer_minutes=buffer_minutes, exclude_booking_id=exclude_booking_id
        )

    def conflicts(self, court_id: str, interval: Interval, **kwargs) -> bool:
        return self.find_conflict(court_id, interval, **kwargs) is not None

    def assert_no_conflict(self, court_id: str, interval: Interval, **kwargs) -> None:
        """Raise the OVERLAP_* exception matching the first conflicting commitment."""
        conflict = self.find_conflict(court_id, interval, **kwargs)
        if conflict is not None:
            raise conflict.to_exception()

    def assert_customer_free(
        self,
        customer_id: str,
        interval: Interval,
        buffer_minutes: int = 0,
        exclude_booking_id: Optional[str] = None,
    ) -> None:
        """A customer cannot hold two overlapping bookings, on any court."""
        widened = interval.padded(buffer_minutes)
        for booking in self.repository.get_customer_bookings_in_window(
            customer_id, widened.start, widened.end
        ):
            if booking.id == exclude_booking_id:
                continue
            if booking.interval.padded(buffer_minutes).overlaps(interval):
                raise OverlapCustomerException(
                    details={"conflicting_id": booking.id, "court_id": booking.court_id}
                )

    # Monthly passes

    @BaseService.measure_operation("assert_pass_available")
    def assert_pass_available(
        self,
        reservation: RecurringWeeklyReservation,
        establishment: Establishment,
        exclude_pass_id: Optional[str] = None,
    ) -> None:
        """
        Full-month validation of a weekly reservation.

        For every date of the month on the reservation's weekday: the date
        must be open and the occurrence inside its hours; the concrete
        occurrence must not overlap a booking or block (blocks materialized
        from ``exclude_pass_id`` are ignored). Finally the pattern must not
        overlap, by weekday and time of day, any other ACTIVE pass.

        Raises the first failure with the offending date in the message.
        """
        dates = reservation.occurrence_dates()
        if dates:
            holidays = self.calendar_resolver.load_holidays(establishment, dates[0], dates[-1])
        else:
            holidays = {}

        for day in dates:
            occurrence = reservation.occurrence_on(day)
            day_key = day.isoformat()
            calendar = self.calendar_resolver.resolve(establishment, day, holidays)
            check_within_calendar(calendar, occurrence)

            booking_conflict = self.find_booking_conflict(reservation.court_id, occurrence)
            if booking_conflict is not None:
                raise booking_conflict.to_exception(
                    f"Time slot unavailable: there is already a booking on {day_key}"
                )

            block_hit = self.find_block_conflict(
                reservation.court_id, occurrence, exclude_pass_id=exclude_pass_id
            )
            if block_hit is not None:
                message = (
                    f"Time slot unavailable: reserved by an active monthly pass on {day_key}"
                    if block_hit.kind == ConflictKind.PASS
                    else f"Time slot unavailable: administrative block on {day_key}"
                )
                raise block_hit.to_exception(message)

        for other in self.repository.get_active_passes(
            reservation.court_id, reservation.month, reservation.weekday, exclude_pass_id
        ):
            if reservation.overlaps_weekly(RecurringWeeklyReservation.from_pass(other)):
                raise OverlapPassException(
                    "Time slot unavailable: already reserved by an active monthly pass",
                    details={"conflicting_id": other.id},
                )

