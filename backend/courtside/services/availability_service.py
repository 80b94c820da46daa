# backend/courtside/services/availability_service.py
"""
Availability read model.

Serves the booking UI: the resolved calendar of a day with the bookings
and blocks already on the court, and the grid of bookable start times.
Nothing here is authoritative for admission; admissions re-check inside
their own transaction.
"""

from datetime import date, timedelta
import logging
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from ..core.exceptions import NotFoundException, StateException
from ..models.court import Court
from ..repositories import RepositoryFactory
from .base import BaseService
from .calendar_resolver import CalendarResolver, day_bounds
from .slot_grid import SlotGrid, build_slot_grid

logger = logging.getLogger(__name__)


class AvailabilityService(BaseService):
    def __init__(self, db: Session, calendar_resolver: Optional[CalendarResolver] = None, clock=None):
        super().__init__(db, clock)
        self.calendar_resolver = calendar_resolver or CalendarResolver(db)
        self.court_repository = RepositoryFactory.create_court_repository(db)
        self.booking_repository = RepositoryFactory.create_booking_repository(db)
        self.block_repository = RepositoryFactory.create_court_block_repository(db)

    def _get_active_court(self, court_id: str) -> Court:
        court = self.court_repository.get_with_establishment(court_id)
        if court is None:
            raise NotFoundException("Court not found", details={"court_id": court_id})
        if not court.is_active:
            raise StateException("Court is inactive", details={"court_id": court_id})
        return court

    @BaseService.measure_operation("get_day_availability")
    def get_day_availability(self, court_id: str, day: date) -> Dict[str, Any]:
        """
        Resolved calendar plus the day's non-cancelled bookings and blocks.

        Returns:
            ``{court_id, date, is_closed, notice, opening_time, closing_time,
            bookings[], blocks[]}`` with ISO-8601 timestamps
        """
        court = self._get_active_court(court_id)
        calendar = self.calendar_resolver.resolve(court.establishment, day)
        bounds = day_bounds(day)

        bookings = self.booking_repository.list_for_court_between(court.id, bounds.start, bounds.end)
        blocks = self.block_repository.list_for_court_between(court.id, bounds.start, bounds.end)

        return {
            "court_id": court.id,
            **calendar.to_dict(),
            "bookings": [
                {
                    "id": b.id,
                    "start_time": b.start_time.isoformat(),
                    "end_time": b.end_time.isoformat(),
                    "status": b.status,
                }
                for b in bookings
            ],
            "blocks": [
                {
                    "id": b.id,
                    "start_time": b.start_time.isoformat(),
                    "end_time": b.end_time.isoformat(),
                    "note": b.note,
                    "monthly_pass_id": b.monthly_pass_id,
                }
                for b in blocks
            ],
        }

    @BaseService.measure_operation("get_available_slots")
    def get_available_slots(
        self, court_id: str, day: date, duration_minutes: int, include_past: bool = False
    ) -> SlotGrid:
        """
        Bookable start times for ``duration_minutes`` on ``day``.

        Bookings are padded by the establishment buffer; blocks are not.
        Starts not after "now" are dropped unless ``include_past``.
        """
        court = self._get_active_court(court_id)
        establishment = court.establishment
        calendar = self.calendar_resolver.resolve(establishment, day)
        buffer_minutes = establishment.booking_buffer_minutes or 0

        # Padded bookings that start the previous evening or end next morning still count
        bounds = day_bounds(day)
        pad = timedelta(minutes=buffer_minutes)
        bookings = self.booking_repository.list_for_court_between(
            court.id, bounds.start - pad, bounds.end + pad
        )
        blocks = self.block_repository.list_for_court_between(court.id, bounds.start, bounds.end)

        return build_slot_grid(
            calendar,
            duration_minutes,
            bookings=[b.interval for b in bookings],
            blocks=[b.interval for b in blocks],
            buffer_minutes=buffer_minutes,
            now=None if include_past else self.now(),
        )
