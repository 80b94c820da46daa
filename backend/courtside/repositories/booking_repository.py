# backend/courtside/repositories/booking_repository.py
"""
Booking Repository.

Lifecycle queries for bookings. Overlap queries used by admission live in
``ConflictCheckerRepository``.
"""

from datetime import datetime
import logging
from typing import List, Optional, cast

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from ..core.exceptions import RepositoryException
from ..database.session_utils import supports_row_locks
from ..models.booking import Booking, BookingStatus
from ..models.court import Court
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class BookingRepository(BaseRepository[Booking]):
    def __init__(self, db: Session):
        super().__init__(db, Booking)

    def get_with_court(self, booking_id: str, for_update: bool = False) -> Optional[Booking]:
        """Booking with its court and establishment loaded."""
        try:
            query = (
                self.db.query(Booking)
                .options(joinedload(Booking.court).joinedload(Court.establishment))
                .filter(Booking.id == booking_id)
            )
            if for_update and supports_row_locks(self.db):
                query = query.with_for_update(of=Booking)
            return cast(Optional[Booking], query.first())
        except SQLAlchemyError as e:
            self.logger.error(f"Error loading booking {booking_id}: {str(e)}")
            raise RepositoryException(f"Failed to load booking: {str(e)}")

    def count_requested_since(self, customer_id: str, since: datetime) -> int:
        """Bookings the customer requested at or after ``since`` (any status)."""
        try:
            return (
                self.db.query(Booking)
                .filter(Booking.customer_id == customer_id, Booking.requested_at >= since)
                .count()
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error counting recent bookings: {str(e)}")
            raise RepositoryException(f"Failed to count bookings: {str(e)}")

    def get_pending_overlapping(
        self, court_id: str, start: datetime, end: datetime, exclude_booking_id: str
    ) -> List[Booking]:
        """PENDING bookings that lose the slot when an overlapping booking is confirmed."""
        try:
            return cast(
                List[Booking],
                self.db.query(Booking)
                .options(joinedload(Booking.customer))
                .filter(
                    Booking.court_id == court_id,
                    Booking.status == BookingStatus.PENDING.value,
                    Booking.id != exclude_booking_id,
                    Booking.start_time < end,
                    Booking.end_time > start,
                )
                .all(),
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error loading overlapping pending bookings: {str(e)}")
            raise RepositoryException(f"Failed to load pending bookings: {str(e)}")

    def list_for_court_between(self, court_id: str, start: datetime, end: datetime) -> List[Booking]:
        """Non-cancelled bookings on a court intersecting ``[start, end)``, with customers."""
        try:
            return cast(
                List[Booking],
                self.db.query(Booking)
                .options(joinedload(Booking.customer))
                .filter(
                    Booking.court_id == court_id,
                    Booking.status != BookingStatus.CANCELLED.value,
                    Booking.start_time < end,
                    Booking.end_time > start,
                )
                .order_by(Booking.start_time)
                .all(),
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error listing bookings: {str(e)}")
            raise RepositoryException(f"Failed to list bookings: {str(e)}")
