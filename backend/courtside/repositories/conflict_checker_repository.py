# backend/courtside/repositories/conflict_checker_repository.py
"""
ConflictChecker Repository.

Reads the three commitment sets that compete for a court's time axis:
non-cancelled bookings, blocks, and ACTIVE monthly passes. All window
queries use the half-open overlap test ``start < window_end AND
end > window_start``; callers widen the window themselves when existing
bookings must be padded by the buffer.

These reads run inside the admission transaction, so they see rows the
same transaction already flushed (earlier occurrences of a series).
"""

from datetime import datetime
import logging
from typing import List, Optional, cast

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import RepositoryException
from ..models.booking import ACTIVE_BOOKING_STATUSES, Booking
from ..models.court_block import CourtBlock
from ..models.monthly_pass import MonthlyPass, MonthlyPassStatus
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class ConflictCheckerRepository(BaseRepository[Booking]):
    """Repository for conflict checking data access."""

    def __init__(self, db: Session):
        super().__init__(db, Booking)
        self.logger = logging.getLogger(__name__)

    # Booking queries

    def get_bookings_in_window(
        self,
        court_id: str,
        window_start: datetime,
        window_end: datetime,
        exclude_booking_id: Optional[str] = None,
        statuses: Optional[tuple] = None,
    ) -> List[Booking]:
        """
        Non-cancelled bookings on a court intersecting ``[window_start, window_end)``.

        Args:
            court_id: Court to check
            window_start: Inclusive window start
            window_end: Exclusive window end
            exclude_booking_id: Booking to leave out (e.g. the one being confirmed)
            statuses: Override the statuses considered (default PENDING and CONFIRMED)

        Returns:
            Bookings ordered by start time
        """
        try:
            query = self.db.query(Booking).filter(
                Booking.court_id == court_id,
                Booking.status.in_(statuses or ACTIVE_BOOKING_STATUSES),
                Booking.start_time < window_end,
                Booking.end_time > window_start,
            )
            if exclude_booking_id:
                query = query.filter(Booking.id != exclude_booking_id)
            return cast(List[Booking], query.order_by(Booking.start_time).all())
        except SQLAlchemyError as e:
            self.logger.error(f"Error getting bookings for conflict check: {str(e)}")
            raise RepositoryException(f"Failed to get conflict bookings: {str(e)}")

    def get_customer_bookings_in_window(
        self, customer_id: str, window_start: datetime, window_end: datetime
    ) -> List[Booking]:
        """The customer's own non-cancelled bookings on any court in the window."""
        try:
            return cast(
                List[Booking],
                self.db.query(Booking)
                .filter(
                    Booking.customer_id == customer_id,
                    Booking.status.in_(ACTIVE_BOOKING_STATUSES),
                    Booking.start_time < window_end,
                    Booking.end_time > window_start,
                )
                .all(),
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error getting customer bookings: {str(e)}")
            raise RepositoryException(f"Failed to get customer bookings: {str(e)}")

    # Block queries

    def get_blocks_in_window(
        self,
        court_id: str,
        window_start: datetime,
        window_end: datetime,
        exclude_block_id: Optional[str] = None,
        exclude_pass_id: Optional[str] = None,
    ) -> List[CourtBlock]:
        """
        Blocks on a court intersecting the window.

        ``exclude_pass_id`` leaves out blocks materialized from that pass.
        """
        try:
            query = self.db.query(CourtBlock).filter(
                CourtBlock.court_id == court_id,
                CourtBlock.start_time < window_end,
                CourtBlock.end_time > window_start,
            )
            if exclude_block_id:
                query = query.filter(CourtBlock.id != exclude_block_id)
            if exclude_pass_id:
                query = query.filter(
                    (CourtBlock.monthly_pass_id.is_(None))
                    | (CourtBlock.monthly_pass_id != exclude_pass_id)
                )
            return cast(List[CourtBlock], query.order_by(CourtBlock.start_time).all())
        except SQLAlchemyError as e:
            self.logger.error(f"Error getting blocks for conflict check: {str(e)}")
            raise RepositoryException(f"Failed to get conflict blocks: {str(e)}")

    # Monthly pass queries

    def get_active_passes(
        self,
        court_id: str,
        month: str,
        weekday: Optional[int] = None,
        exclude_pass_id: Optional[str] = None,
    ) -> List[MonthlyPass]:
        """ACTIVE passes on a court for a month, optionally narrowed to one weekday."""
        try:
            query = self.db.query(MonthlyPass).filter(
                MonthlyPass.court_id == court_id,
                MonthlyPass.month == month,
                MonthlyPass.status == MonthlyPassStatus.ACTIVE.value,
            )
            if weekday is not None:
                query = query.filter(MonthlyPass.weekday == weekday)
            if exclude_pass_id:
                query = query.filter(MonthlyPass.id != exclude_pass_id)
            return cast(List[MonthlyPass], query.all())
        except SQLAlchemyError as e:
            self.logger.error(f"Error getting active passes: {str(e)}")
            raise RepositoryException(f"Failed to get active passes: {str(e)}")
