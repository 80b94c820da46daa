# backend/courtside/models/booking.py
"""
Booking model.

A booking holds one concrete interval on one court. Weekly repeats are
stored as independent rows; nothing links occurrences of a series, so
each can be confirmed or cancelled on its own.

``start_time``/``end_time`` are naive wall-clock datetimes in the
establishment timezone.
"""

from datetime import datetime, timezone
from enum import Enum
import logging
from typing import Any, Optional

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import ulid

from ..database import Base
from ..domain.scheduling import Interval

logger = logging.getLogger(__name__)


class BookingStatus(str, Enum):
    """Booking lifecycle statuses."""

    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    CANCELLED = "CANCELLED"


ACTIVE_BOOKING_STATUSES = (BookingStatus.PENDING.value, BookingStatus.CONFIRMED.value)


class Booking(Base):
    __tablename__ = "bookings"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    court_id = Column(String(26), ForeignKey("courts.id"), nullable=False)
    # Null for walk-in bookings the owner records on a guest's behalf
    customer_id = Column(String(26), ForeignKey("users.id"), nullable=True, index=True)
    customer_name = Column(String(200), nullable=True)
    customer_email = Column(String(255), nullable=True)
    customer_phone = Column(String(40), nullable=True)

    start_time = Column(DateTime, nullable=False)
    end_time = Column(DateTime, nullable=False)
    status = Column(String(20), nullable=False, default=BookingStatus.PENDING.value, index=True)
    total_price_cents = Column(Integer, nullable=False, default=0)
    pay_at_court = Column(Boolean, nullable=False, default=False)

    created_by_id = Column(String(26), ForeignKey("users.id"), nullable=True)
    # Wall-clock admission time in the establishment timezone (rate limiting)
    requested_at = Column(DateTime, nullable=True, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
    confirmed_at = Column(DateTime(timezone=True), nullable=True)
    cancelled_at = Column(DateTime(timezone=True), nullable=True)
    cancelled_by_id = Column(String(26), ForeignKey("users.id"), nullable=True)
    cancel_reason = Column(Text, nullable=True)
    # Set on the booking created by a customer reschedule; unique, so each booking moves once
    rescheduled_from_id = Column(
        String(26), ForeignKey("bookings.id", ondelete="SET NULL"), nullable=True, unique=True
    )

    court = relationship("Court")
    customer = relationship("User", foreign_keys=[customer_id])
    rescheduled_from = relationship("Booking", remote_side=[id], foreign_keys=[rescheduled_from_id])

    __table_args__ = (
        CheckConstraint("status IN ('PENDING', 'CONFIRMED', 'CANCELLED')", name="ck_bookings_status"),
        CheckConstraint("end_time > start_time", name="ck_bookings_time_order"),
        CheckConstraint("total_price_cents >= 0", name="ck_bookings_price_non_negative"),
        Index("ix_bookings_court_window", "court_id", "start_time", "end_time"),
    )

    @property
    def interval(self) -> Interval:
        return Interval(self.start_time, self.end_time)

    @property
    def is_active(self) -> bool:
        return self.status in ACTIVE_BOOKING_STATUSES

    def confirm(self, at: Optional[datetime] = None) -> None:
        self.status = BookingStatus.CONFIRMED.value
        self.confirmed_at = at or datetime.now(timezone.utc)
        logger.info("Booking %s confirmed", self.id)

    def cancel(
        self,
        cancelled_by_user_id: Optional[str],
        reason: Optional[str] = None,
        at: Optional[datetime] = None,
    ) -> None:
        self.status = BookingStatus.CANCELLED.value
        self.cancelled_at = at or datetime.now(timezone.utc)
        self.cancelled_by_id = cancelled_by_user_id
        self.cancel_reason = reason
        logger.info("Booking %s cancelled by %s", self.id, cancelled_by_user_id)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "court_id": self.court_id,
            "customer_id": self.customer_id,
            "customer_name": self.customer_name,
            "start_time": self.start_time.isoformat(),
            "end_time": self.end_time.isoformat(),
            "status": self.status,
            "total_price_cents": self.total_price_cents,
            "rescheduled_from_id": self.rescheduled_from_id,
        }

    def __repr__(self) -> str:
        return (
            f"<Booking {self.id}: court={self.court_id}, customer={self.customer_id}, "
            f"{self.start_time}-{self.end_time}, status={self.status}>"
        )
