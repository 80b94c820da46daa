# backend/courtside/models/establishment.py
"""
Establishment and holiday override models.

An establishment carries the weekly operating calendar (open weekdays,
default hours, optional per-weekday hours) plus policy flags consumed by
admission: booking buffer, owner confirmation, online payment, and the
minimum notice for customer cancellation.

Times are stored as ``HH:MM`` strings; per-weekday overrides are 7-element
JSON lists indexed 0 = Sunday ... 6 = Saturday, with null meaning "use the
default".
"""

from typing import List, Optional

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import ulid

from ..core.constants import ALL_WEEKDAYS, DEFAULT_CLOSING_TIME, DEFAULT_OPENING_TIME
from ..database import Base


class Establishment(Base):
    __tablename__ = "establishments"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    owner_id = Column(String(26), ForeignKey("users.id"), nullable=False, index=True)
    name = Column(String(200), nullable=False)

    open_weekdays = Column(JSON, nullable=False, default=lambda: list(ALL_WEEKDAYS))
    opening_time = Column(String(5), nullable=False, default=DEFAULT_OPENING_TIME)
    closing_time = Column(String(5), nullable=False, default=DEFAULT_CLOSING_TIME)
    opening_time_by_weekday = Column(JSON, nullable=True)
    closing_time_by_weekday = Column(JSON, nullable=True)

    booking_buffer_minutes = Column(Integer, nullable=False, default=0)
    requires_booking_confirmation = Column(Boolean, nullable=False, default=False)
    online_payments_enabled = Column(Boolean, nullable=False, default=False)
    cancel_min_hours = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    owner = relationship("User", back_populates="establishments")
    courts = relationship("Court", back_populates="establishment")
    holidays = relationship(
        "EstablishmentHoliday", back_populates="establishment", cascade="all, delete-orphan"
    )

    __table_args__ = (
        CheckConstraint("booking_buffer_minutes >= 0", name="ck_establishments_buffer"),
        CheckConstraint("cancel_min_hours >= 0", name="ck_establishments_cancel_min_hours"),
    )

    def weekday_opening(self, weekday: int) -> str:
        return _pick(self.opening_time_by_weekday, weekday) or self.opening_time

    def weekday_closing(self, weekday: int) -> str:
        return _pick(self.closing_time_by_weekday, weekday) or self.closing_time

    def is_weekday_open(self, weekday: int) -> bool:
        weekdays = self.open_weekdays if self.open_weekdays is not None else ALL_WEEKDAYS
        return weekday in weekdays

    def __repr__(self) -> str:
        return f"<Establishment {self.id}: {self.name}>"


def _pick(values: Optional[List[Optional[str]]], index: int) -> Optional[str]:
    if not values or index >= len(values):
        return None
    return values[index] or None


class EstablishmentHoliday(Base):
    """Single-date override of the weekly calendar, in either direction."""

    __tablename__ = "establishment_holidays"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    establishment_id = Column(
        String(26), ForeignKey("establishments.id", ondelete="CASCADE"), nullable=False
    )
    date = Column(Date, nullable=False)
    is_open = Column(Boolean, nullable=False, default=False)
    opening_time = Column(String(5), nullable=True)
    closing_time = Column(String(5), nullable=True)
    note = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    establishment = relationship("Establishment", back_populates="holidays")

    __table_args__ = (
        UniqueConstraint("establishment_id", "date", name="uq_establishment_holidays_date"),
    )

    def __repr__(self) -> str:
        state = "open" if self.is_open else "closed"
        return f"<EstablishmentHoliday {self.date} {state}>"
