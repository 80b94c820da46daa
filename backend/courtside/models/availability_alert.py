# backend/courtside/models/availability_alert.py
"""AvailabilityAlert: a customer's watch on a currently unavailable interval."""

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import ulid

from ..database import Base
from ..domain.scheduling import Interval


class AvailabilityAlert(Base):
    __tablename__ = "availability_alerts"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    user_id = Column(String(26), ForeignKey("users.id"), nullable=False, index=True)
    court_id = Column(String(26), ForeignKey("courts.id"), nullable=False, index=True)
    start_time = Column(DateTime, nullable=False)
    end_time = Column(DateTime, nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    notified_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    user = relationship("User")
    court = relationship("Court")

    __table_args__ = (
        UniqueConstraint(
            "user_id", "court_id", "start_time", "end_time", name="uq_availability_alerts_window"
        ),
    )

    @property
    def interval(self) -> Interval:
        return Interval(self.start_time, self.end_time)
