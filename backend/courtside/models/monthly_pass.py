# backend/courtside/models/monthly_pass.py
"""
MonthlyPass model: a customer's standing weekly slot for one calendar month.

State machine:
    (none) -> PENDING     customer request
    PENDING -> ACTIVE     owner confirms; occurrences materialize as CourtBlocks
    PENDING -> CANCELLED  owner rejects

A CANCELLED row may be re-requested, which moves it back to PENDING
(the row is unique per court, customer and month).
"""

from enum import Enum

from sqlalchemy import (
    CheckConstraint,
    Column,
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

from ..database import Base


class MonthlyPassStatus(str, Enum):
    PENDING = "PENDING"
    ACTIVE = "ACTIVE"
    CANCELLED = "CANCELLED"


class MonthlyPass(Base):
    __tablename__ = "monthly_passes"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    court_id = Column(String(26), ForeignKey("courts.id"), nullable=False, index=True)
    customer_id = Column(String(26), ForeignKey("users.id"), nullable=False, index=True)
    month = Column(String(7), nullable=False)
    weekday = Column(Integer, nullable=False)
    start_time = Column(String(5), nullable=False)
    end_time = Column(String(5), nullable=False)
    status = Column(String(20), nullable=False, default=MonthlyPassStatus.PENDING.value)
    price_cents = Column(Integer, nullable=False)
    terms_snapshot = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
    confirmed_at = Column(DateTime(timezone=True), nullable=True)
    cancelled_at = Column(DateTime(timezone=True), nullable=True)

    court = relationship("Court")
    customer = relationship("User")
    blocks = relationship("CourtBlock", back_populates="monthly_pass")

    __table_args__ = (
        UniqueConstraint("court_id", "customer_id", "month", name="uq_monthly_passes_court_customer_month"),
        CheckConstraint("status IN ('PENDING', 'ACTIVE', 'CANCELLED')", name="ck_monthly_passes_status"),
        CheckConstraint("weekday >= 0 AND weekday <= 6", name="ck_monthly_passes_weekday"),
        CheckConstraint("price_cents > 0", name="ck_monthly_passes_price_positive"),
    )

    def __repr__(self) -> str:
        return (
            f"<MonthlyPass {self.id}: court={self.court_id}, month={self.month}, "
            f"weekday={self.weekday} {self.start_time}-{self.end_time}, status={self.status}>"
        )
