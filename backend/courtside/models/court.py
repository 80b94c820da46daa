# backend/courtside/models/court.py
"""Court model: the resource whose time axis every commitment competes for."""

from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import ulid

from ..database import Base


class Court(Base):
    __tablename__ = "courts"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    establishment_id = Column(String(26), ForeignKey("establishments.id"), nullable=False, index=True)
    name = Column(String(200), nullable=False)
    sport_type = Column(String(50), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)

    price_per_hour_cents = Column(Integer, nullable=False, default=0)
    discount_percent_over_90min = Column(Integer, nullable=False, default=0)
    monthly_price_cents = Column(Integer, nullable=True)
    monthly_terms = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    establishment = relationship("Establishment", back_populates="courts")

    __table_args__ = (
        CheckConstraint("price_per_hour_cents >= 0", name="ck_courts_price_non_negative"),
        CheckConstraint(
            "discount_percent_over_90min >= 0 AND discount_percent_over_90min <= 100",
            name="ck_courts_discount_range",
        ),
    )

    def __repr__(self) -> str:
        return f"<Court {self.id}: {self.name} active={self.is_active}>"
