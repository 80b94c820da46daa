# backend/courtside/models/court_block.py
"""
CourtBlock model.

An opaque closure interval on a court. Blocks have no status: deleting the
row is the only way to free the time. Blocks created by confirming a
monthly pass keep a ``monthly_pass_id`` so conflicts against them can be
reported as pass conflicts.
"""

from typing import Any

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Index, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import ulid

from ..database import Base
from ..domain.scheduling import Interval


class CourtBlock(Base):
    __tablename__ = "court_blocks"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    court_id = Column(String(26), ForeignKey("courts.id"), nullable=False)
    start_time = Column(DateTime, nullable=False)
    end_time = Column(DateTime, nullable=False)
    note = Column(Text, nullable=True)
    created_by_id = Column(String(26), ForeignKey("users.id"), nullable=False)
    monthly_pass_id = Column(
        String(26), ForeignKey("monthly_passes.id", ondelete="SET NULL"), nullable=True, index=True
    )
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    court = relationship("Court")
    monthly_pass = relationship("MonthlyPass", back_populates="blocks")

    __table_args__ = (
        CheckConstraint("end_time > start_time", name="ck_court_blocks_time_order"),
        Index("ix_court_blocks_court_window", "court_id", "start_time", "end_time"),
    )

    @property
    def interval(self) -> Interval:
        return Interval(self.start_time, self.end_time)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "court_id": self.court_id,
            "start_time": self.start_time.isoformat(),
            "end_time": self.end_time.isoformat(),
            "note": self.note,
            "monthly_pass_id": self.monthly_pass_id,
        }

    def __repr__(self) -> str:
        return f"<CourtBlock {self.id}: court={self.court_id}, {self.start_time}-{self.end_time}>"
