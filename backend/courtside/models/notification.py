# backend/courtside/models/notification.py
"""In-app notification rows written after an admission commits."""

from enum import Enum

from sqlalchemy import JSON, Column, DateTime, ForeignKey, String, Text
from sqlalchemy.sql import func
import ulid

from ..database import Base


class NotificationKind(str, Enum):
    BOOKING_PENDING = "BOOKING_PENDING"
    BOOKING_CONFIRMED = "BOOKING_CONFIRMED"
    BOOKING_CANCELLED = "BOOKING_CANCELLED"
    BOOKING_RESCHEDULED = "BOOKING_RESCHEDULED"
    MONTHLY_PASS_PENDING = "MONTHLY_PASS_PENDING"
    MONTHLY_PASS_CONFIRMED = "MONTHLY_PASS_CONFIRMED"
    MONTHLY_PASS_CANCELLED = "MONTHLY_PASS_CANCELLED"
    AVAILABILITY_ALERT = "AVAILABILITY_ALERT"


class Notification(Base):
    __tablename__ = "notifications"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    user_id = Column(String(26), ForeignKey("users.id"), nullable=False, index=True)
    kind = Column(String(40), nullable=False)
    title = Column(String(200), nullable=False)
    body = Column(Text, nullable=False)
    payload = Column(JSON, nullable=True)
    read_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
