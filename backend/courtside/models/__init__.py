# backend/courtside/models/__init__.py
"""
SQLAlchemy models for the Courtside scheduling engine.

Importing this package registers every table on ``Base.metadata``.
"""

from .audit_log import AuditLog
from .availability_alert import AvailabilityAlert
from .background_job import BackgroundJob
from .booking import ACTIVE_BOOKING_STATUSES, Booking, BookingStatus
from .court import Court
from .court_block import CourtBlock
from .establishment import Establishment, EstablishmentHoliday
from .monthly_pass import MonthlyPass, MonthlyPassStatus
from .notification import Notification, NotificationKind
from .user import User, UserRole

__all__ = [
    "ACTIVE_BOOKING_STATUSES",
    "AuditLog",
    "AvailabilityAlert",
    "BackgroundJob",
    "Booking",
    "BookingStatus",
    "Court",
    "CourtBlock",
    "Establishment",
    "EstablishmentHoliday",
    "MonthlyPass",
    "MonthlyPassStatus",
    "Notification",
    "NotificationKind",
    "User",
    "UserRole",
]
