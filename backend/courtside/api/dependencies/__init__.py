# backend/courtside/api/dependencies/__init__.py
"""
Central export point for all dependencies.
"""

from .auth import get_current_principal
from .database import get_db
from .services import (
    get_availability_alert_service,
    get_availability_service,
    get_block_service,
    get_booking_service,
    get_holiday_service,
    get_monthly_pass_service,
    get_scheduling_config,
)

__all__ = [
    # Auth
    "get_current_principal",
    # Database
    "get_db",
    # Services
    "get_availability_alert_service",
    "get_availability_service",
    "get_block_service",
    "get_booking_service",
    "get_holiday_service",
    "get_monthly_pass_service",
    "get_scheduling_config",
]
