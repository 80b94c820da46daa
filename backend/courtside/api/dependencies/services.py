# backend/courtside/api/dependencies/services.py
"""
Service layer dependencies for dependency injection.

Every admission service receives the same ``SchedulingConfig`` built from
settings; tests override ``get_scheduling_config`` to flip flags.
"""

from functools import lru_cache

from fastapi import Depends
from sqlalchemy.orm import Session

from ...core.config import SchedulingConfig
from ...services.availability_alert_service import AvailabilityAlertService
from ...services.availability_service import AvailabilityService
from ...services.block_service import BlockService
from ...services.booking_service import BookingService
from ...services.holiday_service import HolidayService
from ...services.monthly_pass_service import MonthlyPassService
from .database import get_db


@lru_cache(maxsize=1)
def _default_config() -> SchedulingConfig:
    return SchedulingConfig.from_settings()


def get_scheduling_config() -> SchedulingConfig:
    return _default_config()


def get_availability_service(db: Session = Depends(get_db)) -> AvailabilityService:
    return AvailabilityService(db)


def get_booking_service(
    db: Session = Depends(get_db), config: SchedulingConfig = Depends(get_scheduling_config)
) -> BookingService:
    """Get BookingService with the default notification gateway."""
    return BookingService(db, config=config)


def get_block_service(
    db: Session = Depends(get_db), config: SchedulingConfig = Depends(get_scheduling_config)
) -> BlockService:
    return BlockService(db, config=config)


def get_monthly_pass_service(
    db: Session = Depends(get_db), config: SchedulingConfig = Depends(get_scheduling_config)
) -> MonthlyPassService:
    return MonthlyPassService(db, config=config)


def get_holiday_service(db: Session = Depends(get_db)) -> HolidayService:
    return HolidayService(db)


def get_availability_alert_service(
    db: Session = Depends(get_db), config: SchedulingConfig = Depends(get_scheduling_config)
) -> AvailabilityAlertService:
    return AvailabilityAlertService(db, config=config)
