# backend/courtside/tasks/availability_alerts.py
"""Celery task that notifies customers whose watched times became free."""

import logging
from typing import Callable, Optional

from sqlalchemy.orm import Session

from ..core.config import SchedulingConfig
from ..core.constants import ALERT_BATCH_SIZE
from ..database import SessionLocal
from ..services.availability_alert_service import AvailabilityAlertService
from .celery_app import celery_app

logger = logging.getLogger(__name__)


def run_once(
    session_factory: Callable[[], Session] = SessionLocal,
    config: Optional[SchedulingConfig] = None,
    limit: int = ALERT_BATCH_SIZE,
) -> int:
    """One sweep in a fresh session; returns how many alerts were notified."""
    db = session_factory()
    try:
        return AvailabilityAlertService(
            db, config=config or SchedulingConfig.from_settings()
        ).process_alerts(limit=limit)
    finally:
        db.close()


@celery_app.task(name="courtside.tasks.availability_alerts.process_availability_alerts")
def process_availability_alerts(limit: int = ALERT_BATCH_SIZE) -> dict[str, int]:
    """Run one alert sweep and return its summary."""
    notified = run_once(limit=limit)
    if notified:
        logger.info("Notified %s availability alert(s)", notified)
    return {"notified": notified}
