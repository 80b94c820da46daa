# backend/courtside/tasks/beat_schedule.py
"""Celery beat schedule: periodic availability alert sweeps."""

from datetime import timedelta
from typing import Any

from celery.schedules import crontab

from ..core.config import settings

ALERT_SWEEP_TASK = "courtside.tasks.availability_alerts.process_availability_alerts"

CELERYBEAT_SCHEDULE = {
    "availability-alerts-sweep": {
        "task": ALERT_SWEEP_TASK,
        "schedule": crontab(minute="*"),
        "options": {"queue": "alerts", "expires": 55},
    },
}

SCHEDULE_CONFIG = {
    "production": CELERYBEAT_SCHEDULE,
    "development": {
        "availability-alerts-sweep": {
            "task": ALERT_SWEEP_TASK,
            "schedule": timedelta(seconds=settings.alert_sweep_seconds),
            "options": {"queue": "alerts"},
        },
    },
}


def get_beat_schedule(environment: str = "production") -> dict[str, dict[str, Any]]:
    """
    Get the beat schedule for the specified environment.

    Args:
        environment: The environment name (production, staging, development, test)

    Returns:
        Mapping of entry name to Celery beat configuration dict
    """
    base: dict[str, dict[str, Any]] = dict(CELERYBEAT_SCHEDULE)
    overrides = SCHEDULE_CONFIG.get(environment)
    if overrides:
        base.update(overrides)
    return base
