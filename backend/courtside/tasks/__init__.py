"""Celery application and periodic tasks for Courtside."""

from .availability_alerts import process_availability_alerts
from .celery_app import BaseTask, celery_app

__all__ = ["celery_app", "BaseTask", "process_availability_alerts"]
