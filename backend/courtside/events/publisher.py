"""Event publisher - queues events for background processing."""
from datetime import date, datetime
from typing import Any, Dict, Optional, Protocol

from ..repositories.job_repository import JobRepository


class Event(Protocol):
    """Protocol for event types."""

    def to_dict(self) -> Dict[str, Any]:
        ...


class EventPublisher:
    """Publishes domain events to the job queue for async processing."""

    def __init__(self, job_repository: JobRepository):
        self.job_repo = job_repository

    def publish(self, event: Event, dedupe_key: Optional[str] = None) -> Optional[str]:
        """
        Queue an event for background processing.

        Returns the job id, or None when ``dedupe_key`` was already queued.
        """
        event_type = type(event).__name__
        payload = event.to_dict()

        for key, value in payload.items():
            if isinstance(value, (datetime, date)):
                payload[key] = value.isoformat()

        return self.job_repo.enqueue(type=f"event:{event_type}", payload=payload, dedupe_key=dedupe_key)
