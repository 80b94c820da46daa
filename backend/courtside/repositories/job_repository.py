"""Repository for the background_jobs queue drained by the e-mail subsystem."""

from __future__ import annotations

from datetime import datetime, timezone
import logging
from typing import Any, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
import ulid

from ..core.exceptions import RepositoryException
from ..models.background_job import BackgroundJob

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class JobRepository:
    """Data access helpers for background_jobs table."""

    def __init__(self, db: Session):
        self.db = db
        self.logger = logger

    def enqueue(
        self,
        *,
        type: str,
        payload: dict[str, Any],
        dedupe_key: Optional[str] = None,
        available_at: datetime | None = None,
    ) -> Optional[str]:
        """
        Persist a new job ready for processing.

        Returns None without writing when a job with the same ``dedupe_key``
        is already queued or done.
        """
        if dedupe_key and self.exists_dedupe_key(dedupe_key):
            self.logger.debug("Skipping duplicate job %s", dedupe_key)
            return None
        try:
            job_id = str(ulid.ULID())
            job = BackgroundJob(
                id=job_id,
                type=type,
                payload=payload,
                dedupe_key=dedupe_key,
                status="queued",
                attempts=0,
                available_at=available_at or _utcnow(),
            )
            self.db.add(job)
            self.db.flush()
            return job_id
        except SQLAlchemyError as exc:
            self.logger.error("Failed to enqueue job %s: %s", type, str(exc))
            raise RepositoryException("Failed to enqueue background job") from exc

    def exists_dedupe_key(self, dedupe_key: str) -> bool:
        try:
            return (
                self.db.query(BackgroundJob.id).filter(BackgroundJob.dedupe_key == dedupe_key).first()
                is not None
            )
        except SQLAlchemyError as exc:
            self.logger.error("Failed to check job dedupe key: %s", str(exc))
            raise RepositoryException("Failed to check background job") from exc
