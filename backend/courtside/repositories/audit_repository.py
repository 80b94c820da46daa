"""Audit log writes, flushed inside the caller's transaction."""

import logging
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from ..models.audit_log import AuditLog
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class AuditRepository(BaseRepository[AuditLog]):
    def __init__(self, db: Session):
        super().__init__(db, AuditLog)

    def record(
        self,
        *,
        actor_id: Optional[str],
        action: str,
        entity_type: str,
        entity_id: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> AuditLog:
        return self.create(
            actor_id=actor_id,
            action=action,
            entity_type=entity_type,
            entity_id=entity_id,
            details=details or {},
        )
