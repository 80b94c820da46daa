# backend/courtside/models/audit_log.py
"""Append-only audit trail of admission writes (written inside the admission transaction)."""

from sqlalchemy import JSON, Column, DateTime, ForeignKey, String
from sqlalchemy.sql import func
import ulid

from ..database import Base


class AuditLog(Base):
    __tablename__ = "audit_logs"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    actor_id = Column(String(26), ForeignKey("users.id"), nullable=True, index=True)
    action = Column(String(80), nullable=False, index=True)
    entity_type = Column(String(40), nullable=False)
    entity_id = Column(String(26), nullable=True)
    details = Column(JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
