# backend/courtside/models/background_job.py
"""Persisted background job entry; the e-mail subsystem drains these."""

from sqlalchemy import JSON, Column, DateTime, Integer, String, Text
from sqlalchemy.sql import func

from ..database import Base


class BackgroundJob(Base):
    __tablename__ = "background_jobs"

    id = Column(String(26), primary_key=True, index=True)
    type = Column(String(80), nullable=False)
    payload = Column(JSON, nullable=False)
    dedupe_key = Column(String(255), nullable=True, unique=True)
    status = Column(String(20), nullable=False, default="queued")
    attempts = Column(Integer, nullable=False, default=0)
    available_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    last_error = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now()
    )
