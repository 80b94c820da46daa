"""
Database engine, session factory, and metadata shared across the application.
"""

from __future__ import annotations

import logging
from typing import Any, Generator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeMeta, Session, declarative_base, sessionmaker

from courtside.core.config import settings

logger = logging.getLogger(__name__)


def _build_engine_kwargs(db_url: str) -> dict[str, Any]:
    """Dialect-specific engine options."""

    kwargs: dict[str, Any] = {"echo": settings.sql_echo, "future": True}
    if db_url.startswith("postgresql"):
        # One of two concurrent conflicting admissions must fail at commit
        kwargs["isolation_level"] = "SERIALIZABLE"
        kwargs["pool_pre_ping"] = True
    elif db_url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
    return kwargs


db_url = settings.database_url
engine: Engine = create_engine(db_url, **_build_engine_kwargs(db_url))

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine, expire_on_commit=False)

Base: DeclarativeMeta = declarative_base()


def get_db() -> Generator[Session, None, None]:
    """Get database session with proper cleanup."""
    db = SessionLocal()
    try:
        yield db
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
