# backend/courtside/routes/health.py
"""
Health check endpoint.
"""

from datetime import datetime, timezone
import logging

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..api.dependencies import get_db
from ..core.config import settings
from ..core.constants import API_TITLE, API_VERSION
from ..schemas.base_responses import HealthCheckResponse

logger = logging.getLogger(__name__)
router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthCheckResponse)
def health_check(db: Session = Depends(get_db)) -> HealthCheckResponse:
    """
    Basic health check endpoint.

    Returns:
        ``healthy`` when the database answers, ``degraded`` otherwise.
    """
    try:
        db.execute(text("SELECT 1"))
        db_status = True
        status = "healthy"
    except SQLAlchemyError as e:
        logger.error(f"Database health check failed: {e}")
        db_status = False
        status = "degraded"

    return HealthCheckResponse(
        status=status,
        service=API_TITLE,
        version=API_VERSION,
        environment=settings.environment,
        timestamp=datetime.now(timezone.utc),
        database=db_status,
    )
