# backend/courtside/main.py
"""
ASGI application.

Run with ``uvicorn courtside.main:app``.
"""

import logging

from fastapi import APIRouter, FastAPI

from .core.config import settings
from .core.constants import API_DESCRIPTION, API_TITLE, API_VERSION
from .errors import register_error_handlers
from .routes import health, prometheus
from .routes.v1 import (
    alerts as alerts_v1,
    availability as availability_v1,
    blocks as blocks_v1,
    bookings as bookings_v1,
    holidays as holidays_v1,
    monthly_passes as monthly_passes_v1,
)

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    app = FastAPI(
        title=API_TITLE,
        description=API_DESCRIPTION,
        version=API_VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
    )
    register_error_handlers(app)

    api_v1 = APIRouter(prefix="/api/v1")
    api_v1.include_router(availability_v1.router)
    api_v1.include_router(bookings_v1.router, prefix="/bookings")
    api_v1.include_router(blocks_v1.router, prefix="/blocks")
    api_v1.include_router(monthly_passes_v1.router, prefix="/monthly-passes")
    api_v1.include_router(holidays_v1.router)
    api_v1.include_router(alerts_v1.router, prefix="/availability-alerts")

    app.include_router(api_v1)
    app.include_router(health.router)
    app.include_router(prometheus.router)

    logger.info("%s %s started (%s)", API_TITLE, API_VERSION, settings.environment)
    return app


app = create_app()
