# backend/courtside/core/config.py
"""
Runtime configuration for the Courtside scheduling engine.

``Settings`` reads the process environment (and ``backend/.env`` when present).
Admission services never read it directly: they receive a frozen
``SchedulingConfig`` built from it, so tests can pass explicit flags.
"""

from dataclasses import dataclass
import logging
import os
from pathlib import Path
from typing import Literal, Optional

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
import pytz

logger = logging.getLogger(__name__)


if not os.getenv("CI"):
    env_path = Path(__file__).parent.parent.parent / ".env"
    logger.debug("[CONFIG] Looking for .env at: %s", env_path)
    load_dotenv(env_path)


class Settings(BaseSettings):
    environment: Literal["development", "test", "staging", "production"] = Field(
        default="development",
        alias="ENVIRONMENT",
    )
    database_url: str = Field(
        default="sqlite+pysqlite:///./courtside.db",
        alias="DATABASE_URL",
        description="SQLAlchemy URL; PostgreSQL runs admissions at SERIALIZABLE isolation",
    )
    sql_echo: bool = Field(default=False, alias="SQL_ECHO")
    timezone: str = Field(
        default="America/Sao_Paulo",
        alias="TIMEZONE",
        description="Establishment wall-clock timezone used for 'now' and stored intervals",
    )
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Per-court advisory lock (fallback when storage is not serializable)
    redis_url: str = Field(default="redis://localhost:6379/0", alias="REDIS_URL")
    court_lock_enabled: bool = Field(default=False, alias="COURT_LOCK_ENABLED")
    court_lock_ttl_seconds: int = Field(default=30, alias="COURT_LOCK_TTL_SECONDS")
    lock_namespace: str = Field(default="courtside", alias="LOCK_NAMESPACE")

    # Celery worker and beat
    celery_broker_url: Optional[str] = Field(default=None, alias="CELERY_BROKER_URL")
    alert_sweep_seconds: int = Field(default=60, alias="ALERT_SWEEP_SECONDS")

    # Payment / notification flags
    payments_enabled: bool = Field(default=False, alias="PAYMENTS_ENABLED")
    email_enabled: bool = Field(default=True, alias="EMAIL_ENABLED")
    booking_pending_email_enabled: bool = Field(
        default=True, alias="BOOKING_PENDING_EMAIL_ENABLED"
    )
    booking_confirmation_email_enabled: bool = Field(
        default=True, alias="BOOKING_CONFIRMATION_EMAIL_ENABLED"
    )
    booking_cancellation_email_enabled: bool = Field(
        default=True, alias="BOOKING_CANCELLATION_EMAIL_ENABLED"
    )
    app_url: str = Field(default="http://localhost:3000", alias="APP_URL")

    booking_rate_limit_per_window: int = Field(default=30, alias="BOOKING_RATE_LIMIT")
    booking_rate_limit_window_minutes: int = Field(
        default=10, alias="BOOKING_RATE_LIMIT_WINDOW_MINUTES"
    )

    model_config = SettingsConfigDict(
        env_file=".env" if not os.getenv("CI") else None,
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    @field_validator("timezone")
    @classmethod
    def _validate_timezone(cls, value: str) -> str:
        try:
            pytz.timezone(value)
        except pytz.UnknownTimeZoneError as exc:
            raise ValueError(f"Unknown timezone: {value}") from exc
        return value

    @field_validator("app_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")


@dataclass(frozen=True)
class SchedulingConfig:
    """Flags consumed by admission services, injected per call site."""

    payments_enabled: bool = False
    email_enabled: bool = True
    booking_pending_email_enabled: bool = True
    booking_confirmation_email_enabled: bool = True
    booking_cancellation_email_enabled: bool = True
    app_url: str = "http://localhost:3000"
    booking_rate_limit: int = 30
    booking_rate_limit_window_minutes: int = 10

    @classmethod
    def from_settings(cls, source: Optional[Settings] = None) -> "SchedulingConfig":
        source = source or settings
        return cls(
            payments_enabled=source.payments_enabled,
            email_enabled=source.email_enabled,
            booking_pending_email_enabled=source.booking_pending_email_enabled,
            booking_confirmation_email_enabled=source.booking_confirmation_email_enabled,
            booking_cancellation_email_enabled=source.booking_cancellation_email_enabled,
            app_url=source.app_url,
            booking_rate_limit=source.booking_rate_limit_per_window,
            booking_rate_limit_window_minutes=source.booking_rate_limit_window_minutes,
        )

    @property
    def dashboard_url(self) -> str:
        return f"{self.app_url}/dashboard"


settings = Settings()
