# backend/tests/conftest.py
"""
Pytest configuration.

Every test gets its own in-memory SQLite database. Services are built with
a fixed clock, an explicit ``SchedulingConfig`` and a recording notification
gateway so no test depends on process settings, wall-clock time or Redis.
"""

import os

# Set before any courtside import so the module-level engine never touches disk
os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ["COURT_LOCK_ENABLED"] = "false"

from datetime import datetime
from typing import Any, Dict, List, Optional

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from courtside import models  # noqa: F401 (registers every table)
from courtside.core.config import SchedulingConfig
from courtside.core.identity import Principal
from courtside.database import Base
from courtside.models.court import Court
from courtside.models.establishment import Establishment
from courtside.models.user import User, UserRole
from courtside.services.availability_alert_service import AvailabilityAlertService
from courtside.services.availability_service import AvailabilityService
from courtside.services.block_service import BlockService
from courtside.services.booking_service import BookingService
from courtside.services.holiday_service import HolidayService
from courtside.services.monthly_pass_service import MonthlyPassService

# ============================================================================
# Database
# ============================================================================


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite+pysqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def db(engine) -> Session:
    TestingSessionLocal = sessionmaker(
        bind=engine, autocommit=False, autoflush=False, expire_on_commit=False
    )
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


# ============================================================================
# Collaborators
# ============================================================================


class FixedClock:
    """Callable clock returning a settable naive local datetime."""

    def __init__(self, now: datetime):
        self.current = now

    def __call__(self) -> datetime:
        return self.current

    def set(self, now: datetime) -> None:
        self.current = now


class RecordingGateway:
    """Notification gateway that records every call instead of persisting it."""

    def __init__(self) -> None:
        self.notifications: List[Dict[str, Any]] = []
        self.emails: List[Dict[str, Any]] = []
        self.fail_notifications = False

    def notify(self, user_id, kind, title, body, payload=None) -> None:
        if self.fail_notifications:
            raise RuntimeError("notification store unavailable")
        self.notifications.append(
            {"user_id": user_id, "kind": kind, "title": title, "body": body, "payload": payload}
        )

    def enqueue_email(self, to, subject, text, html, dedupe_key=None) -> Optional[str]:
        self.emails.append(
            {"to": to, "subject": subject, "text": text, "html": html, "dedupe_key": dedupe_key}
        )
        return f"job-{len(self.emails)}"

    def kinds_for(self, user_id: str) -> List[str]:
        return [n["kind"] for n in self.notifications if n["user_id"] == user_id]


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(datetime(2024, 6, 1, 9, 0))


@pytest.fixture
def gateway() -> RecordingGateway:
    return RecordingGateway()


@pytest.fixture
def config() -> SchedulingConfig:
    return SchedulingConfig(app_url="https://courts.test")


# ============================================================================
# Factories
# ============================================================================


def make_user(db: Session, role: UserRole = UserRole.CUSTOMER, **kwargs) -> User:
    user = User(role=role.value, **kwargs)
    db.add(user)
    db.commit()
    return user


def make_establishment(db: Session, owner: User, **kwargs) -> Establishment:
    values = {
        "name": "Arena Central",
        "open_weekdays": [0, 1, 2, 3, 4, 5, 6],
        "opening_time": "08:00",
        "closing_time": "22:00",
        "booking_buffer_minutes": 0,
        "requires_booking_confirmation": False,
        "online_payments_enabled": False,
        "cancel_min_hours": 0,
    }
    values.update(kwargs)
    establishment = Establishment(owner_id=owner.id, **values)
    db.add(establishment)
    db.commit()
    return establishment


def make_court(db: Session, establishment: Establishment, **kwargs) -> Court:
    values = {
        "name": "Court 1",
        "sport_type": "tennis",
        "is_active": True,
        "price_per_hour_cents": 10000,
        "discount_percent_over_90min": 10,
        "monthly_price_cents": 40000,
        "monthly_terms": None,
    }
    values.update(kwargs)
    court = Court(establishment_id=establishment.id, **values)
    db.add(court)
    db.commit()
    return court


def principal_for(user: User) -> Principal:
    return Principal(id=user.id, role=UserRole(user.role), name=user.name, email=user.email)


@pytest.fixture
def owner(db) -> User:
    return make_user(db, UserRole.ADMIN, name="Olivia Owner", email="owner@example.com")


@pytest.fixture
def customer(db) -> User:
    return make_user(db, UserRole.CUSTOMER, name="Carla Customer", email="carla@example.com")


@pytest.fixture
def other_customer(db) -> User:
    return make_user(db, UserRole.CUSTOMER, name="Bruno Customer", email="bruno@example.com")


@pytest.fixture
def establishment(db, owner) -> Establishment:
    return make_establishment(db, owner)


@pytest.fixture
def court(db, establishment) -> Court:
    return make_court(db, establishment)


@pytest.fixture
def owner_principal(owner) -> Principal:
    return principal_for(owner)


@pytest.fixture
def customer_principal(customer) -> Principal:
    return principal_for(customer)


@pytest.fixture
def other_principal(other_customer) -> Principal:
    return principal_for(other_customer)


# ============================================================================
# Services
# ============================================================================


@pytest.fixture
def booking_service(db, config, gateway, clock) -> BookingService:
    return BookingService(db, config=config, gateway=gateway, clock=clock)


@pytest.fixture
def block_service(db, config, gateway, clock) -> BlockService:
    return BlockService(db, config=config, gateway=gateway, clock=clock)


@pytest.fixture
def monthly_pass_service(db, config, gateway, clock) -> MonthlyPassService:
    return MonthlyPassService(db, config=config, gateway=gateway, clock=clock)


@pytest.fixture
def holiday_service(db, clock) -> HolidayService:
    return HolidayService(db, clock=clock)


@pytest.fixture
def availability_service(db, clock) -> AvailabilityService:
    return AvailabilityService(db, clock=clock)


@pytest.fixture
def alert_service(db, config, gateway, clock) -> AvailabilityAlertService:
    return AvailabilityAlertService(db, config=config, gateway=gateway, clock=clock)


class Factory:
    """Row builders bound to the test session."""

    def __init__(self, db: Session):
        self.db = db

    def user(self, role: UserRole = UserRole.CUSTOMER, **kwargs) -> User:
        return make_user(self.db, role, **kwargs)

    def establishment(self, owner: User, **kwargs) -> Establishment:
        return make_establishment(self.db, owner, **kwargs)

    def court(self, establishment: Establishment, **kwargs) -> Court:
        return make_court(self.db, establishment, **kwargs)

    def principal(self, user: User) -> Principal:
        return principal_for(user)


@pytest.fixture
def factory(db) -> Factory:
    return Factory(db)
