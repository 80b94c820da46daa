# backend/courtside/services/availability_alert_service.py
"""
Availability alerts.

A customer watching a currently unavailable interval is told once it frees
up. Alerts are never commitments and never take part in conflict checks.
"""

from datetime import date, datetime, timedelta
import logging
from typing import Optional, Union

from sqlalchemy.orm import Session

from ..core.config import SchedulingConfig
from ..core.constants import ALERT_BATCH_SIZE, MIN_ALERT_DURATION_MINUTES
from ..core.exceptions import (
    AlreadyAvailableException,
    NotFoundException,
    StateException,
    ValidationException,
)
from ..core.identity import Principal
from ..domain.scheduling import Interval, combine, parse_hhmm, parse_ymd
from ..models.availability_alert import AvailabilityAlert
from ..models.notification import NotificationKind
from ..repositories import RepositoryFactory
from . import email_templates
from .base import BaseService
from .calendar_resolver import CalendarResolver
from .conflict_checker import ConflictChecker
from .notification_service import NotificationGateway, NotificationService, Outbox

logger = logging.getLogger(__name__)


class AvailabilityAlertService(BaseService):
    def __init__(
        self,
        db: Session,
        config: Optional[SchedulingConfig] = None,
        gateway: Optional[NotificationGateway] = None,
        clock=None,
    ):
        super().__init__(db, clock)
        self.config = config or SchedulingConfig.from_settings()
        self.gateway: NotificationGateway = gateway or NotificationService(db)
        self.calendar_resolver = CalendarResolver(db)
        self.conflict_checker = ConflictChecker(db, calendar_resolver=self.calendar_resolver)
        self.court_repository = RepositoryFactory.create_court_repository(db)
        self.alert_repository = RepositoryFactory.create_availability_alert_repository(db)

    def _is_free(self, court_id: str, interval: Interval, buffer_minutes: int) -> bool:
        return not self.conflict_checker.conflicts(court_id, interval, buffer_minutes=buffer_minutes)

    @BaseService.measure_operation("create_alert")
    def create_alert(
        self,
        actor: Principal,
        court_id: str,
        day: Union[str, date],
        start_hhmm: str,
        duration_minutes: int,
    ) -> AvailabilityAlert:
        """
        Watch ``[day start_hhmm, +duration)`` on a court.

        Raises:
            AlreadyAvailableException: The interval can be booked right now
            StateException: An active alert for the same interval exists
        """
        self.log_operation("create_alert", actor_id=actor.id, court_id=court_id, day=str(day))
        actor.require_customer()
        parsed_day = parse_ymd(day, "day")
        parse_hhmm(start_hhmm, "start_time")
        try:
            duration = max(MIN_ALERT_DURATION_MINUTES, int(duration_minutes or 0))
        except (TypeError, ValueError):
            raise ValidationException("Invalid duration", details={"duration_minutes": duration_minutes})
        start = combine(parsed_day, start_hhmm)
        interval = Interval.validated(start, start + timedelta(minutes=duration))

        with self.transaction():
            court = self.court_repository.get_with_establishment(court_id)
            if court is None:
                raise NotFoundException("Court not found", details={"court_id": court_id})
            if not court.is_active:
                raise StateException("Court is inactive", details={"court_id": court_id})
            self.calendar_resolver.assert_within_hours(court.establishment, interval)

            existing = self.alert_repository.find_for_window(
                actor.id, court.id, interval.start, interval.end
            )
            if existing is not None and existing.is_active:
                raise StateException("You already have an active alert for this time")

            buffer_minutes = court.establishment.booking_buffer_minutes or 0
            if self._is_free(court.id, interval, buffer_minutes):
                raise AlreadyAvailableException(
                    "This time is already available. You can book it now."
                )

            if existing is not None:
                alert = self.alert_repository.update(existing, is_active=True, notified_at=None)
            else:
                alert = self.alert_repository.create(
                    user_id=actor.id,
                    court_id=court.id,
                    start_time=interval.start,
                    end_time=interval.end,
                )
        return alert

    @BaseService.measure_operation("process_alerts")
    def process_alerts(
        self,
        now: Optional[datetime] = None,
        limit: int = ALERT_BATCH_SIZE,
        court_id: Optional[str] = None,
    ) -> int:
        """
        Notify every due alert whose interval became bookable.

        An alert is due while active, never notified and not yet started.
        Notified alerts are deactivated. Returns how many were notified.
        """
        now = now or self.now()
        outbox = Outbox(self.config)
        notified = 0

        with self.transaction():
            for alert in self.alert_repository.get_due(now, limit=limit, court_id=court_id):
                court = alert.court
                if court is None or not court.is_active:
                    continue
                window = self.calendar_resolver.resolve(court.establishment, alert.start_time.date()).window
                if window is None or alert.start_time < window.start or alert.end_time > window.end:
                    continue
                buffer_minutes = court.establishment.booking_buffer_minutes or 0
                if not self._is_free(court.id, alert.interval, buffer_minutes):
                    continue

                alert.is_active = False
                alert.notified_at = self.now()
                notified += 1
                outbox.notify(
                    alert.user_id,
                    NotificationKind.AVAILABILITY_ALERT,
                    "Time available",
                    f"{court.name} is available on {alert.interval}.",
                    {"alert_id": alert.id, "court_id": court.id},
                )
                email = alert.user.email if alert.user is not None else None
                outbox.email(
                    email,
                    email_templates.availability_alert_customer(alert, court.name, self.config.app_url),
                    dedupe_key=f"availability-alert:{alert.id}:{alert.start_time.isoformat()}:{email}",
                )

        outbox.dispatch(self.gateway, self.db)
        if notified:
            self.logger.info("Availability alerts notified", extra={"count": notified, "court_id": court_id})
        return notified
