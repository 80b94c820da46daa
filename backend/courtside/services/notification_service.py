# backend/courtside/services/notification_service.py
"""
Notification boundary.

Admission services collect side effects in an ``Outbox`` while their
transaction runs and dispatch them through a ``NotificationGateway`` only
after the commit. A failing side effect is logged and counted; it never
undoes the admission that triggered it.
"""

from dataclasses import dataclass, field
import logging
from typing import Any, Dict, List, Optional, Protocol, Union

from sqlalchemy.orm import Session

from ..core.config import SchedulingConfig
from ..events import EmailRequested, EventPublisher
from ..models.notification import Notification, NotificationKind
from ..monitoring.prometheus_metrics import prometheus_metrics
from ..repositories import RepositoryFactory
from .base import BaseService
from .email_templates import EmailContent

logger = logging.getLogger(__name__)


class NotificationGateway(Protocol):
    """What the engine needs from the notification and e-mail subsystems."""

    def notify(
        self,
        user_id: str,
        kind: NotificationKind,
        title: str,
        body: str,
        payload: Optional[Dict[str, Any]] = None,
    ) -> None:
        ...

    def enqueue_email(
        self,
        to: str,
        subject: str,
        text: str,
        html: str,
        dedupe_key: Optional[str] = None,
    ) -> Optional[str]:
        ...


@dataclass(frozen=True)
class NotificationRequest:
    user_id: str
    kind: NotificationKind
    title: str
    body: str
    payload: Dict[str, Any] = field(default_factory=dict)

    @property
    def channel(self) -> str:
        return "notification"

    def send(self, gateway: NotificationGateway) -> None:
        gateway.notify(self.user_id, self.kind, self.title, self.body, self.payload)


@dataclass(frozen=True)
class EmailRequest:
    to: str
    content: EmailContent
    dedupe_key: Optional[str] = None

    @property
    def channel(self) -> str:
        return "email"

    def send(self, gateway: NotificationGateway) -> None:
        gateway.enqueue_email(
            self.to, self.content.subject, self.content.text, self.content.html, self.dedupe_key
        )


SideEffect = Union[NotificationRequest, EmailRequest]


class Outbox:
    """Side effects of one admission, held until its transaction commits."""

    def __init__(self, config: Optional[SchedulingConfig] = None):
        self.config = config or SchedulingConfig()
        self.items: List[SideEffect] = []

    def notify(
        self,
        user_id: Optional[str],
        kind: NotificationKind,
        title: str,
        body: str,
        payload: Optional[Dict[str, Any]] = None,
    ) -> None:
        if not user_id:
            return
        self.items.append(NotificationRequest(user_id, kind, title, body, payload or {}))

    def email(self, to: Optional[str], content: EmailContent, dedupe_key: Optional[str] = None) -> None:
        if not to or not self.config.email_enabled:
            return
        self.items.append(EmailRequest(to, content, dedupe_key))

    def __len__(self) -> int:
        return len(self.items)

    def dispatch(self, gateway: NotificationGateway, db: Optional[Session] = None) -> int:
        """
        Send every collected item; returns how many were delivered to the gateway.

        Failures are logged and the gateway's partial writes rolled back.
        """
        delivered = 0
        for item in self.items:
            try:
                item.send(gateway)
                delivered += 1
            except Exception:
                logger.exception(
                    "Post-commit %s failed", item.channel, extra={"channel": item.channel}
                )
                prometheus_metrics.record_side_effect_failure(item.channel)
                if db is not None:
                    db.rollback()
        self.items = []
        return delivered


class NotificationService(BaseService):
    """
    Default gateway: in-app notification rows plus ``EmailRequested`` jobs.

    Runs in its own short transaction after the admission commit.
    """

    def __init__(self, db: Session):
        super().__init__(db)
        self.job_repository = RepositoryFactory.create_job_repository(db)
        self.event_publisher = EventPublisher(self.job_repository)

    @BaseService.measure_operation("notify")
    def notify(
        self,
        user_id: str,
        kind: NotificationKind,
        title: str,
        body: str,
        payload: Optional[Dict[str, Any]] = None,
    ) -> None:
        with self.transaction():
            self.db.add(
                Notification(
                    user_id=user_id,
                    kind=NotificationKind(kind).value,
                    title=title,
                    body=body,
                    payload=payload or {},
                )
            )
        self.logger.debug("Notification %s stored for user %s", kind, user_id)

    @BaseService.measure_operation("enqueue_email")
    def enqueue_email(
        self,
        to: str,
        subject: str,
        text: str,
        html: str,
        dedupe_key: Optional[str] = None,
    ) -> Optional[str]:
        """Queue an e-mail job; an already queued ``dedupe_key`` is skipped."""
        with self.transaction():
            job_id = self.event_publisher.publish(
                EmailRequested(to=to, subject=subject, text=text, html=html, dedupe_key=dedupe_key),
                dedupe_key=dedupe_key,
            )
        if job_id is None:
            self.logger.info("E-mail already queued", extra={"dedupe_key": dedupe_key})
        return job_id
