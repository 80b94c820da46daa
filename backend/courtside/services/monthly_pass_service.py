# backend/courtside/services/monthly_pass_service.py
"""
Monthly Pass Service.

State machine per (court, customer, month):

    (none) / CANCELLED --request--> PENDING --confirm--> ACTIVE
                                    PENDING --cancel---> CANCELLED

Requests are only accepted for the current month (before its first
occurrence starts) or the next one. For the next month, requests open 14
days before the 1st; until 7 days before, only holders renewing the exact
same weekday and time range of an ACTIVE current-month pass may request.

Confirming re-validates the whole month and materializes every occurrence
as a ``CourtBlock`` tagged with the pass id.
"""

from datetime import timedelta
import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from ..core.config import SchedulingConfig
from ..core.constants import NOTICE_SEPARATOR, PASS_OPEN_TO_ALL_DAYS, PASS_REQUEST_OPENS_DAYS
from ..core.court_lock import court_lock
from ..core.exceptions import (
    BusinessRuleException,
    ConflictException,
    NotConfiguredException,
    NotFoundException,
    RequestWindowClosedException,
    StateException,
    ValidationException,
)
from ..core.identity import Principal
from ..domain.scheduling import (
    RecurringWeeklyReservation,
    assert_hhmm_aligned,
    first_day_of_month,
    month_key,
    next_month_first_day,
    parse_hhmm,
    parse_month,
)
from ..models.court import Court
from ..models.court_block import CourtBlock
from ..models.monthly_pass import MonthlyPass, MonthlyPassStatus
from ..models.notification import NotificationKind
from ..models.user import UserRole
from ..monitoring.prometheus_metrics import prometheus_metrics
from ..repositories import RepositoryFactory
from . import email_templates
from .base import BaseService
from .conflict_checker import ConflictChecker
from .notification_service import NotificationGateway, NotificationService, Outbox

logger = logging.getLogger(__name__)

PASS_BLOCK_NOTE = "Monthly pass"


def pass_block_note(customer_name: Optional[str]) -> str:
    name = (customer_name or "").strip()
    return f"{PASS_BLOCK_NOTE}{NOTICE_SEPARATOR}{name}" if name else PASS_BLOCK_NOTE


class MonthlyPassService(BaseService):
    def __init__(
        self,
        db: Session,
        config: Optional[SchedulingConfig] = None,
        gateway: Optional[NotificationGateway] = None,
        conflict_checker: Optional[ConflictChecker] = None,
        clock=None,
    ):
        super().__init__(db, clock)
        self.config = config or SchedulingConfig.from_settings()
        self.gateway: NotificationGateway = gateway or NotificationService(db)
        self.conflict_checker = conflict_checker or ConflictChecker(db)
        self.court_repository = RepositoryFactory.create_court_repository(db)
        self.pass_repository = RepositoryFactory.create_monthly_pass_repository(db)
        self.block_repository = RepositoryFactory.create_court_block_repository(db)
        self.audit_repository = RepositoryFactory.create_audit_repository(db)

    # Request

    def _validate_request_input(self, month: str, weekday: int, start_hhmm: str, end_hhmm: str) -> None:
        parse_month(month)
        if isinstance(weekday, bool) or not isinstance(weekday, int) or not 0 <= weekday <= 6:
            raise ValidationException("Invalid weekday", details={"weekday": weekday})
        for value, field in ((start_hhmm, "start_time"), (end_hhmm, "end_time")):
            parse_hhmm(value, field)
            assert_hhmm_aligned(value, field)
        if parse_hhmm(end_hhmm) <= parse_hhmm(start_hhmm):
            raise ValidationException("Invalid time range: end must be after start")

    def _check_month_window(self, reservation: RecurringWeeklyReservation) -> bool:
        """
        Reject months other than the current or next one.

        Returns True when the request targets the next month.
        """
        now = self.now()
        current_month = month_key(now.date())
        next_first = next_month_first_day(now.date())
        next_month = month_key(next_first)

        if reservation.month not in (current_month, next_month):
            raise BusinessRuleException(
                "Monthly passes are only available for the current or the next month",
                details={"month": reservation.month},
            )
        if reservation.month == current_month:
            first = reservation.first_occurrence()
            if first is not None and now >= first.start:
                raise BusinessRuleException(
                    "Requests must be made before the first day of the pass",
                    details={"first_occurrence": first.start.isoformat()},
                )
            return False
        return True

    def _check_next_month_priority(
        self, actor: Principal, reservation: RecurringWeeklyReservation
    ) -> None:
        now = self.now()
        month_start = first_day_of_month(reservation.month)
        opens_at = month_start - timedelta(days=PASS_REQUEST_OPENS_DAYS)
        open_to_all_at = month_start - timedelta(days=PASS_OPEN_TO_ALL_DAYS)

        if now.date() < opens_at:
            raise RequestWindowClosedException(
                "Requests for next month open on the penultimate week",
                details={"opens_on": opens_at.isoformat()},
            )
        if now.date() < open_to_all_at:
            renewal = self.pass_repository.find_renewal_candidate(
                reservation.court_id,
                actor.id,
                month_key(now.date()),
                reservation.weekday,
                reservation.start_hhmm,
                reservation.end_hhmm,
            )
            if renewal is None:
                raise RequestWindowClosedException(
                    "Renewal priority for current pass holders. New requests open in the last week",
                    details={"open_to_all_on": open_to_all_at.isoformat()},
                )

    def _load_court(self, court_id: str, for_update: bool = False) -> Court:
        court = self.court_repository.get_with_establishment(court_id, for_update=for_update)
        if court is None:
            raise NotFoundException("Court not found", details={"court_id": court_id})
        if not court.is_active:
            raise StateException("Court is inactive", details={"court_id": court_id})
        return court

    @BaseService.measure_operation("request_monthly_pass")
    def request_monthly_pass(
        self,
        actor: Principal,
        court_id: str,
        month: str,
        weekday: int,
        start_hhmm: str,
        end_hhmm: str,
        accept_terms: bool = False,
    ) -> MonthlyPass:
        """
        Request a weekly slot for a whole month.

        Re-requesting while PENDING returns the pending pass unchanged; a
        CANCELLED pass for the same month is reused.

        Raises:
            ValidationException: Malformed month, weekday or times
            BusinessRuleException: Month out of range or terms not accepted
            RequestWindowClosedException: Next-month request outside its window
            NotConfiguredException: Court has no monthly price
            StateException: Customer already holds an ACTIVE pass for the month
            SlotTakenException / CourtClosedException / OutOfHoursException:
                Some occurrence of the month is unavailable
        """
        self.log_operation(
            "request_monthly_pass", actor_id=actor.id, court_id=court_id, month=month, weekday=weekday
        )
        actor.require_customer()
        self._validate_request_input(month, weekday, start_hhmm, end_hhmm)
        reservation = RecurringWeeklyReservation(
            court_id=court_id, month=month, weekday=weekday, start_hhmm=start_hhmm, end_hhmm=end_hhmm
        )
        is_next_month = self._check_month_window(reservation)

        outbox = Outbox(self.config)
        with court_lock(court_id) as acquired:
            if not acquired:
                raise ConflictException(
                    "Another request for this court is being processed. Please try again.",
                    code="COURT_BUSY",
                )
            with self.transaction():
                court = self._load_court(court_id, for_update=True)
                price = court.monthly_price_cents
                if not price or price <= 0:
                    raise NotConfiguredException(details={"court_id": court.id})
                terms = (court.monthly_terms or "").strip()
                if terms and not accept_terms:
                    raise BusinessRuleException(
                        "You must accept the monthly pass terms", code="TERMS_REQUIRED"
                    )

                existing = self.pass_repository.get_for_customer_month(court.id, actor.id, month)
                if existing is not None and existing.status == MonthlyPassStatus.ACTIVE.value:
                    raise StateException("You already have an active monthly pass for this month")
                if existing is not None and existing.status == MonthlyPassStatus.PENDING.value:
                    return existing

                if is_next_month:
                    self._check_next_month_priority(actor, reservation)

                self.conflict_checker.assert_pass_available(reservation, court.establishment)

                if existing is not None:
                    monthly_pass = self.pass_repository.update(
                        existing,
                        status=MonthlyPassStatus.PENDING.value,
                        weekday=weekday,
                        start_time=start_hhmm,
                        end_time=end_hhmm,
                        cancelled_at=None,
                    )
                else:
                    monthly_pass = self.pass_repository.create(
                        court_id=court.id,
                        customer_id=actor.id,
                        month=month,
                        weekday=weekday,
                        start_time=start_hhmm,
                        end_time=end_hhmm,
                        status=MonthlyPassStatus.PENDING.value,
                        price_cents=price,
                        terms_snapshot=terms or None,
                    )
                self.audit_repository.record(
                    actor_id=actor.id,
                    action="monthly_pass.request",
                    entity_type="MonthlyPass",
                    entity_id=monthly_pass.id,
                    details={"court_id": court.id, "month": month, "weekday": weekday},
                )
                self._queue_pending(outbox, court, monthly_pass, actor)

        prometheus_metrics.record_admission("monthly_pass_request")
        outbox.dispatch(self.gateway, self.db)
        return monthly_pass

    def _queue_pending(self, outbox: Outbox, court: Court, monthly_pass: MonthlyPass, actor: Principal) -> None:
        owner = court.establishment.owner
        customer_name = actor.name or (monthly_pass.customer.display_name if monthly_pass.customer else "Customer")
        outbox.notify(
            court.establishment.owner_id,
            NotificationKind.MONTHLY_PASS_PENDING,
            "Monthly pass pending",
            f"New monthly pass request for {court.name} ({monthly_pass.month}).",
            {"monthly_pass_id": monthly_pass.id, "court_id": court.id},
        )
        if owner is not None and owner.email:
            outbox.email(
                owner.email,
                email_templates.monthly_pass_pending_owner(
                    monthly_pass, customer_name, self.config.dashboard_url
                ),
                dedupe_key=f"monthly-pass:pending:{monthly_pass.id}:{owner.email}",
            )

    # Owner decisions

    def _load_pending_owned(self, actor: Principal, pass_id: str, verb: str) -> MonthlyPass:
        monthly_pass = self.pass_repository.get_with_court(pass_id, for_update=True)
        if monthly_pass is None:
            raise NotFoundException("Monthly pass not found", details={"monthly_pass_id": pass_id})
        actor.require_owner_of(monthly_pass.court.establishment.owner_id)
        if monthly_pass.status != MonthlyPassStatus.PENDING.value:
            raise StateException(
                f"Only pending requests can be {verb}", details={"status": monthly_pass.status}
            )
        return monthly_pass

    @BaseService.measure_operation("confirm_monthly_pass")
    def confirm_monthly_pass(self, actor: Principal, pass_id: str) -> MonthlyPass:
        """
        Activate a PENDING pass and materialize its month as court blocks.

        The month is re-validated first, ignoring the pass itself, so any
        booking or block admitted while the request waited is caught.
        """
        self.log_operation("confirm_monthly_pass", actor_id=actor.id, pass_id=pass_id)
        actor.require_role(UserRole.ADMIN)
        outbox = Outbox(self.config)

        target = self.pass_repository.get_by_id(pass_id)
        if target is None:
            raise NotFoundException("Monthly pass not found", details={"monthly_pass_id": pass_id})

        with court_lock(target.court_id) as acquired:
            if not acquired:
                raise ConflictException(
                    "Another request for this court is being processed. Please try again.",
                    code="COURT_BUSY",
                )
            with self.transaction():
                monthly_pass = self._load_pending_owned(actor, pass_id, "confirmed")
                court = monthly_pass.court
                # Serialize with other admissions on the same court
                self.court_repository.get_with_establishment(court.id, for_update=True)
                reservation = RecurringWeeklyReservation.from_pass(monthly_pass)
                self.conflict_checker.assert_pass_available(
                    reservation, court.establishment, exclude_pass_id=monthly_pass.id
                )

                monthly_pass.status = MonthlyPassStatus.ACTIVE.value
                monthly_pass.confirmed_at = self.now()
                customer_name = monthly_pass.customer.display_name if monthly_pass.customer else None
                blocks = self._materialize(monthly_pass, reservation, actor, customer_name)
                self.audit_repository.record(
                    actor_id=actor.id,
                    action="monthly_pass.confirm",
                    entity_type="MonthlyPass",
                    entity_id=monthly_pass.id,
                    details={"court_id": court.id, "block_ids": [b.id for b in blocks]},
                )

                outbox.notify(
                    monthly_pass.customer_id,
                    NotificationKind.MONTHLY_PASS_CONFIRMED,
                    "Monthly pass confirmed",
                    f"Your monthly pass for {court.name} ({monthly_pass.month}) is active.",
                    {"monthly_pass_id": monthly_pass.id, "court_id": court.id},
                )
                customer_email = monthly_pass.customer.email if monthly_pass.customer else None
                outbox.email(
                    customer_email,
                    email_templates.monthly_pass_confirmed_customer(monthly_pass, self.config.app_url),
                    dedupe_key=f"monthly-pass:confirmed:{monthly_pass.id}:{customer_email}",
                )

        prometheus_metrics.record_admission("monthly_pass_confirm")
        outbox.dispatch(self.gateway, self.db)
        return monthly_pass

    def _materialize(
        self,
        monthly_pass: MonthlyPass,
        reservation: RecurringWeeklyReservation,
        actor: Principal,
        customer_name: Optional[str],
    ) -> List[CourtBlock]:
        note = pass_block_note(customer_name)
        return [
            self.block_repository.create(
                court_id=monthly_pass.court_id,
                start_time=occurrence.start,
                end_time=occurrence.end,
                note=note,
                created_by_id=actor.id,
                monthly_pass_id=monthly_pass.id,
            )
            for occurrence in reservation.occurrences_in_month()
        ]

    @BaseService.measure_operation("cancel_monthly_pass")
    def cancel_monthly_pass(self, actor: Principal, pass_id: str) -> MonthlyPass:
        """Owner rejects a PENDING request; nothing is materialized."""
        self.log_operation("cancel_monthly_pass", actor_id=actor.id, pass_id=pass_id)
        actor.require_role(UserRole.ADMIN)
        outbox = Outbox(self.config)

        with self.transaction():
            monthly_pass = self._load_pending_owned(actor, pass_id, "cancelled")
            court = monthly_pass.court
            monthly_pass.status = MonthlyPassStatus.CANCELLED.value
            monthly_pass.cancelled_at = self.now()
            self.audit_repository.record(
                actor_id=actor.id,
                action="monthly_pass.cancel",
                entity_type="MonthlyPass",
                entity_id=monthly_pass.id,
                details={"court_id": court.id},
            )
            outbox.notify(
                monthly_pass.customer_id,
                NotificationKind.MONTHLY_PASS_CANCELLED,
                "Monthly pass cancelled",
                f"Your monthly pass request for {court.name} ({monthly_pass.month}) was not approved.",
                {"monthly_pass_id": monthly_pass.id, "court_id": court.id},
            )
            customer_email = monthly_pass.customer.email if monthly_pass.customer else None
            outbox.email(
                customer_email,
                email_templates.monthly_pass_cancelled_customer(monthly_pass, self.config.app_url),
                dedupe_key=f"monthly-pass:cancelled:{monthly_pass.id}:{customer_email}",
            )

        outbox.dispatch(self.gateway, self.db)
        return monthly_pass
