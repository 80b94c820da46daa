# backend/courtside/services/booking_service.py
"""
Booking Service for the Courtside scheduling engine.

Admits customer bookings (optionally repeated weekly), owner walk-in
bookings, and drives the PENDING -> CONFIRMED / CANCELLED lifecycle.

Every admission:
- validates input outside the transaction (alignment, repeat limits);
- re-reads the calendar and every conflicting commitment inside one
  transaction, locking the court row where the database supports it;
- writes all occurrences or none;
- dispatches notifications and e-mail only after the commit.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
import logging
from typing import Any, Dict, List, Optional, Union

from sqlalchemy.orm import Session

from ..core.config import SchedulingConfig
from ..core.constants import MAX_ADMIN_BOOKING_REPEAT_WEEKS, MAX_BOOKING_REPEAT_WEEKS
from ..core.court_lock import court_lock
from ..core.exceptions import (
    BusinessRuleException,
    ConflictException,
    NotFoundException,
    RateLimitedException,
    StateException,
    ValidationException,
)
from ..core.identity import Principal
from ..domain.scheduling import Interval, month_key, parse_iso_datetime
from ..models.booking import Booking, BookingStatus
from ..models.court import Court
from ..models.notification import NotificationKind
from ..models.user import UserRole
from ..monitoring.prometheus_metrics import prometheus_metrics
from ..repositories import RepositoryFactory
from . import email_templates
from .base import BaseService
from .calendar_resolver import CalendarResolver
from .conflict_checker import ConflictChecker
from .notification_service import NotificationGateway, NotificationService, Outbox
from .pricing_service import PricingService

logger = logging.getLogger(__name__)

AUTO_CANCEL_REASON = "Cancelled automatically: another booking was confirmed for this time."
RESCHEDULE_CANCEL_REASON = "Rescheduled by customer"

TimeInput = Union[str, datetime]


@dataclass
class BookingAdmissionResult:
    """Outcome of one admission call: every created occurrence plus payment metadata."""

    ids: List[str]
    status: str
    start_time: datetime
    end_time: datetime
    total_price_cents: int
    payment: Optional[Dict[str, Any]] = None
    bookings: List[Booking] = field(default_factory=list, repr=False)

    @property
    def id(self) -> str:
        return self.ids[0]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "ids": list(self.ids),
            "status": self.status,
            "start_time": self.start_time.isoformat(),
            "end_time": self.end_time.isoformat(),
            "total_price_cents": self.total_price_cents,
            "payment": self.payment,
        }


class BookingService(BaseService):
    """
    Service layer for booking operations.

    Depends on the conflict checker for overlap detection, the calendar
    resolver for operating hours and the notification gateway for
    post-commit side effects.
    """

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
        self.calendar_resolver = CalendarResolver(db)
        self.conflict_checker = conflict_checker or ConflictChecker(
            db, calendar_resolver=self.calendar_resolver
        )
        self.court_repository = RepositoryFactory.create_court_repository(db)
        self.booking_repository = RepositoryFactory.create_booking_repository(db)
        self.pass_repository = RepositoryFactory.create_monthly_pass_repository(db)
        self.audit_repository = RepositoryFactory.create_audit_repository(db)

    # Helpers

    def _parse_interval(self, start_time: TimeInput, end_time: TimeInput) -> Interval:
        start = parse_iso_datetime(start_time, "start_time")
        end = parse_iso_datetime(end_time, "end_time")
        return Interval.validated(start, end)

    @staticmethod
    def _validate_repeat(repeat_weeks: Optional[int], limit: int, hint: str) -> int:
        try:
            repeat = int(repeat_weeks or 0)
        except (TypeError, ValueError):
            raise ValidationException("repeat_weeks must be an integer")
        if repeat < 0:
            raise ValidationException("repeat_weeks cannot be negative", details={"repeat_weeks": repeat})
        if repeat > limit:
            raise ValidationException(hint, details={"repeat_weeks": repeat, "max": limit})
        return repeat

    def _assert_future(self, interval: Interval) -> None:
        if interval.start <= self.now():
            raise ValidationException(
                "Bookings cannot start in the past",
                details={"start_time": interval.start.isoformat()},
            )

    def _load_court(self, court_id: str, for_update: bool = False) -> Court:
        court = self.court_repository.get_with_establishment(court_id, for_update=for_update)
        if court is None:
            raise NotFoundException("Court not found", details={"court_id": court_id})
        if not court.is_active:
            raise StateException("Court is inactive", details={"court_id": court_id})
        return court

    def _load_booking(self, booking_id: str) -> Booking:
        booking = self.booking_repository.get_with_court(booking_id, for_update=True)
        if booking is None:
            raise NotFoundException("Booking not found", details={"booking_id": booking_id})
        return booking

    def _enforce_rate_limit(self, customer_id: str) -> None:
        window = timedelta(minutes=self.config.booking_rate_limit_window_minutes)
        recent = self.booking_repository.count_requested_since(customer_id, self.now() - window)
        if recent >= self.config.booking_rate_limit:
            raise RateLimitedException(
                details={
                    "limit": self.config.booking_rate_limit,
                    "window_minutes": self.config.booking_rate_limit_window_minutes,
                }
            )

    def _payment_required(self, court: Court, pay_at_court: bool) -> bool:
        return bool(
            self.config.payments_enabled
            and court.establishment.online_payments_enabled
            and not pay_at_court
        )

    def _validate_occurrences(
        self,
        court: Court,
        occurrences: List[Interval],
        customer_id: Optional[str] = None,
        exclude_booking_id: Optional[str] = None,
    ) -> None:
        """
        Calendar and conflict checks for every occurrence, in chronological order.

        The first failing occurrence aborts the whole request.
        """
        establishment = court.establishment
        holidays = self.calendar_resolver.load_holidays(
            establishment, occurrences[0].day, occurrences[-1].day
        )
        buffer_minutes = establishment.booking_buffer_minutes or 0
        for occurrence in occurrences:
            self.calendar_resolver.assert_within_hours(establishment, occurrence, holidays)
            if customer_id:
                self.conflict_checker.assert_customer_free(
                    customer_id, occurrence, exclude_booking_id=exclude_booking_id
                )
            self.conflict_checker.assert_no_conflict(
                court.id,
                occurrence,
                buffer_minutes=buffer_minutes,
                pad_against_blocks=True,
                exclude_booking_id=exclude_booking_id,
            )

    def _customer_contact(self, booking: Booking) -> tuple:
        if booking.customer is not None:
            return booking.customer.display_name, booking.customer.email
        return booking.customer_name or "Customer", booking.customer_email

    def _owner(self, court: Court):
        return court.establishment.owner

    def _re_evaluate_alerts(self, court_id: str) -> None:
        from .availability_alert_service import AvailabilityAlertService

        try:
            AvailabilityAlertService(
                self.db, config=self.config, gateway=self.gateway, clock=self.clock
            ).process_alerts(court_id=court_id)
        except Exception:
            logger.exception("Alert re-evaluation failed", extra={"court_id": court_id})
            prometheus_metrics.record_side_effect_failure("alerts")
            self.db.rollback()

    # Customer bookings

    @BaseService.measure_operation("create_booking")
    def create_booking(
        self,
        actor: Principal,
        court_id: str,
        start_time: TimeInput,
        end_time: TimeInput,
        repeat_weeks: int = 0,
        pay_at_court: bool = False,
    ) -> BookingAdmissionResult:
        """
        Admit a customer booking and up to three weekly repeats.

        Args:
            actor: Acting customer
            court_id: Target court
            start_time: ISO-8601 start of the first occurrence
            end_time: ISO-8601 end of the first occurrence
            repeat_weeks: Extra weekly occurrences (0..3)
            pay_at_court: Customer pays on site instead of online

        Returns:
            BookingAdmissionResult with every created id

        Raises:
            ValidationException: Malformed, misaligned, past or over-long request
            ForbiddenException: Actor is not a customer
            CourtClosedException / OutOfHoursException: Outside the operating calendar
            SlotTakenException: An occurrence overlaps an existing commitment
            RateLimitedException: Too many requests in the rate window
        """
        self.log_operation(
            "create_booking",
            actor_id=actor.id,
            court_id=court_id,
            start_time=str(start_time),
            repeat_weeks=repeat_weeks,
        )
        actor.require_customer()
        interval = self._parse_interval(start_time, end_time)
        repeat = self._validate_repeat(
            repeat_weeks,
            MAX_BOOKING_REPEAT_WEEKS,
            f"For more than {MAX_BOOKING_REPEAT_WEEKS} weekly repeats, request a monthly pass",
        )
        self._assert_future(interval)
        occurrences = interval.weekly_occurrences(repeat)

        outbox = Outbox(self.config)
        with court_lock(court_id) as acquired:
            if not acquired:
                raise ConflictException(
                    "Another request for this court is being processed. Please try again.",
                    code="COURT_BUSY",
                )
            with self.transaction():
                self._enforce_rate_limit(actor.id)
                court = self._load_court(court_id, for_update=True)
                establishment = court.establishment
                payment_required = self._payment_required(court, pay_at_court)
                if payment_required and repeat:
                    raise ValidationException(
                        "Online payment does not support weekly repeats. Book a single occurrence."
                    )

                self._validate_occurrences(court, occurrences, customer_id=actor.id)

                requires_confirmation = payment_required or establishment.requires_booking_confirmation
                status = BookingStatus.PENDING if requires_confirmation else BookingStatus.CONFIRMED
                bookings = self._create_rows(
                    court,
                    occurrences,
                    status=status,
                    customer_id=actor.id,
                    created_by_id=actor.id,
                    pay_at_court=pay_at_court,
                )
                self.audit_repository.record(
                    actor_id=actor.id,
                    action="booking.create.customer",
                    entity_type="Booking",
                    entity_id=bookings[0].id,
                    details={
                        "court_id": court.id,
                        "ids": [b.id for b in bookings],
                        "status": status.value,
                        "repeat_weeks": repeat,
                    },
                )
                self._queue_created(outbox, court, bookings, status)

        prometheus_metrics.record_admission("booking", len(bookings))
        outbox.dispatch(self.gateway, self.db)

        first = bookings[0]
        total = sum(b.total_price_cents for b in bookings)
        payment = None
        if payment_required and total > 0:
            payment = {
                "booking_id": first.id,
                "amount_cents": total,
                "status": "REQUIRES_CHECKOUT",
            }
        return BookingAdmissionResult(
            ids=[b.id for b in bookings],
            status=status.value,
            start_time=first.start_time,
            end_time=first.end_time,
            total_price_cents=total,
            payment=payment,
            bookings=bookings,
        )

    def _create_rows(
        self,
        court: Court,
        occurrences: List[Interval],
        *,
        status: BookingStatus,
        customer_id: Optional[str],
        created_by_id: str,
        pay_at_court: bool = False,
        customer_name: Optional[str] = None,
        customer_email: Optional[str] = None,
        customer_phone: Optional[str] = None,
        rescheduled_from_id: Optional[str] = None,
    ) -> List[Booking]:
        pricing = PricingService.for_court(court)
        requested_at = self.now()
        bookings = []
        for occurrence in occurrences:
            covered = bool(customer_id) and self.pass_repository.customer_has_active_pass(
                court.id, customer_id, month_key(occurrence.day)
            )
            booking = self.booking_repository.create(
                court_id=court.id,
                customer_id=customer_id,
                customer_name=customer_name,
                customer_email=customer_email,
                customer_phone=customer_phone,
                start_time=occurrence.start,
                end_time=occurrence.end,
                status=status.value,
                total_price_cents=pricing.price_for(occurrence.duration_minutes, covered),
                pay_at_court=pay_at_court,
                created_by_id=created_by_id,
                requested_at=requested_at,
                rescheduled_from_id=rescheduled_from_id,
            )
            if status == BookingStatus.CONFIRMED:
                booking.confirm(at=self.now())
            bookings.append(booking)
        return bookings

    def _queue_created(
        self, outbox: Outbox, court: Court, bookings: List[Booking], status: BookingStatus
    ) -> None:
        owner = self._owner(court)
        first = bookings[0]
        customer_name, customer_email = self._customer_contact(first)
        payload = {"booking_id": first.id, "booking_ids": [b.id for b in bookings], "court_id": court.id}
        when = str(first.interval)

        if status == BookingStatus.PENDING:
            outbox.notify(
                court.establishment.owner_id,
                NotificationKind.BOOKING_PENDING,
                "New booking awaiting confirmation",
                f"{customer_name} requested {court.name} on {when}",
                payload,
            )
            if owner is not None and owner.email and self.config.booking_pending_email_enabled:
                outbox.email(
                    owner.email,
                    email_templates.booking_pending_owner(
                        first, court.name, customer_name, self.config.dashboard_url
                    ),
                    dedupe_key=f"booking:pending:{first.id}:{owner.email}",
                )
            return

        outbox.notify(
            court.establishment.owner_id,
            NotificationKind.BOOKING_CONFIRMED,
            "New confirmed booking",
            f"{customer_name} booked {court.name} on {when}",
            payload,
        )
        outbox.notify(
            first.customer_id,
            NotificationKind.BOOKING_CONFIRMED,
            "Booking confirmed",
            f"Your booking at {court.name} on {when} is confirmed.",
            payload,
        )
        if customer_email and self.config.booking_confirmation_email_enabled:
            outbox.email(
                customer_email,
                email_templates.booking_confirmed_customer(first, court.name, self.config.app_url),
                dedupe_key=f"booking:confirmed:{first.id}:{customer_email}",
            )

    # Owner walk-in bookings

    @BaseService.measure_operation("create_admin_booking")
    def create_admin_booking(
        self,
        actor: Principal,
        court_id: str,
        start_time: TimeInput,
        end_time: TimeInput,
        customer_name: str,
        customer_email: Optional[str] = None,
        customer_phone: Optional[str] = None,
        repeat_weeks: int = 0,
    ) -> BookingAdmissionResult:
        """Owner-recorded CONFIRMED booking for a guest, repeated weekly up to 52 times."""
        self.log_operation("create_admin_booking", actor_id=actor.id, court_id=court_id)
        actor.require_role(UserRole.ADMIN)
        name = (customer_name or "").strip()
        if not name:
            raise ValidationException("Customer name is required")
        if customer_email and "@" not in customer_email:
            raise ValidationException("Invalid customer e-mail", details={"customer_email": customer_email})
        interval = self._parse_interval(start_time, end_time)
        repeat = self._validate_repeat(
            repeat_weeks,
            MAX_ADMIN_BOOKING_REPEAT_WEEKS,
            f"Walk-in bookings repeat at most {MAX_ADMIN_BOOKING_REPEAT_WEEKS} weeks",
        )
        self._assert_future(interval)
        occurrences = interval.weekly_occurrences(repeat)

        with court_lock(court_id) as acquired:
            if not acquired:
                raise ConflictException(
                    "Another request for this court is being processed. Please try again.",
                    code="COURT_BUSY",
                )
            with self.transaction():
                court = self._load_court(court_id, for_update=True)
                actor.require_owner_of(court.establishment.owner_id)
                self._validate_occurrences(court, occurrences)
                bookings = self._create_rows(
                    court,
                    occurrences,
                    status=BookingStatus.CONFIRMED,
                    customer_id=None,
                    created_by_id=actor.id,
                    pay_at_court=True,
                    customer_name=name,
                    customer_email=customer_email,
                    customer_phone=customer_phone,
                )
                self.audit_repository.record(
                    actor_id=actor.id,
                    action="booking.create.admin",
                    entity_type="Booking",
                    entity_id=bookings[0].id,
                    details={"court_id": court.id, "ids": [b.id for b in bookings]},
                )

        prometheus_metrics.record_admission("admin_booking", len(bookings))
        first = bookings[0]
        return BookingAdmissionResult(
            ids=[b.id for b in bookings],
            status=BookingStatus.CONFIRMED.value,
            start_time=first.start_time,
            end_time=first.end_time,
            total_price_cents=sum(b.total_price_cents for b in bookings),
            bookings=bookings,
        )

    # Lifecycle

    @BaseService.measure_operation("confirm_booking")
    def confirm_booking(self, actor: Principal, booking_id: str) -> Booking:
        """
        Owner confirms a PENDING booking.

        Overlapping PENDING bookings lose the slot and are cancelled in the
        same transaction.
        """
        self.log_operation("confirm_booking", actor_id=actor.id, booking_id=booking_id)
        actor.require_role(UserRole.ADMIN)
        outbox = Outbox(self.config)

        with self.transaction():
            booking = self._load_booking(booking_id)
            court = booking.court
            actor.require_owner_of(court.establishment.owner_id)
            if booking.status != BookingStatus.PENDING.value:
                raise StateException(
                    "Only pending bookings can be confirmed", details={"status": booking.status}
                )

            confirmed_hit = self.conflict_checker.find_booking_conflict(
                court.id,
                booking.interval,
                exclude_booking_id=booking.id,
                statuses=(BookingStatus.CONFIRMED.value,),
            )
            if confirmed_hit is not None:
                raise confirmed_hit.to_exception(
                    "Time slot unavailable: a confirmed booking already holds this time"
                )
            buffer_minutes = court.establishment.booking_buffer_minutes or 0
            block_hit = self.conflict_checker.find_block_conflict(
                court.id, booking.interval.padded(buffer_minutes)
            )
            if block_hit is not None:
                raise block_hit.to_exception()

            booking.confirm(at=self.now())
            losers = self.booking_repository.get_pending_overlapping(
                court.id, booking.start_time, booking.end_time, booking.id
            )
            for loser in losers:
                loser.cancel(actor.id, AUTO_CANCEL_REASON, at=self.now())
                self._queue_cancelled(outbox, court, loser, AUTO_CANCEL_REASON, dedupe_prefix="booking:auto-cancel")

            self.audit_repository.record(
                actor_id=actor.id,
                action="booking.confirm",
                entity_type="Booking",
                entity_id=booking.id,
                details={"court_id": court.id, "auto_cancelled": [b.id for b in losers]},
            )

            payload = {"booking_id": booking.id, "court_id": court.id}
            outbox.notify(
                booking.customer_id,
                NotificationKind.BOOKING_CONFIRMED,
                "Booking confirmed",
                "Your booking was confirmed by the establishment.",
                payload,
            )
            _, customer_email = self._customer_contact(booking)
            if customer_email and self.config.booking_confirmation_email_enabled:
                outbox.email(
                    customer_email,
                    email_templates.booking_confirmed_customer(booking, court.name, self.config.app_url),
                    dedupe_key=f"booking:confirmed:{booking.id}:{customer_email}",
                )

        outbox.dispatch(self.gateway, self.db)
        return booking

    def _queue_cancelled(
        self,
        outbox: Outbox,
        court: Court,
        booking: Booking,
        reason: Optional[str],
        dedupe_prefix: str = "booking:cancelled",
    ) -> None:
        outbox.notify(
            booking.customer_id,
            NotificationKind.BOOKING_CANCELLED,
            "Booking cancelled",
            reason or f"Your booking at {court.name} on {booking.interval} was cancelled.",
            {"booking_id": booking.id, "court_id": court.id},
        )
        _, customer_email = self._customer_contact(booking)
        if customer_email and self.config.booking_cancellation_email_enabled:
            outbox.email(
                customer_email,
                email_templates.booking_cancelled_customer(booking, court.name, self.config.app_url, reason),
                dedupe_key=f"{dedupe_prefix}:{booking.id}:{customer_email}",
            )

    @BaseService.measure_operation("cancel_booking_as_owner")
    def cancel_booking_as_owner(
        self, actor: Principal, booking_id: str, reason: Optional[str] = None
    ) -> Booking:
        """Owner rejects a PENDING booking."""
        self.log_operation("cancel_booking_as_owner", actor_id=actor.id, booking_id=booking_id)
        actor.require_role(UserRole.ADMIN)
        outbox = Outbox(self.config)
        reason = (reason or "").strip() or None

        with self.transaction():
            booking = self._load_booking(booking_id)
            court = booking.court
            actor.require_owner_of(court.establishment.owner_id)
            if booking.status != BookingStatus.PENDING.value:
                raise StateException(
                    "Only pending bookings can be cancelled", details={"status": booking.status}
                )
            booking.cancel(actor.id, reason, at=self.now())
            self.audit_repository.record(
                actor_id=actor.id,
                action="booking.cancel.owner",
                entity_type="Booking",
                entity_id=booking.id,
                details={"court_id": court.id, "reason": reason},
            )
            self._queue_cancelled(outbox, court, booking, reason)

        outbox.dispatch(self.gateway, self.db)
        self._re_evaluate_alerts(court.id)
        return booking

    @BaseService.measure_operation("cancel_booking_as_customer")
    def cancel_booking_as_customer(self, actor: Principal, booking_id: str) -> Booking:
        """
        Customer cancels one of their own future bookings.

        Rejected inside the establishment's ``cancel_min_hours`` cutoff.
        """
        self.log_operation("cancel_booking_as_customer", actor_id=actor.id, booking_id=booking_id)
        actor.require_customer()
        outbox = Outbox(self.config)

        with self.transaction():
            booking = self.booking_repository.get_with_court(booking_id, for_update=True)
            if booking is None or booking.customer_id != actor.id:
                raise NotFoundException("Booking not found", details={"booking_id": booking_id})
            if booking.status == BookingStatus.CANCELLED.value:
                raise StateException("This booking is already cancelled")
            now = self.now()
            if booking.start_time <= now:
                raise StateException("Past bookings cannot be cancelled")
            min_hours = booking.court.establishment.cancel_min_hours or 0
            if booking.start_time - now < timedelta(hours=min_hours):
                raise BusinessRuleException(
                    f"Cancellation is not allowed less than {min_hours}h before the start",
                    details={"cancel_min_hours": min_hours},
                )

            court = booking.court
            booking.cancel(actor.id, "Cancelled by customer", at=self.now())
            self.audit_repository.record(
                actor_id=actor.id,
                action="booking.cancel.customer",
                entity_type="Booking",
                entity_id=booking.id,
                details={"court_id": court.id},
            )
            customer_name, _ = self._customer_contact(booking)
            outbox.notify(
                court.establishment.owner_id,
                NotificationKind.BOOKING_CANCELLED,
                "Booking cancelled",
                f"{customer_name} cancelled {court.name} on {booking.interval}",
                {"booking_id": booking.id, "court_id": court.id},
            )

        outbox.dispatch(self.gateway, self.db)
        self._re_evaluate_alerts(court.id)
        return booking


    @BaseService.measure_operation("reschedule_booking_as_customer")
    def reschedule_booking_as_customer(
        self,
        actor: Principal,
        booking_id: str,
        start_time: TimeInput,
        end_time: TimeInput,
    ) -> Booking:
        """
        Move one of the customer's future bookings to a new interval on the same court.

        The replacement is admitted like a single-occurrence booking, with the
        original ignored by the overlap checks, and the original is cancelled
        in the same transaction. Each booking can be moved once.

        Returns:
            The new booking, linked through ``rescheduled_from_id``
        """
        self.log_operation(
            "reschedule_booking_as_customer",
            actor_id=actor.id,
            booking_id=booking_id,
            start_time=str(start_time),
        )
        actor.require_customer()
        interval = self._parse_interval(start_time, end_time)
        self._assert_future(interval)

        target = self.booking_repository.get_by_id(booking_id)
        if target is None or target.customer_id != actor.id:
            raise NotFoundException("Booking not found", details={"booking_id": booking_id})

        outbox = Outbox(self.config)
        with court_lock(target.court_id) as acquired:
            if not acquired:
                raise ConflictException(
                    "Another request for this court is being processed. Please try again.",
                    code="COURT_BUSY",
                )
            with self.transaction():
                original = self.booking_repository.get_with_court(booking_id, for_update=True)
                if original is None or original.customer_id != actor.id:
                    raise NotFoundException("Booking not found", details={"booking_id": booking_id})
                if self.booking_repository.find_one_by(rescheduled_from_id=original.id) is not None:
                    raise StateException(
                        "This booking was already rescheduled once",
                        details={"booking_id": original.id},
                    )
                if original.status == BookingStatus.CANCELLED.value:
                    raise StateException("This booking is already cancelled")
                if original.start_time <= self.now():
                    raise StateException("Past bookings cannot be rescheduled")

                court = self._load_court(original.court_id, for_update=True)
                self._validate_occurrences(
                    court, [interval], customer_id=actor.id, exclude_booking_id=original.id
                )

                status = (
                    BookingStatus.PENDING
                    if court.establishment.requires_booking_confirmation
                    else BookingStatus.CONFIRMED
                )
                original.cancel(actor.id, RESCHEDULE_CANCEL_REASON, at=self.now())
                (booking,) = self._create_rows(
                    court,
                    [interval],
                    status=status,
                    customer_id=actor.id,
                    created_by_id=actor.id,
                    pay_at_court=original.pay_at_court,
                    rescheduled_from_id=original.id,
                )
                self.audit_repository.record(
                    actor_id=actor.id,
                    action="booking.reschedule.customer",
                    entity_type="Booking",
                    entity_id=booking.id,
                    details={
                        "court_id": court.id,
                        "rescheduled_from_id": original.id,
                        "status": status.value,
                    },
                )
                self._queue_rescheduled(outbox, court, original, booking)

        prometheus_metrics.record_admission("booking_reschedule")
        outbox.dispatch(self.gateway, self.db)
        self._re_evaluate_alerts(court.id)
        return booking

    def _queue_rescheduled(self, outbox: Outbox, court: Court, original: Booking, booking: Booking) -> None:
        owner = self._owner(court)
        customer_name, _ = self._customer_contact(booking)
        outbox.notify(
            court.establishment.owner_id,
            NotificationKind.BOOKING_RESCHEDULED,
            "Booking rescheduled",
            f"{customer_name} moved {court.name} from {original.interval} to {booking.interval}",
            {"booking_id": booking.id, "rescheduled_from_id": original.id, "court_id": court.id},
        )
        if owner is not None and owner.email:
            outbox.email(
                owner.email,
                email_templates.booking_rescheduled_owner(
                    original, booking, court.name, customer_name, self.config.dashboard_url
                ),
                dedupe_key=f"booking:rescheduled:{original.id}->{booking.id}:{owner.email}",
            )
