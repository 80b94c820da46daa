"""
Tests for MonthlyPassService: request windows, full-month validation,
confirmation with block materialization, and cancellation.

Mondays (weekday 1) in June 2024: 3, 10, 17, 24. In July 2024: 1, 8, 15, 22, 29.
"""

from contextlib import contextmanager
from datetime import datetime
from unittest.mock import patch

import pytest

from courtside.core.exceptions import (
    BusinessRuleException,
    ConflictException,
    CourtClosedException,
    ForbiddenException,
    NotConfiguredException,
    NotFoundException,
    OverlapBlockException,
    OverlapBookingException,
    OverlapPassException,
    RequestWindowClosedException,
    StateException,
    ValidationException,
)
from courtside.models.court_block import CourtBlock
from courtside.models.monthly_pass import MonthlyPass, MonthlyPassStatus
from courtside.models.notification import NotificationKind
from courtside.models.user import UserRole
from courtside.services.monthly_pass_service import pass_block_note


def request(service, principal, court, month="2024-06", weekday=1, start="18:00", end="19:00", **kwargs):
    return service.request_monthly_pass(principal, court.id, month, weekday, start, end, **kwargs)


def add_active_pass(db, court, customer, month, weekday=1, start="18:00", end="19:00") -> MonthlyPass:
    monthly_pass = MonthlyPass(
        court_id=court.id,
        customer_id=customer.id,
        month=month,
        weekday=weekday,
        start_time=start,
        end_time=end,
        status=MonthlyPassStatus.ACTIVE.value,
        price_cents=40000,
    )
    db.add(monthly_pass)
    db.commit()
    return monthly_pass


class TestRequestCurrentMonth:
    def test_request_creates_pending_pass(
        self, monthly_pass_service, gateway, customer_principal, owner, court
    ):
        monthly_pass = request(monthly_pass_service, customer_principal, court)

        assert monthly_pass.status == MonthlyPassStatus.PENDING.value
        assert monthly_pass.price_cents == 40000
        assert monthly_pass.terms_snapshot is None
        assert gateway.kinds_for(owner.id) == [NotificationKind.MONTHLY_PASS_PENDING]
        assert gateway.emails[0]["to"] == "owner@example.com"

    def test_re_request_while_pending_is_idempotent(self, db, monthly_pass_service, customer_principal, court):
        first = request(monthly_pass_service, customer_principal, court)
        second = request(monthly_pass_service, customer_principal, court)

        assert second.id == first.id
        assert db.query(MonthlyPass).count() == 1

    def test_request_after_first_occurrence_started(self, clock, monthly_pass_service, customer_principal, court):
        clock.set(datetime(2024, 6, 3, 18, 0))
        with pytest.raises(BusinessRuleException):
            request(monthly_pass_service, customer_principal, court)

    def test_month_out_of_range(self, monthly_pass_service, customer_principal, court):
        with pytest.raises(BusinessRuleException) as exc_info:
            request(monthly_pass_service, customer_principal, court, month="2024-09")
        assert exc_info.value.details == {"month": "2024-09"}

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"month": "2024-6"},
            {"weekday": 7},
            {"start": "18:15"},
            {"start": "19:00", "end": "18:00"},
        ],
    )
    def test_malformed_requests(self, monthly_pass_service, customer_principal, court, kwargs):
        with pytest.raises(ValidationException):
            request(monthly_pass_service, customer_principal, court, **kwargs)

    def test_terms_must_be_accepted(self, db, monthly_pass_service, customer_principal, court):
        court.monthly_terms = "No refunds after the first week."
        db.commit()

        with pytest.raises(BusinessRuleException) as exc_info:
            request(monthly_pass_service, customer_principal, court)
        assert exc_info.value.code == "TERMS_REQUIRED"

        monthly_pass = request(monthly_pass_service, customer_principal, court, accept_terms=True)
        assert monthly_pass.terms_snapshot == "No refunds after the first week."

    def test_court_without_monthly_price(self, factory, monthly_pass_service, customer_principal, establishment):
        court = factory.court(establishment, name="Court 2", monthly_price_cents=None)
        with pytest.raises(NotConfiguredException) as exc_info:
            request(monthly_pass_service, customer_principal, court)
        assert exc_info.value.code == "NOT_CONFIGURED"

    def test_active_pass_blocks_new_request(self, db, monthly_pass_service, customer_principal, customer, court):
        add_active_pass(db, court, customer, "2024-06", weekday=3)
        with pytest.raises(StateException):
            request(monthly_pass_service, customer_principal, court)

    def test_owner_cannot_request(self, monthly_pass_service, owner_principal, court):
        with pytest.raises(ForbiddenException):
            request(monthly_pass_service, owner_principal, court)


class TestFullMonthValidation:
    def test_booking_on_any_date_rejects_with_that_date(
        self, monthly_pass_service, booking_service, customer_principal, other_principal, court
    ):
        booking_service.create_booking(other_principal, court.id, "2024-06-17T18:30:00", "2024-06-17T19:30:00")

        with pytest.raises(OverlapBookingException) as exc_info:
            request(monthly_pass_service, customer_principal, court)

        assert "2024-06-17" in exc_info.value.message

    def test_closed_date_in_month(self, holiday_service, monthly_pass_service, owner_principal, customer_principal, court):
        holiday_service.upsert_holiday(owner_principal, "2024-06-24", is_open=False)

        with pytest.raises(CourtClosedException) as exc_info:
            request(monthly_pass_service, customer_principal, court)

        assert "2024-06-24" in exc_info.value.message

    def test_block_on_any_date(self, block_service, monthly_pass_service, owner_principal, customer_principal, court):
        block_service.create_block(owner_principal, court.id, "2024-06-10T18:00:00", "2024-06-10T19:00:00")

        with pytest.raises(OverlapBlockException) as exc_info:
            request(monthly_pass_service, customer_principal, court)

        assert exc_info.value.code == "OVERLAP_BLOCK"
        assert "administrative block on 2024-06-10" in exc_info.value.message

    def test_pending_passes_do_not_conflict(self, monthly_pass_service, customer_principal, other_principal, court):
        """Only ACTIVE passes take part in conflict checks."""
        first = request(monthly_pass_service, customer_principal, court)
        second = request(monthly_pass_service, other_principal, court)

        assert first.id != second.id


class TestNextMonthWindow:
    def test_requests_rejected_before_the_penultimate_week(
        self, clock, monthly_pass_service, customer_principal, court
    ):
        clock.set(datetime(2024, 6, 10, 12, 0))

        with pytest.raises(RequestWindowClosedException) as exc_info:
            request(monthly_pass_service, customer_principal, court, month="2024-07")

        assert exc_info.value.code == "REQUEST_WINDOW"
        assert exc_info.value.message == "Requests for next month open on the penultimate week"
        assert exc_info.value.details == {"opens_on": "2024-06-17"}

    def test_renewal_priority_rejects_new_customers(
        self, clock, monthly_pass_service, customer_principal, court
    ):
        clock.set(datetime(2024, 6, 18, 12, 0))

        with pytest.raises(RequestWindowClosedException) as exc_info:
            request(monthly_pass_service, customer_principal, court, month="2024-07")

        assert exc_info.value.details == {"open_to_all_on": "2024-06-24"}

    def test_renewal_priority_admits_identical_slot(
        self, db, clock, monthly_pass_service, customer_principal, customer, court
    ):
        add_active_pass(db, court, customer, "2024-06")
        clock.set(datetime(2024, 6, 18, 12, 0))

        monthly_pass = request(monthly_pass_service, customer_principal, court, month="2024-07")

        assert monthly_pass.month == "2024-07"
        assert monthly_pass.status == MonthlyPassStatus.PENDING.value

    def test_renewal_requires_the_exact_slot(
        self, db, clock, monthly_pass_service, customer_principal, customer, court
    ):
        add_active_pass(db, court, customer, "2024-06")
        clock.set(datetime(2024, 6, 18, 12, 0))

        with pytest.raises(RequestWindowClosedException):
            request(monthly_pass_service, customer_principal, court, month="2024-07", end="19:30")

    def test_open_to_everyone_in_the_last_week(self, clock, monthly_pass_service, customer_principal, court):
        clock.set(datetime(2024, 6, 24, 0, 0))
        monthly_pass = request(monthly_pass_service, customer_principal, court, month="2024-07")
        assert monthly_pass.status == MonthlyPassStatus.PENDING.value


class TestConfirmMonthlyPass:
    def test_confirm_materializes_every_occurrence(
        self, db, monthly_pass_service, gateway, owner_principal, customer_principal, customer, court
    ):
        pending = request(monthly_pass_service, customer_principal, court)

        confirmed = monthly_pass_service.confirm_monthly_pass(owner_principal, pending.id)

        assert confirmed.status == MonthlyPassStatus.ACTIVE.value
        assert confirmed.confirmed_at == datetime(2024, 6, 1, 9, 0)
        blocks = (
            db.query(CourtBlock)
            .filter(CourtBlock.monthly_pass_id == pending.id)
            .order_by(CourtBlock.start_time)
            .all()
        )
        assert [b.start_time.day for b in blocks] == [3, 10, 17, 24]
        assert all((b.start_time.hour, b.end_time.hour) == (18, 19) for b in blocks)
        assert {b.note for b in blocks} == {pass_block_note("Carla Customer")}
        assert gateway.kinds_for(customer.id) == [NotificationKind.MONTHLY_PASS_CONFIRMED]

    def test_materialized_pass_rejects_bookings_as_pass_conflicts(
        self, monthly_pass_service, booking_service, owner_principal, customer_principal, other_principal, court
    ):
        pending = request(monthly_pass_service, customer_principal, court)
        monthly_pass_service.confirm_monthly_pass(owner_principal, pending.id)

        with pytest.raises(OverlapPassException) as exc_info:
            booking_service.create_booking(
                other_principal, court.id, "2024-06-10T18:00:00", "2024-06-10T19:00:00"
            )

        assert exc_info.value.code == "OVERLAP_PASS"

    def test_active_pass_rejects_overlapping_requests(
        self, monthly_pass_service, owner_principal, customer_principal, other_principal, court
    ):
        pending = request(monthly_pass_service, customer_principal, court)
        monthly_pass_service.confirm_monthly_pass(owner_principal, pending.id)

        with pytest.raises(OverlapPassException):
            request(monthly_pass_service, other_principal, court, start="18:30", end="19:30")

    def test_confirm_revalidates_the_month(
        self, db, monthly_pass_service, booking_service, owner_principal, customer_principal, other_principal, court
    ):
        """A booking admitted while the request waited blocks the confirmation."""
        pending = request(monthly_pass_service, customer_principal, court)
        booking_service.create_booking(other_principal, court.id, "2024-06-24T18:00:00", "2024-06-24T19:00:00")

        with pytest.raises(OverlapBookingException):
            monthly_pass_service.confirm_monthly_pass(owner_principal, pending.id)

        db.refresh(pending)
        assert pending.status == MonthlyPassStatus.PENDING.value
        assert db.query(CourtBlock).count() == 0

    def test_confirm_twice(self, monthly_pass_service, owner_principal, customer_principal, court):
        pending = request(monthly_pass_service, customer_principal, court)
        monthly_pass_service.confirm_monthly_pass(owner_principal, pending.id)

        with pytest.raises(StateException):
            monthly_pass_service.confirm_monthly_pass(owner_principal, pending.id)

    def test_confirm_requires_ownership(self, factory, monthly_pass_service, customer_principal, court):
        pending = request(monthly_pass_service, customer_principal, court)
        stranger = factory.principal(factory.user(UserRole.ADMIN, email="other-owner@example.com"))

        with pytest.raises(ForbiddenException):
            monthly_pass_service.confirm_monthly_pass(stranger, pending.id)

    def test_unknown_pass(self, monthly_pass_service, owner_principal):
        with pytest.raises(NotFoundException):
            monthly_pass_service.confirm_monthly_pass(owner_principal, "missing")

    def test_busy_court_rejects_without_materializing(
        self, db, monthly_pass_service, owner_principal, customer_principal, court
    ):
        pending = request(monthly_pass_service, customer_principal, court)

        @contextmanager
        def held_elsewhere(court_id):
            yield False

        with patch("courtside.services.monthly_pass_service.court_lock", held_elsewhere):
            with pytest.raises(ConflictException) as exc_info:
                monthly_pass_service.confirm_monthly_pass(owner_principal, pending.id)

        assert exc_info.value.code == "COURT_BUSY"
        db.refresh(pending)
        assert pending.status == MonthlyPassStatus.PENDING.value
        assert db.query(CourtBlock).count() == 0

    def test_holder_books_for_free_once_active(
        self, monthly_pass_service, booking_service, owner_principal, customer_principal, court
    ):
        pending = request(monthly_pass_service, customer_principal, court)
        monthly_pass_service.confirm_monthly_pass(owner_principal, pending.id)

        result = booking_service.create_booking(
            customer_principal, court.id, "2024-06-05T10:00:00", "2024-06-05T11:00:00"
        )

        assert result.total_price_cents == 0


class TestCancelMonthlyPass:
    def test_cancel_pending(self, db, monthly_pass_service, gateway, owner_principal, customer_principal, customer, court):
        pending = request(monthly_pass_service, customer_principal, court)

        cancelled = monthly_pass_service.cancel_monthly_pass(owner_principal, pending.id)

        assert cancelled.status == MonthlyPassStatus.CANCELLED.value
        assert cancelled.cancelled_at == datetime(2024, 6, 1, 9, 0)
        assert db.query(CourtBlock).count() == 0
        assert gateway.kinds_for(customer.id) == [NotificationKind.MONTHLY_PASS_CANCELLED]

    def test_cancelled_pass_cannot_be_confirmed(self, monthly_pass_service, owner_principal, customer_principal, court):
        pending = request(monthly_pass_service, customer_principal, court)
        monthly_pass_service.cancel_monthly_pass(owner_principal, pending.id)

        with pytest.raises(StateException):
            monthly_pass_service.confirm_monthly_pass(owner_principal, pending.id)

    def test_cancelled_pass_row_is_reused(self, db, monthly_pass_service, owner_principal, customer_principal, court):
        pending = request(monthly_pass_service, customer_principal, court)
        monthly_pass_service.cancel_monthly_pass(owner_principal, pending.id)

        again = request(monthly_pass_service, customer_principal, court, weekday=2)

        assert again.id == pending.id
        assert again.status == MonthlyPassStatus.PENDING.value
        assert again.weekday == 2
        assert db.query(MonthlyPass).count() == 1
