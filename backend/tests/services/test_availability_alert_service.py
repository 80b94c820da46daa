"""Tests for AvailabilityAlertService."""

from datetime import datetime

import pytest

from courtside.core.exceptions import (
    AlreadyAvailableException,
    ForbiddenException,
    OutOfHoursException,
    StateException,
)
from courtside.models.availability_alert import AvailabilityAlert
from courtside.models.court_block import CourtBlock
from courtside.models.notification import NotificationKind


@pytest.fixture
def taken_slot(booking_service, other_principal, court):
    """Another customer holds Monday 2024-06-03 10:00-11:00."""
    return booking_service.create_booking(
        other_principal, court.id, "2024-06-03T10:00:00", "2024-06-03T11:00:00"
    )


class TestCreateAlert:
    def test_alert_on_taken_slot(self, alert_service, customer_principal, customer, court, taken_slot):
        alert = alert_service.create_alert(customer_principal, court.id, "2024-06-03", "10:00", 60)

        assert alert.user_id == customer.id
        assert alert.start_time == datetime(2024, 6, 3, 10)
        assert alert.end_time == datetime(2024, 6, 3, 11)
        assert alert.is_active is True

    def test_free_slot_is_already_available(self, alert_service, customer_principal, court):
        with pytest.raises(AlreadyAvailableException) as exc_info:
            alert_service.create_alert(customer_principal, court.id, "2024-06-03", "10:00", 60)
        assert exc_info.value.code == "ALREADY_AVAILABLE"

    def test_duplicate_active_alert(self, alert_service, customer_principal, court, taken_slot):
        alert_service.create_alert(customer_principal, court.id, "2024-06-03", "10:00", 60)
        with pytest.raises(StateException):
            alert_service.create_alert(customer_principal, court.id, "2024-06-03", "10:00", 60)

    def test_short_durations_are_raised_to_the_minimum(
        self, alert_service, customer_principal, court, taken_slot
    ):
        alert = alert_service.create_alert(customer_principal, court.id, "2024-06-03", "10:00", 0)
        assert alert.end_time == datetime(2024, 6, 3, 10, 30)

    def test_outside_hours(self, alert_service, customer_principal, court):
        with pytest.raises(OutOfHoursException):
            alert_service.create_alert(customer_principal, court.id, "2024-06-03", "22:00", 60)

    def test_owner_cannot_watch(self, alert_service, owner_principal, court):
        with pytest.raises(ForbiddenException):
            alert_service.create_alert(owner_principal, court.id, "2024-06-03", "10:00", 60)


class TestProcessAlerts:
    def test_nothing_due_while_still_taken(self, alert_service, gateway, customer_principal, court, taken_slot):
        alert_service.create_alert(customer_principal, court.id, "2024-06-03", "10:00", 60)

        assert alert_service.process_alerts() == 0
        assert gateway.notifications == []

    def test_cancellation_notifies_watchers(
        self, db, alert_service, booking_service, gateway, customer_principal, other_principal, customer, court, taken_slot
    ):
        alert = alert_service.create_alert(customer_principal, court.id, "2024-06-03", "10:00", 60)

        booking_service.cancel_booking_as_customer(other_principal, taken_slot.id)

        assert gateway.kinds_for(customer.id) == [NotificationKind.AVAILABILITY_ALERT]
        watcher_emails = [e for e in gateway.emails if e["to"] == "carla@example.com"]
        assert watcher_emails[0]["dedupe_key"] == (
            f"availability-alert:{alert.id}:2024-06-03T10:00:00:carla@example.com"
        )
        notified = db.get(AvailabilityAlert, alert.id)
        assert notified.is_active is False
        assert notified.notified_at == datetime(2024, 6, 1, 9, 0)

    def test_alerts_are_notified_once(self, db, owner, alert_service, gateway, customer_principal, court):
        block = CourtBlock(
            court_id=court.id,
            start_time=datetime(2024, 6, 3, 10),
            end_time=datetime(2024, 6, 3, 11),
            created_by_id=owner.id,
        )
        db.add(block)
        db.commit()
        alert_service.create_alert(customer_principal, court.id, "2024-06-03", "10:00", 60)
        db.delete(block)
        db.commit()

        assert alert_service.process_alerts() == 1
        assert alert_service.process_alerts() == 0
        assert len(gateway.notifications) == 1

    def test_started_alerts_are_skipped(self, db, clock, alert_service, customer_principal, court, taken_slot):
        alert_service.create_alert(customer_principal, court.id, "2024-06-03", "10:00", 60)
        db.delete(taken_slot)
        db.commit()
        clock.set(datetime(2024, 6, 3, 10, 0))

        assert alert_service.process_alerts() == 0
        assert alert_service.process_alerts(now=datetime(2024, 6, 3, 9, 0)) == 1

    def test_closed_day_is_not_available(
        self, db, owner, holiday_service, owner_principal, alert_service, customer_principal, court
    ):
        block = CourtBlock(
            court_id=court.id,
            start_time=datetime(2024, 6, 3, 10),
            end_time=datetime(2024, 6, 3, 11),
            created_by_id=owner.id,
        )
        db.add(block)
        db.commit()
        alert_service.create_alert(customer_principal, court.id, "2024-06-03", "10:00", 60)
        holiday_service.upsert_holiday(owner_principal, "2024-06-03", is_open=False)
        db.delete(block)
        db.commit()

        assert alert_service.process_alerts() == 0
