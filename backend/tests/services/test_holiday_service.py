"""Tests for HolidayService."""

from datetime import date

import pytest

from courtside.core.exceptions import ForbiddenException, NotFoundException, ValidationException
from courtside.models.audit_log import AuditLog
from courtside.models.user import UserRole
from courtside.services.calendar_resolver import CalendarResolver


class TestUpsertHoliday:
    def test_closed_holiday(self, db, holiday_service, owner_principal, establishment):
        holiday = holiday_service.upsert_holiday(
            owner_principal, "2024-12-25", is_open=False, opening_time="10:00", closing_time="12:00", note="Christmas"
        )

        assert holiday.date == date(2024, 12, 25)
        assert holiday.is_open is False
        assert (holiday.opening_time, holiday.closing_time) == (None, None)

        calendar = CalendarResolver(db).resolve(establishment, date(2024, 12, 25))
        assert calendar.is_closed is True
        assert calendar.notice == "Holiday: closed • Christmas"

    def test_upsert_replaces_the_same_date(self, holiday_service, owner_principal, establishment):
        first = holiday_service.upsert_holiday(owner_principal, "2024-12-24", is_open=False)
        second = holiday_service.upsert_holiday(
            owner_principal, "2024-12-24", is_open=True, opening_time="08:00", closing_time="14:00"
        )

        assert second.id == first.id
        assert second.is_open is True
        assert second.closing_time == "14:00"
        assert len(holiday_service.list_holidays(owner_principal)) == 1

    def test_special_hours_require_both_times(self, holiday_service, owner_principal):
        with pytest.raises(ValidationException):
            holiday_service.upsert_holiday(owner_principal, "2024-12-24", is_open=True, opening_time="08:00")

    def test_open_day_without_hours_uses_default_hours(
        self, db, holiday_service, owner_principal, establishment, booking_service, customer_principal, court
    ):
        # 2024-06-09 is a Sunday
        establishment.open_weekdays = [1, 2, 3, 4, 5, 6]
        db.commit()

        holiday = holiday_service.upsert_holiday(owner_principal, "2024-06-09", is_open=True, note="Open day")

        assert holiday.is_open is True
        assert (holiday.opening_time, holiday.closing_time) == (None, None)
        calendar = CalendarResolver(db).resolve(establishment, date(2024, 6, 9))
        assert calendar.is_closed is False
        assert (calendar.opening_time, calendar.closing_time) == ("08:00", "22:00")

        booked = booking_service.create_booking(
            customer_principal, court.id, "2024-06-09T10:00:00", "2024-06-09T11:00:00"
        )
        assert booked.ids

    def test_special_hours_must_be_ordered_and_aligned(self, holiday_service, owner_principal):
        with pytest.raises(ValidationException):
            holiday_service.upsert_holiday(
                owner_principal, "2024-12-24", is_open=True, opening_time="14:00", closing_time="08:00"
            )
        with pytest.raises(ValidationException):
            holiday_service.upsert_holiday(
                owner_principal, "2024-12-24", is_open=True, opening_time="08:15", closing_time="14:00"
            )

    def test_invalid_date(self, holiday_service, owner_principal):
        with pytest.raises(ValidationException):
            holiday_service.upsert_holiday(owner_principal, "2024-02-30", is_open=False)

    def test_audit_entry_is_written(self, db, holiday_service, owner_principal, owner, establishment):
        holiday = holiday_service.upsert_holiday(owner_principal, "2024-12-25", is_open=False)

        entry = db.query(AuditLog).filter(AuditLog.entity_id == holiday.id).one()
        assert entry.action == "holiday.upsert"
        assert entry.actor_id == owner.id

    def test_customers_cannot_manage_holidays(self, holiday_service, customer_principal):
        with pytest.raises(ForbiddenException):
            holiday_service.upsert_holiday(customer_principal, "2024-12-25", is_open=False)

    def test_admin_without_establishment(self, factory, holiday_service):
        admin = factory.principal(factory.user(UserRole.ADMIN, email="new-owner@example.com"))
        with pytest.raises(NotFoundException):
            holiday_service.upsert_holiday(admin, "2024-12-25", is_open=False)


class TestListAndDelete:
    def test_list_range(self, holiday_service, owner_principal, establishment):
        for day in ("2024-11-15", "2024-12-25", "2025-01-01"):
            holiday_service.upsert_holiday(owner_principal, day, is_open=False)

        holidays = holiday_service.list_holidays(owner_principal, "2024-12-01", "2024-12-31")

        assert [h.date for h in holidays] == [date(2024, 12, 25)]

    def test_delete(self, holiday_service, owner_principal, establishment):
        holiday = holiday_service.upsert_holiday(owner_principal, "2024-12-25", is_open=False)

        holiday_service.delete_holiday(owner_principal, holiday.id)

        assert holiday_service.list_holidays(owner_principal) == []

    def test_other_owners_holiday_is_not_found(self, factory, holiday_service, owner_principal, establishment):
        other_owner = factory.user(UserRole.ADMIN, email="other-owner@example.com")
        factory.establishment(other_owner, name="Rival Club")
        holiday = holiday_service.upsert_holiday(owner_principal, "2024-12-25", is_open=False)

        with pytest.raises(NotFoundException):
            holiday_service.delete_holiday(factory.principal(other_owner), holiday.id)


class TestResolveForEstablishmentId:
    def test_loads_the_establishment_and_its_holiday(self, db, holiday_service, owner_principal, establishment):
        holiday_service.upsert_holiday(
            owner_principal, "2024-12-24", is_open=True, opening_time="08:00", closing_time="14:00"
        )

        calendar = CalendarResolver(db).resolve_for_establishment_id(establishment.id, date(2024, 12, 24))

        assert calendar.is_closed is False
        assert (calendar.opening_time, calendar.closing_time) == ("08:00", "14:00")
        assert calendar.notice == "Holiday with special hours"

    def test_unknown_establishment(self, db):
        with pytest.raises(NotFoundException):
            CalendarResolver(db).resolve_for_establishment_id("missing", date(2024, 12, 24))
