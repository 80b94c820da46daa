"""
API tests through the FastAPI app with the database, clock and notification
gateway swapped for the test doubles.
"""

from datetime import datetime

from fastapi.testclient import TestClient
import pytest

from courtside.api.dependencies import (
    get_availability_alert_service,
    get_availability_service,
    get_block_service,
    get_booking_service,
    get_db,
    get_holiday_service,
    get_monthly_pass_service,
    get_scheduling_config,
)
from courtside.main import create_app
from courtside.models.court_block import CourtBlock
from courtside.services.availability_alert_service import AvailabilityAlertService
from courtside.services.availability_service import AvailabilityService
from courtside.services.block_service import BlockService
from courtside.services.booking_service import BookingService
from courtside.services.holiday_service import HolidayService
from courtside.services.monthly_pass_service import MonthlyPassService


@pytest.fixture
def client(db, config, gateway, clock):
    app = create_app()
    app.dependency_overrides[get_db] = lambda: db
    app.dependency_overrides[get_scheduling_config] = lambda: config
    app.dependency_overrides[get_availability_service] = lambda: AvailabilityService(db, clock=clock)
    app.dependency_overrides[get_booking_service] = lambda: BookingService(
        db, config=config, gateway=gateway, clock=clock
    )
    app.dependency_overrides[get_block_service] = lambda: BlockService(
        db, config=config, gateway=gateway, clock=clock
    )
    app.dependency_overrides[get_monthly_pass_service] = lambda: MonthlyPassService(
        db, config=config, gateway=gateway, clock=clock
    )
    app.dependency_overrides[get_holiday_service] = lambda: HolidayService(db, clock=clock)
    app.dependency_overrides[get_availability_alert_service] = lambda: AvailabilityAlertService(
        db, config=config, gateway=gateway, clock=clock
    )
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def as_user(user):
    return {"X-User-Id": user.id}


def booking_payload(court, start="2024-06-03T10:00:00", end="2024-06-03T11:00:00", **extra):
    return {"court_id": court.id, "start_time": start, "end_time": end, **extra}


class TestAuthentication:
    def test_missing_header(self, client, court):
        response = client.post("/api/v1/bookings", json=booking_payload(court))

        assert response.status_code == 401
        assert response.json()["detail"]["code"] == "UNAUTHENTICATED"

    def test_unknown_user(self, client, court):
        response = client.post("/api/v1/bookings", json=booking_payload(court), headers={"X-User-Id": "ghost"})
        assert response.status_code == 401


class TestBookingRoutes:
    def test_create_booking(self, client, customer, court):
        response = client.post("/api/v1/bookings", json=booking_payload(court), headers=as_user(customer))

        assert response.status_code == 201
        body = response.json()
        assert body["status"] == "CONFIRMED"
        assert body["total_price_cents"] == 10000
        assert body["ids"] == [body["id"]]

    def test_taken_slot_uses_error_envelope(self, client, customer, other_customer, court):
        client.post("/api/v1/bookings", json=booking_payload(court), headers=as_user(customer))

        response = client.post(
            "/api/v1/bookings",
            json=booking_payload(court, "2024-06-03T10:30:00", "2024-06-03T11:30:00"),
            headers=as_user(other_customer),
        )

        assert response.status_code == 409
        detail = response.json()["detail"]
        assert detail["code"] == "OVERLAP_BOOKING"
        assert detail["message"]
        assert "conflicting_id" in detail["details"]

    def test_malformed_time_is_a_validation_error(self, client, customer, court):
        response = client.post(
            "/api/v1/bookings",
            json=booking_payload(court, start="tomorrow"),
            headers=as_user(customer),
        )

        assert response.status_code == 400
        assert response.json()["detail"]["code"] == "VALIDATION"

    def test_unexpected_fields_are_rejected(self, client, customer, court):
        response = client.post(
            "/api/v1/bookings", json=booking_payload(court, discount=100), headers=as_user(customer)
        )

        assert response.status_code == 400
        assert response.json()["detail"]["code"] == "VALIDATION"

    def test_out_of_hours(self, client, customer, court):
        response = client.post(
            "/api/v1/bookings",
            json=booking_payload(court, "2024-06-03T21:30:00", "2024-06-03T22:30:00"),
            headers=as_user(customer),
        )

        assert response.status_code == 422
        assert response.json()["detail"]["code"] == "OUT_OF_HOURS"

    def test_walk_in_booking(self, client, owner, court):
        response = client.post(
            "/api/v1/bookings",
            json=booking_payload(court, customer_name="Walk-in Guest", repeat_weeks=2),
            headers=as_user(owner),
        )

        assert response.status_code == 201
        assert len(response.json()["ids"]) == 3

    def test_confirm_and_cancel(self, db, client, owner, customer, establishment, court):
        establishment.requires_booking_confirmation = True
        db.commit()
        created = client.post("/api/v1/bookings", json=booking_payload(court), headers=as_user(customer)).json()
        assert created["status"] == "PENDING"

        confirmed = client.post(f"/api/v1/bookings/{created['id']}/confirm", headers=as_user(owner))
        assert confirmed.status_code == 200
        assert confirmed.json()["status"] == "CONFIRMED"

        cancelled = client.post(f"/api/v1/bookings/{created['id']}/customer-cancel", headers=as_user(customer))
        assert cancelled.status_code == 200
        assert cancelled.json()["status"] == "CANCELLED"

    def test_owner_reject_with_reason(self, db, client, owner, customer, establishment, court):
        establishment.requires_booking_confirmation = True
        db.commit()
        created = client.post("/api/v1/bookings", json=booking_payload(court), headers=as_user(customer)).json()

        response = client.post(
            f"/api/v1/bookings/{created['id']}/cancel",
            json={"reason": "Court maintenance"},
            headers=as_user(owner),
        )

        assert response.status_code == 200
        assert response.json()["cancel_reason"] == "Court maintenance"

    def test_customer_cannot_confirm(self, client, customer, court):
        created = client.post("/api/v1/bookings", json=booking_payload(court), headers=as_user(customer)).json()

        response = client.post(f"/api/v1/bookings/{created['id']}/confirm", headers=as_user(customer))

        assert response.status_code == 403

    def test_reschedule_once(self, client, customer, court):
        created = client.post("/api/v1/bookings", json=booking_payload(court), headers=as_user(customer)).json()
        new_time = {"start_time": "2024-06-04T10:00:00", "end_time": "2024-06-04T11:00:00"}

        moved = client.post(
            f"/api/v1/bookings/{created['id']}/reschedule", json=new_time, headers=as_user(customer)
        )

        assert moved.status_code == 201
        assert moved.json()["rescheduled_from_id"] == created["id"]
        assert moved.json()["status"] == "CONFIRMED"

        again = client.post(
            f"/api/v1/bookings/{created['id']}/reschedule", json=new_time, headers=as_user(customer)
        )
        assert again.status_code == 409
        assert again.json()["detail"]["code"] == "STATE"


class TestAvailabilityRoutes:
    def test_day_availability(self, client, customer, court):
        client.post("/api/v1/bookings", json=booking_payload(court), headers=as_user(customer))

        response = client.get(f"/api/v1/courts/{court.id}/availability", params={"date": "2024-06-03"})

        assert response.status_code == 200
        body = response.json()
        assert body["is_closed"] is False
        assert len(body["bookings"]) == 1

    def test_slots(self, client, customer, court):
        client.post("/api/v1/bookings", json=booking_payload(court), headers=as_user(customer))

        response = client.get(
            f"/api/v1/courts/{court.id}/slots", params={"date": "2024-06-03", "duration": 90}
        )

        assert response.status_code == 200
        starts = response.json()["available_starts"]
        assert "08:30" in starts
        assert "09:00" not in starts
        assert "11:00" in starts
        assert starts[-1] == "20:30"

    def test_unknown_court(self, client):
        response = client.get("/api/v1/courts/missing/slots", params={"date": "2024-06-03"})

        assert response.status_code == 404
        assert response.json()["detail"]["code"] == "NOT_FOUND"

    def test_bad_date(self, client, court):
        response = client.get(f"/api/v1/courts/{court.id}/slots", params={"date": "03/06/2024"})
        assert response.status_code == 400


class TestBlockRoutes:
    def test_create_and_delete(self, db, client, owner, court):
        response = client.post(
            "/api/v1/blocks",
            json={
                "court_id": court.id,
                "start_time": "2024-06-03T10:00:00",
                "end_time": "2024-06-03T11:00:00",
                "note": "Resurfacing",
            },
            headers=as_user(owner),
        )
        assert response.status_code == 201
        block_id = response.json()["ids"][0]
        assert response.json()["blocks"][0]["note"] == "Resurfacing"

        deleted = client.delete(f"/api/v1/blocks/{block_id}", headers=as_user(owner))

        assert deleted.status_code == 200
        assert deleted.json()["success"] is True
        assert db.get(CourtBlock, block_id) is None

    def test_series(self, client, owner, court):
        response = client.post(
            "/api/v1/blocks/series",
            json={
                "court_id": court.id,
                "start_date": "2024-08-01",
                "end_date": "2024-08-31",
                "weekdays": [1, 3],
                "start_time": "08:00",
                "end_time": "09:00",
            },
            headers=as_user(owner),
        )

        assert response.status_code == 201
        assert len(response.json()["ids"]) == 8

    def test_customer_cannot_block(self, client, customer, court):
        response = client.post(
            "/api/v1/blocks",
            json={"court_id": court.id, "start_time": "2024-06-03T10:00:00", "end_time": "2024-06-03T11:00:00"},
            headers=as_user(customer),
        )

        assert response.status_code == 403
        assert response.json()["detail"]["code"] == "PERMISSION"


class TestMonthlyPassRoutes:
    def test_request_and_confirm(self, client, owner, customer, court):
        response = client.post(
            "/api/v1/monthly-passes",
            json={
                "court_id": court.id,
                "month": "2024-06",
                "weekday": 1,
                "start_time": "18:00",
                "end_time": "19:00",
            },
            headers=as_user(customer),
        )
        assert response.status_code == 201
        assert response.json()["status"] == "PENDING"

        confirmed = client.post(
            f"/api/v1/monthly-passes/{response.json()['id']}/confirm", headers=as_user(owner)
        )

        assert confirmed.status_code == 200
        assert confirmed.json()["status"] == "ACTIVE"

    def test_closed_request_window(self, client, customer, court):
        response = client.post(
            "/api/v1/monthly-passes",
            json={
                "court_id": court.id,
                "month": "2024-07",
                "weekday": 1,
                "start_time": "18:00",
                "end_time": "19:00",
            },
            headers=as_user(customer),
        )

        assert response.status_code == 422
        assert response.json()["detail"]["code"] == "REQUEST_WINDOW"
        assert response.json()["detail"]["details"]["opens_on"] == "2024-06-17"


class TestHolidayRoutes:
    def test_upsert_list_delete(self, client, owner, establishment):
        created = client.put(
            "/api/v1/establishments/me/holidays",
            json={"date": "2024-12-25", "is_open": False, "note": "Christmas"},
            headers=as_user(owner),
        )
        assert created.status_code == 200
        holiday_id = created.json()["id"]

        listed = client.get(
            "/api/v1/establishments/me/holidays",
            params={"start": "2024-12-01", "end": "2024-12-31"},
            headers=as_user(owner),
        )
        assert [h["id"] for h in listed.json()] == [holiday_id]

        deleted = client.delete(f"/api/v1/establishments/me/holidays/{holiday_id}", headers=as_user(owner))
        assert deleted.status_code == 200

    def test_holiday_closes_the_slot_grid(self, client, owner, court):
        client.put(
            "/api/v1/establishments/me/holidays",
            json={"date": "2024-06-03", "is_open": False},
            headers=as_user(owner),
        )

        body = client.get(f"/api/v1/courts/{court.id}/slots", params={"date": "2024-06-03"}).json()

        assert body["is_closed"] is True
        assert body["available_starts"] == []


class TestAlertRoutes:
    def test_alert_on_free_time(self, client, customer, court):
        response = client.post(
            "/api/v1/availability-alerts",
            json={"court_id": court.id, "date": "2024-06-03", "start_time": "10:00"},
            headers=as_user(customer),
        )

        assert response.status_code == 422
        assert response.json()["detail"]["code"] == "ALREADY_AVAILABLE"

    def test_alert_on_taken_time(self, client, customer, other_customer, court):
        client.post("/api/v1/bookings", json=booking_payload(court), headers=as_user(other_customer))

        response = client.post(
            "/api/v1/availability-alerts",
            json={"court_id": court.id, "date": "2024-06-03", "start_time": "10:00", "duration_minutes": 60},
            headers=as_user(customer),
        )

        assert response.status_code == 201
        assert response.json()["is_active"] is True
        assert response.json()["end_time"].startswith("2024-06-03T11:00")


class TestHealth:
    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
        assert response.json()["database"] is True

    def test_health_timestamp_is_recent(self, client):
        timestamp = client.get("/health").json()["timestamp"]
        assert datetime.fromisoformat(timestamp.replace("Z", "+00:00")).year >= 2024
