"""
Unit tests for the slot grid builder.
"""

from datetime import date, datetime

import pytest

from courtside.core.exceptions import ValidationException
from courtside.domain.scheduling import Interval
from courtside.services.calendar_resolver import DayCalendar
from courtside.services.slot_grid import build_slot_grid

DAY = date(2024, 6, 3)


def at(hour: int, minute: int = 0) -> datetime:
    return datetime(2024, 6, 3, hour, minute)


@pytest.fixture
def morning():
    return DayCalendar(date=DAY, is_closed=False, opening_time="08:00", closing_time="12:00")


class TestBuildSlotGrid:
    def test_empty_day_lists_every_start_that_fits(self, morning):
        grid = build_slot_grid(morning, 60, bookings=[], blocks=[])
        assert grid.available_starts == ["08:00", "08:30", "09:00", "09:30", "10:00", "10:30", "11:00"]

    def test_booking_removes_overlapping_starts(self, morning):
        grid = build_slot_grid(morning, 60, bookings=[Interval(at(9), at(10))], blocks=[])
        assert grid.available_starts == ["08:00", "10:00", "10:30", "11:00"]

    def test_buffer_pads_bookings(self, morning):
        grid = build_slot_grid(
            morning, 60, bookings=[Interval(at(9), at(10))], blocks=[], buffer_minutes=30
        )
        assert grid.available_starts == ["10:30", "11:00"]

    def test_blocks_are_never_padded(self, morning):
        grid = build_slot_grid(
            morning, 60, bookings=[], blocks=[Interval(at(9), at(10))], buffer_minutes=30
        )
        assert grid.available_starts == ["08:00", "10:00", "10:30", "11:00"]

    def test_buffer_never_adds_starts(self, morning):
        """Raising the buffer only ever removes candidates."""
        bookings = [Interval(at(8, 30), at(9, 30)), Interval(at(10, 30), at(11))]
        previous = None
        for buffer_minutes in (0, 30, 60, 90):
            starts = set(
                build_slot_grid(morning, 30, bookings=bookings, blocks=[], buffer_minutes=buffer_minutes).available_starts
            )
            if previous is not None:
                assert starts <= previous
            previous = starts

    def test_starts_not_after_now_are_dropped(self, morning):
        grid = build_slot_grid(morning, 60, bookings=[], blocks=[], now=at(9))
        assert grid.available_starts == ["09:30", "10:00", "10:30", "11:00"]

    def test_closed_day_has_no_starts(self):
        closed = DayCalendar(date=DAY, is_closed=True, opening_time="08:00", closing_time="12:00")
        grid = build_slot_grid(closed, 60, bookings=[], blocks=[])
        assert grid.available_starts == []
        assert grid.to_dict()["is_closed"] is True

    def test_duration_longer_than_window(self, morning):
        assert build_slot_grid(morning, 300, bookings=[], blocks=[]).available_starts == []

    @pytest.mark.parametrize("duration", [0, -30, 45])
    def test_rejects_durations_off_the_grid(self, morning, duration):
        with pytest.raises(ValidationException):
            build_slot_grid(morning, duration, bookings=[], blocks=[])

    def test_to_dict_includes_calendar_fields(self, morning):
        payload = build_slot_grid(morning, 120, bookings=[], blocks=[]).to_dict()
        assert payload["date"] == "2024-06-03"
        assert payload["duration_minutes"] == 120
        assert payload["available_starts"] == ["08:00", "08:30", "09:00", "09:30", "10:00"]
