"""
Unit tests for the scheduling primitives: parsing, alignment, intervals and
weekly reservations.
"""

from datetime import date, datetime, timezone

import pytest

from courtside.core.exceptions import ValidationException
from courtside.core.timezone_utils import to_local_naive
from courtside.domain.scheduling import (
    Interval,
    RecurringWeeklyReservation,
    format_hhmm,
    hhmm_to_minutes,
    is_half_hour_aligned,
    js_weekday,
    next_month_first_day,
    parse_hhmm,
    parse_iso_datetime,
    parse_month,
    parse_ymd,
    weekday_dates_in_month,
)


def at(hour: int, minute: int = 0, day: int = 3) -> datetime:
    return datetime(2024, 6, day, hour, minute)


class TestParsing:
    def test_parse_hhmm_accepts_valid_times(self):
        """HH:MM strings parse into times and minutes since midnight."""
        assert parse_hhmm("07:30").hour == 7
        assert hhmm_to_minutes("19:30") == 19 * 60 + 30
        assert format_hhmm(parse_hhmm("00:00")) == "00:00"

    @pytest.mark.parametrize("value", ["7:30", "24:00", "12:60", "", "noon"])
    def test_parse_hhmm_rejects_malformed_times(self, value):
        with pytest.raises(ValidationException) as exc_info:
            parse_hhmm(value, "start_time")
        assert exc_info.value.code == "VALIDATION"
        assert exc_info.value.details["field"] == "start_time"

    def test_parse_ymd_rejects_impossible_dates(self):
        """Well-formed strings naming a non-existent day are still invalid."""
        assert parse_ymd("2024-02-29") == date(2024, 2, 29)
        with pytest.raises(ValidationException):
            parse_ymd("2023-02-29")
        with pytest.raises(ValidationException):
            parse_ymd("03/06/2024")

    def test_parse_month(self):
        assert parse_month("2024-07") == (2024, 7)
        with pytest.raises(ValidationException):
            parse_month("2024-13")
        with pytest.raises(ValidationException):
            parse_month("2024-7")

    def test_parse_iso_datetime_keeps_naive_values(self):
        assert parse_iso_datetime("2024-06-03T10:00:00") == at(10)

    def test_parse_iso_datetime_rejects_garbage(self):
        with pytest.raises(ValidationException):
            parse_iso_datetime("tomorrow at ten", "start_time")

    def test_aware_values_convert_to_establishment_wall_clock(self):
        """UTC 13:00 is 10:00 in Sao Paulo (UTC-3, no DST in 2024)."""
        aware = datetime(2024, 6, 3, 13, 0, tzinfo=timezone.utc)
        assert to_local_naive(aware, "America/Sao_Paulo") == at(10)


class TestCalendarHelpers:
    def test_js_weekday_starts_on_sunday(self):
        assert js_weekday(date(2024, 6, 2)) == 0  # Sunday
        assert js_weekday(date(2024, 6, 3)) == 1  # Monday
        assert js_weekday(date(2024, 6, 8)) == 6  # Saturday

    def test_weekday_dates_in_month(self):
        """July 2024 has five Mondays."""
        mondays = weekday_dates_in_month("2024-07", 1)
        assert [d.day for d in mondays] == [1, 8, 15, 22, 29]

    def test_next_month_rolls_over_the_year(self):
        assert next_month_first_day(date(2024, 12, 15)) == date(2025, 1, 1)
        assert next_month_first_day(date(2024, 6, 10)) == date(2024, 7, 1)


class TestInterval:
    def test_touching_intervals_do_not_overlap(self):
        first = Interval(at(10), at(11))
        second = Interval(at(11), at(12))
        assert not first.overlaps(second)
        assert not second.overlaps(first)

    def test_partial_overlap_is_symmetric(self):
        first = Interval(at(10), at(11))
        second = Interval(at(10, 30), at(11, 30))
        assert first.overlaps(second)
        assert second.overlaps(first)

    def test_padding_widens_both_ends(self):
        padded = Interval(at(10), at(11)).padded(30)
        assert padded == Interval(at(9, 30), at(11, 30))
        assert Interval(at(10), at(11)).padded(0) == Interval(at(10), at(11))

    def test_validated_rejects_empty_and_reversed_ranges(self):
        with pytest.raises(ValidationException):
            Interval.validated(at(10), at(10))
        with pytest.raises(ValidationException):
            Interval.validated(at(11), at(10))

    def test_validated_rejects_misaligned_times(self):
        """Only :00 and :30 are admissible."""
        assert is_half_hour_aligned(at(10, 30))
        assert not is_half_hour_aligned(at(10, 15))
        with pytest.raises(ValidationException) as exc_info:
            Interval.validated(at(10, 15), at(11))
        assert exc_info.value.details["field"] == "start_time"

    def test_weekly_occurrences(self):
        occurrences = Interval(at(10), at(11)).weekly_occurrences(3)
        assert [o.start.day for o in occurrences] == [3, 10, 17, 24]
        assert all(o.duration_minutes == 60 for o in occurrences)

    def test_str_is_human_readable(self):
        assert str(Interval(at(10), at(11, 30))) == "2024-06-03 10:00-11:30"


class TestRecurringWeeklyReservation:
    def test_occurrences_cover_every_matching_weekday(self):
        reservation = RecurringWeeklyReservation("court", "2024-07", 1, "18:00", "19:00")
        occurrences = reservation.occurrences_in_month()
        assert len(occurrences) == 5
        assert occurrences[0] == Interval(datetime(2024, 7, 1, 18), datetime(2024, 7, 1, 19))
        assert reservation.first_occurrence() == occurrences[0]

    def test_rejects_invalid_patterns(self):
        with pytest.raises(ValidationException):
            RecurringWeeklyReservation("court", "2024-07", 7, "18:00", "19:00")
        with pytest.raises(ValidationException):
            RecurringWeeklyReservation("court", "2024-07", 1, "19:00", "18:00")

    def test_weekly_overlap_compares_weekday_and_time_of_day(self):
        base = RecurringWeeklyReservation("court", "2024-07", 1, "18:00", "19:00")
        assert base.overlaps_weekly(RecurringWeeklyReservation("court", "2024-07", 1, "18:30", "19:30"))
        assert not base.overlaps_weekly(RecurringWeeklyReservation("court", "2024-07", 1, "19:00", "20:00"))
        assert not base.overlaps_weekly(RecurringWeeklyReservation("court", "2024-07", 2, "18:00", "19:00"))
