"""Pure scheduling primitives: no database, no clock."""

from .scheduling import (
    Interval,
    RecurringWeeklyReservation,
    assert_half_hour_aligned,
    combine,
    format_hhmm,
    is_half_hour_aligned,
    iter_dates,
    js_weekday,
    month_key,
    parse_hhmm,
    parse_iso_datetime,
    parse_month,
    parse_ymd,
    weekday_dates_in_month,
)

__all__ = [
    "Interval",
    "RecurringWeeklyReservation",
    "assert_half_hour_aligned",
    "combine",
    "format_hhmm",
    "is_half_hour_aligned",
    "iter_dates",
    "js_weekday",
    "month_key",
    "parse_hhmm",
    "parse_iso_datetime",
    "parse_month",
    "parse_ymd",
    "weekday_dates_in_month",
]
