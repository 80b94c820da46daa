"""Centralized pricing calculations for bookings."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

from ..core.exceptions import ValidationException

LONG_BOOKING_MINUTES = 90


def _round_half_up(value: Decimal) -> int:
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def compute_total_price_cents(
    price_per_hour_cents: int,
    duration_minutes: int,
    discount_percent_over_90min: int = 0,
) -> int:
    """
    Price of one occurrence in cents.

    The hourly rate is prorated by the minute and rounded half-up; bookings
    of 90 minutes or more get the court's long-booking discount, rounded
    again.
    """
    if duration_minutes <= 0:
        raise ValidationException("Duration must be positive", details={"duration_minutes": duration_minutes})
    base = _round_half_up(Decimal(price_per_hour_cents or 0) * duration_minutes / 60)
    discount = discount_percent_over_90min if duration_minutes >= LONG_BOOKING_MINUTES else 0
    if not discount:
        return base
    return _round_half_up(Decimal(base) * (100 - discount) / 100)


class PricingService:
    """Compute occurrence prices for a court."""

    def __init__(self, price_per_hour_cents: int, discount_percent_over_90min: int = 0):
        self.price_per_hour_cents = price_per_hour_cents or 0
        self.discount_percent_over_90min = discount_percent_over_90min or 0

    @classmethod
    def for_court(cls, court) -> "PricingService":
        return cls(court.price_per_hour_cents, court.discount_percent_over_90min)

    def price_for(self, duration_minutes: int, covered_by_pass: bool = False) -> int:
        """Occurrences inside a month the customer holds an ACTIVE pass for are free."""
        if covered_by_pass:
            return 0
        return compute_total_price_cents(
            self.price_per_hour_cents, duration_minutes, self.discount_percent_over_90min
        )
