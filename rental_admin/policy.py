"""Cancellation fee policy.

Fee as a share of the booking price, by time left until pickup:
- pickup already passed (no-show): 100%
- less than 1 day before pickup: 50%
- 1 to 7 days before pickup: 20%
- 7 days or more: free
"""

from __future__ import annotations

from datetime import date, datetime, time, timezone
from decimal import ROUND_HALF_UP, Decimal

CENTS = Decimal("0.01")
SECONDS_PER_DAY = 24 * 60 * 60

# (minimum days before pickup, fee share), evaluated top-down, first match wins
FEE_TIERS: list[tuple[float, Decimal]] = [
    (7, Decimal("0")),
    (1, Decimal("0.20")),
    (0, Decimal("0.50")),
]
NO_SHOW_SHARE = Decimal("1")


def to_utc(dt: datetime) -> datetime:
    """Ensure a datetime is UTC-aware, handling both aware and naive inputs."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def pickup_timestamp(pickup_date: date) -> datetime:
    """Bookings store the pickup day only; the fee clock starts at its midnight UTC."""
    return datetime.combine(pickup_date, time.min, tzinfo=timezone.utc)


def days_before_pickup(pickup_at: datetime, now: datetime) -> float:
    """Fractional days from `now` until pickup; negative once pickup has passed."""
    return (to_utc(pickup_at) - to_utc(now)).total_seconds() / SECONDS_PER_DAY


def fee_share(days_before: float) -> Decimal:
    if days_before < 0:
        return NO_SHOW_SHARE
    for min_days, share in FEE_TIERS:
        if days_before >= min_days:
            return share
    return NO_SHOW_SHARE


def compute_cancellation_fee(
    pickup_at: datetime,
    price: Decimal,
    now: datetime,
) -> Decimal:
    """
    Return the fee charged for cancelling a booking priced `price` at `now`.

    `now` is always passed in so the result only depends on its arguments.
    """
    price = Decimal(price)
    if price < 0:
        raise ValueError("price must be non-negative")
    share = fee_share(days_before_pickup(pickup_at, now))
    return (price * share).quantize(CENTS, rounding=ROUND_HALF_UP)
