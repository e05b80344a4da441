"""
Tests for rental_admin/policy.py: cancellation fee tiers.
All times are explicit so nothing depends on the wall clock.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

import pytest

from rental_admin.policy import (
    compute_cancellation_fee,
    days_before_pickup,
    fee_share,
    pickup_timestamp,
    to_utc,
)

from .factories import NOW

PRICE = Decimal("1000.00")


def _fee(delta: timedelta, price: Decimal = PRICE) -> Decimal:
    return compute_cancellation_fee(NOW + delta, price, NOW)


class TestFeeTiers:
    @pytest.mark.parametrize(
        "delta, expected",
        [
            (timedelta(days=10), Decimal("0.00")),
            (timedelta(days=7), Decimal("0.00")),
            (timedelta(days=3), Decimal("200.00")),
            (timedelta(days=1), Decimal("200.00")),
            (timedelta(hours=12), Decimal("500.00")),
            (timedelta(0), Decimal("500.00")),
            (timedelta(hours=-1), Decimal("1000.00")),
            (timedelta(days=-3), Decimal("1000.00")),
        ],
    )
    def test_fee_by_time_left(self, delta, expected):
        assert _fee(delta) == expected

    def test_just_under_seven_days_is_charged(self):
        assert _fee(timedelta(days=7, seconds=-1)) == Decimal("200.00")

    def test_just_under_one_day_is_half(self):
        assert _fee(timedelta(days=1, seconds=-1)) == Decimal("500.00")

    def test_fee_never_decreases_as_pickup_approaches(self):
        deltas = [timedelta(hours=h) for h in range(24 * 10, -48, -6)]
        fees = [_fee(d) for d in deltas]
        assert fees == sorted(fees)

    def test_fee_between_zero_and_price(self):
        for hours in range(-48, 24 * 10, 5):
            fee = _fee(timedelta(hours=hours))
            assert Decimal("0") <= fee <= PRICE

    def test_zero_price_is_free(self):
        assert _fee(timedelta(days=-1), Decimal("0")) == Decimal("0.00")

    def test_rounds_half_up_to_cents(self):
        # 20% of 99.99 = 19.998
        assert _fee(timedelta(days=2), Decimal("99.99")) == Decimal("20.00")
        # 50% of 0.05 = 0.025
        assert _fee(timedelta(hours=1), Decimal("0.05")) == Decimal("0.03")

    def test_negative_price_rejected(self):
        with pytest.raises(ValueError):
            _fee(timedelta(days=2), Decimal("-1"))

    def test_same_inputs_same_fee(self):
        assert _fee(timedelta(days=3)) == _fee(timedelta(days=3))


class TestTimeHelpers:
    def test_pickup_timestamp_is_midnight_utc(self):
        ts = pickup_timestamp(date(2026, 6, 4))
        assert ts == datetime(2026, 6, 4, tzinfo=timezone.utc)

    def test_naive_datetime_treated_as_utc(self):
        naive = datetime(2026, 6, 1, 10, 0)
        assert to_utc(naive) == NOW

    def test_aware_datetime_converted_to_utc(self):
        manila = timezone(timedelta(hours=8))
        local = datetime(2026, 6, 1, 18, 0, tzinfo=manila)
        assert to_utc(local) == NOW

    def test_days_before_pickup_is_fractional(self):
        assert days_before_pickup(NOW + timedelta(hours=36), NOW) == pytest.approx(1.5)

    def test_days_before_pickup_negative_after_pickup(self):
        assert days_before_pickup(NOW - timedelta(days=2), NOW) == pytest.approx(-2)

    def test_fee_share_no_show(self):
        assert fee_share(-0.01) == Decimal("1")
