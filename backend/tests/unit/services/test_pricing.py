"""Server-side pricing and the cancellation refund policy."""

from datetime import datetime, timedelta, timezone

import pytest

from tourhub.services.pricing import (
    add_ons_total,
    base_price,
    cancellation_refund,
    item_subtotal,
    item_total,
    price_cart,
    prorate_discount,
    service_fee_and_tax,
)

NOW = datetime(2026, 5, 1, 12, 0, tzinfo=timezone.utc)


class TestBasePrice:
    def test_option_price_wins(self):
        assert base_price(150, 80, 100) == 150.0

    def test_falls_back_to_discount_then_price(self):
        assert base_price(None, 80, 100) == 80.0
        assert base_price(0, None, 100) == 100.0

    def test_ignores_garbage(self):
        assert base_price("abc", None, "95.5") == 95.5
        assert base_price(None, None, None) == 0.0


class TestSubtotals:
    def test_children_pay_the_child_ratio(self):
        assert item_subtotal(100, adults=2, children=1, child_ratio=0.5) == 250.0

    def test_default_child_ratio_is_half(self):
        assert item_subtotal(100, adults=1, children=2) == 200.0

    def test_per_guest_add_ons_scale_with_paying_guests(self):
        add_ons = [
            {"price": 20, "per_guest": True, "quantity": 1},
            {"price": 15, "per_guest": False, "quantity": 2},
            {"price": 99, "per_guest": False, "quantity": 0},
        ]
        assert add_ons_total(add_ons, adults=2, children=1) == 90.0
        assert item_subtotal(100, 2, 1, add_ons, child_ratio=0.5) == 340.0

    def test_fee_and_tax(self):
        fee, tax = service_fee_and_tax(200.0)
        assert fee == pytest.approx(6.0)
        assert tax == pytest.approx(10.0)

    def test_item_total_never_negative(self):
        assert item_total(100.0) == 108.0
        assert item_total(100.0, discount_share=8.0) == 100.0
        assert item_total(10.0, discount_share=50.0) == 0.0


class TestProrateDiscount:
    def test_single_item_takes_everything(self):
        assert prorate_discount([120.0], 12.345) == [12.35]

    def test_split_by_share(self):
        assert prorate_discount([100.0, 300.0], 40.0) == [10.0, 30.0]

    def test_zero_subtotal(self):
        assert prorate_discount([0.0, 0.0], 10.0) == [0.0, 0.0]

    def test_empty_cart(self):
        assert prorate_discount([], 10.0) == []


class TestPriceCart:
    def test_breakdown(self):
        pricing = price_cart([200.0, 50.0], discount=25.0, currency="usd")
        assert pricing.subtotal == 250.0
        assert pricing.service_fee == 7.5
        assert pricing.tax == 12.5
        assert pricing.discount == 25.0
        assert pricing.total == 245.0
        assert pricing.currency == "USD"

    def test_discount_is_clamped_to_subtotal(self):
        pricing = price_cart([40.0], discount=100.0)
        assert pricing.discount == 40.0
        assert pricing.total == pytest.approx(3.2)

    def test_negative_discount_is_ignored(self):
        assert price_cart([40.0], discount=-5.0).discount == 0.0

    def test_to_dict_uses_camel_case(self):
        assert set(price_cart([10.0]).to_dict()) == {"subtotal", "serviceFee", "tax", "discount", "total", "currency"}


class TestCancellationRefund:
    @pytest.mark.parametrize(
        "delta,expected_pct",
        [
            (timedelta(days=10), 100),
            (timedelta(days=7), 100),
            # 6 days and 1 hour rounds up to 7
            (timedelta(days=6, hours=1), 100),
            (timedelta(days=6), 50),
            (timedelta(days=3), 50),
            (timedelta(days=2), 0),
            (timedelta(days=-1), 0),
        ],
    )
    def test_policy(self, delta, expected_pct):
        amount, pct = cancellation_refund(200.0, NOW + delta, NOW)
        assert pct == expected_pct
        assert amount == 200.0 * expected_pct / 100

    def test_naive_tour_date_is_treated_as_utc(self):
        naive = (NOW + timedelta(days=8)).replace(tzinfo=None)
        assert cancellation_refund(99.99, naive, NOW) == (99.99, 100)

    def test_half_refund_is_rounded(self):
        assert cancellation_refund(99.99, NOW + timedelta(days=4), NOW) == (50.0, 50)
