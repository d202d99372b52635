"""Computed properties on models; no database needed."""

from datetime import date

import pytest

from tourhub.core.enums import AdminPermission, AdminRole, AvailabilityStatus, get_default_permissions
from tourhub.models.availability import Availability
from tourhub.models.booking import Booking
from tourhub.models.stop_sale import StopSale
from tourhub.models.tour import Tour
from tourhub.models.user import User


def _availability(slots, stop_sale=False) -> Availability:
    return Availability(tour_id="t", tenant_id="default", date=date(2026, 5, 1), slots=slots, stop_sale=stop_sale)


class TestAvailabilityCapacity:
    def test_capacity_includes_extra_and_blocked_slots(self):
        row = _availability(
            [
                {"time": "09:00", "capacity": 10, "booked": 4, "extra_capacity": 2},
                {"time": "14:00", "capacity": 5, "booked": 1, "blocked": True},
            ]
        )
        assert row.total_capacity == 17
        # Blocked slots sell nothing and their bookings are not counted
        assert row.booked == 4
        assert row.available == 8

    def test_missing_capacity_defaults_to_ten(self):
        assert _availability([{"time": "09:00"}]).total_capacity == 10

    @pytest.mark.parametrize(
        "slots,stop_sale,expected",
        [
            ([{"time": "09:00", "capacity": 10, "booked": 0}], True, AvailabilityStatus.BLOCKED.value),
            ([{"time": "09:00", "capacity": 10, "booked": 10}], False, AvailabilityStatus.SOLD_OUT.value),
            ([{"time": "09:00", "capacity": 10, "booked": 8}], False, AvailabilityStatus.LIMITED.value),
            ([{"time": "09:00", "capacity": 10, "booked": 7}], False, AvailabilityStatus.AVAILABLE.value),
            ([], False, AvailabilityStatus.SOLD_OUT.value),
        ],
    )
    def test_status(self, slots, stop_sale, expected):
        assert _availability(slots, stop_sale).get_availability_status() == expected


class TestTourOptions:
    def test_get_option_by_id_then_type(self):
        tour = Tour(
            booking_options=[
                {"id": "a1", "type": "standard", "price": 100},
                {"id": "b2", "type": "private", "price": 150},
            ]
        )
        assert tour.get_option("b2")["type"] == "private"
        assert tour.get_option("standard")["id"] == "a1"
        assert tour.get_option("vip") is None
        assert tour.get_option(None) is None

    def test_display_price_prefers_discount(self):
        assert Tour(price=100, discount_price=80).display_price == 80.0
        assert Tour(price=100, discount_price=None).display_price == 100.0


class TestBookingProperties:
    def test_guest_breakdown(self):
        booking = Booking(adult_guests=2, child_guests=1, infant_guests=0)
        assert booking.guest_breakdown == "2 adults, 1 child"
        assert Booking(adult_guests=1, child_guests=0, infant_guests=2).guest_breakdown == "1 adult, 2 infants"

    def test_is_cancelled(self):
        assert Booking(status="Cancelled").is_cancelled
        assert not Booking(status="Confirmed").is_cancelled


class TestUserPermissions:
    def test_role_defaults_when_none_stored(self):
        user = User(role=AdminRole.OPERATIONS.value, permissions=[])
        assert AdminPermission.MANAGE_BOOKINGS.value in user.effective_permissions
        assert AdminPermission.MANAGE_DISCOUNTS.value not in user.effective_permissions

    def test_stored_permissions_win(self):
        user = User(role=AdminRole.ADMIN.value, permissions=["viewReports"])
        assert user.effective_permissions == ["viewReports"]

    def test_staff_flags(self):
        assert not User(role=AdminRole.CUSTOMER.value).is_staff
        assert User(role=AdminRole.VIEWER.value).is_staff
        assert User(role=AdminRole.SUPER_ADMIN.value).is_super_admin

    def test_unknown_role_has_no_permissions(self):
        assert get_default_permissions("pilot") == []

    def test_name(self):
        assert User(first_name="Jane", last_name="Doe").name == "Jane Doe"
        assert User(first_name="Jane", last_name="").name == "Jane"


def test_stop_sale_without_options_covers_all():
    assert StopSale(option_ids=[]).covers_all_options
    assert not StopSale(option_ids=["a1"]).covers_all_options

