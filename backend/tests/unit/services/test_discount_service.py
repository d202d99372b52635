from datetime import datetime, timedelta, timezone

import pytest

from tourhub.core.enums import DiscountType
from tourhub.core.exceptions import ConflictException, InvalidCouponException, NotFoundException, ValidationException
from tourhub.models.discount import Discount
from tourhub.services.discount_service import DiscountService, apply_discount


def _discount(db, **overrides) -> Discount:
    values = {
        "tenant_id": "default",
        "code": "SUMMER10",
        "discount_type": DiscountType.PERCENTAGE.value,
        "value": 10,
    }
    values.update(overrides)
    discount = Discount(**values)
    db.add(discount)
    db.commit()
    return discount


class TestApplyDiscount:
    def test_percentage(self):
        assert apply_discount(200.0, DiscountType.PERCENTAGE.value, 10) == 20.0

    def test_fixed_is_capped_at_subtotal(self):
        assert apply_discount(30.0, DiscountType.FIXED.value, 50) == 30.0
        assert apply_discount(80.0, DiscountType.FIXED.value, 25) == 25.0

    def test_nothing_to_discount(self):
        assert apply_discount(0.0, DiscountType.PERCENTAGE.value, 10) == 0.0
        assert apply_discount(100.0, DiscountType.FIXED.value, 0) == 0.0


class TestVerifyCode:
    def test_valid_code_is_case_insensitive(self, db):
        _discount(db)
        result = DiscountService(db).verify_code("default", " summer10 ")
        assert result == {"code": "SUMMER10", "discountType": "percentage", "value": 10.0}

    def test_missing_code(self, db):
        with pytest.raises(ValidationException) as exc_info:
            DiscountService(db).verify_code("default", "  ")
        assert exc_info.value.code == "COUPON_REQUIRED"

    def test_codes_are_per_tenant(self, db):
        _discount(db, tenant_id="acme")
        with pytest.raises(NotFoundException):
            DiscountService(db).verify_code("default", "SUMMER10")

    def test_inactive_is_reported_before_expiry(self, db):
        _discount(db, is_active=False, expires_at=datetime.now(timezone.utc) - timedelta(days=1))
        with pytest.raises(InvalidCouponException) as exc_info:
            DiscountService(db).verify_code("default", "SUMMER10")
        assert exc_info.value.code == "COUPON_INACTIVE"

    def test_expired(self, db):
        _discount(db, expires_at=datetime.now(timezone.utc) - timedelta(days=1), usage_limit=1, times_used=1)
        with pytest.raises(InvalidCouponException) as exc_info:
            DiscountService(db).verify_code("default", "SUMMER10")
        assert exc_info.value.code == "COUPON_EXPIRED"

    def test_usage_limit_reached(self, db):
        _discount(db, usage_limit=3, times_used=3)
        with pytest.raises(InvalidCouponException) as exc_info:
            DiscountService(db).verify_code("default", "SUMMER10")
        assert exc_info.value.code == "COUPON_EXHAUSTED"


class TestAdminDiscounts:
    def test_create_normalizes_code(self, db):
        discount = DiscountService(db).create_discount("default", {"code": " spring ", "value": 5})
        assert discount.code == "SPRING"

    def test_create_requires_concrete_tenant(self, db):
        with pytest.raises(ValidationException):
            DiscountService(db).create_discount("all", {"code": "SPRING", "value": 5})

    def test_duplicate_code(self, db):
        _discount(db)
        with pytest.raises(ConflictException):
            DiscountService(db).create_discount("default", {"code": "summer10", "value": 5})

    def test_increment_usage(self, db):
        discount = _discount(db)
        service = DiscountService(db)
        assert service.increment_usage("default", "summer10") is True
        assert service.increment_usage("default", "NOPE") is False
        db.commit()
        db.refresh(discount)
        assert discount.times_used == 1
