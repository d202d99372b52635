# backend/tourhub/services/discount_service.py
"""
Discount (coupon) codes.

Codes are stored upper-cased and unique per tenant. ``verify_code`` runs
the checks in a fixed order so customers see the most relevant error.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional

from sqlalchemy.orm import Session

from ..core.enums import DiscountType
from ..core.exceptions import ConflictException, InvalidCouponException, NotFoundException, ValidationException
from ..models.discount import Discount
from ..repositories.factory import RepositoryFactory
from ..utils.money import round_money
from ..utils.time_utils import ensure_utc
from .base import BaseService

EDITABLE_FIELDS = ("code", "discount_type", "value", "is_active", "expires_at", "usage_limit")


def apply_discount(subtotal: float, discount_type: str, value: float) -> float:
    """Amount taken off ``subtotal``; fixed discounts never exceed it."""
    if subtotal <= 0 or not value:
        return 0.0
    if discount_type == DiscountType.PERCENTAGE.value:
        return round_money(subtotal * float(value) / 100)
    return round_money(min(float(value), subtotal))


class DiscountService(BaseService):
    def __init__(self, db: Session, cache=None):
        super().__init__(db, cache)
        self.repository = RepositoryFactory.create_discount_repository(db)

    def get_valid_discount(self, tenant_id: str, code: Optional[str], now: Optional[datetime] = None) -> Discount:
        if not code or not code.strip():
            raise ValidationException("Coupon code is required", code="COUPON_REQUIRED")

        discount = self.repository.get_by_code(tenant_id, code)
        if discount is None:
            raise NotFoundException("Invalid coupon code", code="INVALID_COUPON")
        if not discount.is_active:
            raise InvalidCouponException("This coupon is no longer active", code="COUPON_INACTIVE")

        moment = now or datetime.now(timezone.utc)
        if discount.expires_at is not None and ensure_utc(discount.expires_at) < moment:
            raise InvalidCouponException("This coupon has expired", code="COUPON_EXPIRED")
        if discount.usage_limit and (discount.times_used or 0) >= discount.usage_limit:
            raise InvalidCouponException("This coupon has reached its usage limit", code="COUPON_EXHAUSTED")
        return discount

    @BaseService.measure_operation("verify_discount_code")
    def verify_code(self, tenant_id: str, code: Optional[str]) -> Dict[str, Any]:
        discount = self.get_valid_discount(tenant_id, code)
        return {"code": discount.code, "discountType": discount.discount_type, "value": float(discount.value)}

    def discount_amount(self, tenant_id: str, code: Optional[str], subtotal: float) -> float:
        """Discount for a checkout subtotal; no code means no discount."""
        if not code:
            return 0.0
        discount = self.get_valid_discount(tenant_id, code)
        return apply_discount(subtotal, discount.discount_type, discount.value)

    def increment_usage(self, tenant_id: str, code: Optional[str]) -> bool:
        if not code:
            return False
        discount = self.repository.get_by_code(tenant_id, code)
        if discount is None:
            self.logger.warning("Discount %s not found for tenant %s when recording usage", code, tenant_id)
            return False
        self.repository.increment_usage(discount)
        return True

    # Admin

    def list_discounts(self, tenant_id: Optional[str]) -> List[Discount]:
        return self.repository.list_for_tenant(None if tenant_id == "all" else tenant_id)

    def create_discount(self, tenant_id: Optional[str], data: Mapping[str, Any]) -> Discount:
        if not tenant_id or tenant_id == "all":
            raise ValidationException("tenantId is required for creating discounts")
        values = {key: data[key] for key in EDITABLE_FIELDS if key in data}
        values["code"] = str(values.get("code") or "").strip().upper()
        if not values["code"]:
            raise ValidationException("Coupon code is required")
        if self.repository.get_by_code(tenant_id, values["code"]):
            raise ConflictException(f"Discount code {values['code']} already exists", code="DUPLICATE_CODE")

        with self.transaction():
            discount = self.repository.create(tenant_id=tenant_id, **values)
        self.log_operation("create_discount", tenant_id=tenant_id, code=discount.code)
        return discount

    def update_discount(self, discount_id: str, data: Mapping[str, Any]) -> Discount:
        discount = self.repository.get_by_id(discount_id)
        if discount is None:
            raise NotFoundException("Discount not found")
        values = {key: data[key] for key in EDITABLE_FIELDS if key in data}
        if "code" in values:
            values["code"] = str(values["code"] or "").strip().upper()
            existing = self.repository.get_by_code(discount.tenant_id, values["code"])
            if existing is not None and existing.id != discount.id:
                raise ConflictException(f"Discount code {values['code']} already exists", code="DUPLICATE_CODE")

        with self.transaction():
            self.repository.update(discount_id, **values)
        return discount

    def delete_discount(self, discount_id: str) -> None:
        with self.transaction():
            if not self.repository.delete(discount_id):
                raise NotFoundException("Discount not found")
