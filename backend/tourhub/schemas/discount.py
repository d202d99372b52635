from datetime import datetime
from typing import Optional

from pydantic import Field

from ..core.enums import DiscountType
from .base import CamelModel


class DiscountVerifyRequest(CamelModel):
    code: Optional[str] = None
    tenant_id: Optional[str] = None


class DiscountVerifyResponse(CamelModel):
    code: str
    discount_type: DiscountType
    value: float


class DiscountCreate(CamelModel):
    tenant_id: Optional[str] = None
    code: str = Field(..., min_length=1, max_length=64)
    discount_type: DiscountType = DiscountType.PERCENTAGE
    value: float = Field(..., ge=0)
    is_active: bool = True
    expires_at: Optional[datetime] = None
    usage_limit: Optional[int] = Field(None, ge=0)


class DiscountUpdate(CamelModel):
    code: Optional[str] = Field(None, min_length=1, max_length=64)
    discount_type: Optional[DiscountType] = None
    value: Optional[float] = Field(None, ge=0)
    is_active: Optional[bool] = None
    expires_at: Optional[datetime] = None
    usage_limit: Optional[int] = Field(None, ge=0)


class DiscountResponse(CamelModel):
    id: str
    tenant_id: str
    code: str
    discount_type: str
    value: float
    is_active: bool
    expires_at: Optional[datetime] = None
    usage_limit: Optional[int] = None
    times_used: int = 0
    created_at: Optional[datetime] = None
