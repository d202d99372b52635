from datetime import date, datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import Field

from .base import CamelModel, Pagination


class Slot(CamelModel):
    time: str = Field(..., pattern=r"^([01]\d|2[0-3]):[0-5]\d$")
    capacity: int = Field(10, ge=0, le=1000)
    booked: int = Field(0, ge=0)
    blocked: bool = False
    price: Optional[float] = Field(None, ge=0)
    extra_capacity: int = Field(0, ge=0)


class AvailabilityUpsert(CamelModel):
    tour_id: Optional[str] = None
    date: Optional[str] = None
    tenant_id: Optional[str] = None
    slots: Optional[List[Slot]] = None
    stop_sale: Optional[bool] = None
    stop_sale_reason: Optional[str] = Field(None, max_length=500)
    notes: Optional[str] = None


class AvailabilityBulkAction(CamelModel):
    tour_id: Optional[str] = None
    tenant_id: Optional[str] = None
    dates: List[str] = Field(default_factory=list)
    action: Literal["block", "unblock", "updateSlots", "setStopSale"]
    slots: Optional[List[Slot]] = None
    stop_sale: Optional[bool] = None
    stop_sale_reason: Optional[str] = Field(None, max_length=500)


class AvailabilityResponse(CamelModel):
    id: str
    tour_id: str
    tenant_id: str
    date: date
    slots: List[Dict[str, Any]]
    stop_sale: bool
    stop_sale_reason: Optional[str] = None
    notes: Optional[str] = None
    total_capacity: int
    booked: int
    available: int
    status: str


class AvailabilityMonthResponse(CamelModel):
    tour_id: str
    month: int
    year: int
    days: List[AvailabilityResponse]


class BulkResult(CamelModel):
    modified: int
    upserted: int


class StopSaleRequest(CamelModel):
    tour_id: Optional[str] = None
    tenant_id: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    option_ids: List[str] = Field(default_factory=list)
    reason: Optional[str] = Field(None, max_length=500)


class StopSaleUpsertResult(CamelModel):
    upserted: int
    modified: int
    matched: int


class StopSaleDeleteResult(CamelModel):
    deleted: int


class StopSaleLogResponse(CamelModel):
    id: str
    tenant_id: str
    tour_id: str
    tour_title: Optional[str] = None
    option_id: Optional[str] = None
    option_title: Optional[str] = None
    date_from: date
    date_to: date
    reason: Optional[str] = None
    applied_by: Optional[str] = None
    applied_at: datetime
    status: str
    removed_by: Optional[str] = None
    removed_at: Optional[datetime] = None


class StopSaleLogPage(CamelModel):
    logs: List[StopSaleLogResponse]
    pagination: Pagination


class StopSaleDay(CamelModel):
    date: str
    status: Literal["none", "partial", "full"]
    stopped_option_ids: List[str] = Field(default_factory=list)
    reasons: Dict[str, str] = Field(default_factory=dict)
