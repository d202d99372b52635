from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import Field

from .base import CamelModel


class BookingOption(CamelModel):
    id: Optional[str] = None
    type: Optional[str] = None
    label: Optional[str] = None
    price: float = Field(0, ge=0)
    original_price: Optional[float] = None
    description: Optional[str] = None
    duration: Optional[str] = None


class AddOn(CamelModel):
    id: str
    name: str
    description: Optional[str] = None
    price: float = Field(0, ge=0, le=99999)
    category: Optional[str] = None
    per_guest: bool = False


class TimeSlot(CamelModel):
    time: str = Field(..., pattern=r"^([01]\d|2[0-3]):[0-5]\d$")
    capacity: int = Field(10, ge=1, le=1000)


class TourResponse(CamelModel):
    id: str
    tenant_id: str
    title: str
    slug: str
    description: Optional[str] = None
    price: float
    discount_price: Optional[float] = None
    original_price: Optional[float] = None
    duration: Optional[str] = None
    image: Optional[str] = None
    location: Optional[str] = None
    meeting_point: Optional[str] = None
    max_group_size: Optional[int] = None
    category_ids: List[str] = Field(default_factory=list)
    rating: float = 0
    review_count: int = 0
    is_featured: bool = False
    booking_options: List[Dict[str, Any]] = Field(default_factory=list)
    add_ons: List[Dict[str, Any]] = Field(default_factory=list)
    availability: Optional[Dict[str, Any]] = None
    created_at: Optional[datetime] = None


class TourSummary(CamelModel):
    id: str
    title: str
    slug: str
    image: Optional[str] = None


class BookingOptionsResponse(CamelModel):
    tour_id: str
    options: List[BookingOption]
    add_ons: List[AddOn]
