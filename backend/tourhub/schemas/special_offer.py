from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import Field

from ..core.enums import OfferType
from .base import CamelModel


class TourOptionSelection(CamelModel):
    tour_id: str
    selected_options: List[str] = Field(default_factory=list)
    all_options: bool = True


class SpecialOfferFields(CamelModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    type: OfferType
    discount_value: float = Field(..., ge=0)
    code: Optional[str] = Field(None, max_length=64)
    min_days_in_advance: Optional[int] = Field(7, ge=0)
    max_days_before_tour: Optional[int] = Field(2, ge=0)
    min_booking_value: Optional[float] = Field(None, ge=0)
    max_discount: Optional[float] = Field(None, ge=0)
    min_group_size: Optional[int] = Field(2, ge=2)
    start_date: datetime
    end_date: datetime
    travel_start_date: Optional[datetime] = None
    travel_end_date: Optional[datetime] = None
    applicable_tours: List[str] = Field(default_factory=list)
    tour_option_selections: List[TourOptionSelection] = Field(default_factory=list)
    applicable_categories: List[str] = Field(default_factory=list)
    excluded_tours: List[str] = Field(default_factory=list)
    usage_limit: Optional[int] = Field(None, ge=0)
    per_user_limit: Optional[int] = Field(1, ge=1)
    is_active: bool = True
    is_featured: bool = False
    featured_badge_text: Optional[str] = Field("Special Offer", max_length=50)
    priority: int = 0
    terms: List[str] = Field(default_factory=list)


class SpecialOfferCreate(SpecialOfferFields):
    tenant_id: str = Field(..., min_length=1)


class SpecialOfferUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    type: Optional[OfferType] = None
    discount_value: Optional[float] = Field(None, ge=0)
    code: Optional[str] = Field(None, max_length=64)
    min_days_in_advance: Optional[int] = Field(None, ge=0)
    max_days_before_tour: Optional[int] = Field(None, ge=0)
    min_booking_value: Optional[float] = Field(None, ge=0)
    max_discount: Optional[float] = Field(None, ge=0)
    min_group_size: Optional[int] = Field(None, ge=2)
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    travel_start_date: Optional[datetime] = None
    travel_end_date: Optional[datetime] = None
    applicable_tours: Optional[List[str]] = None
    tour_option_selections: Optional[List[TourOptionSelection]] = None
    applicable_categories: Optional[List[str]] = None
    excluded_tours: Optional[List[str]] = None
    usage_limit: Optional[int] = Field(None, ge=0)
    per_user_limit: Optional[int] = Field(None, ge=1)
    is_active: Optional[bool] = None
    is_featured: Optional[bool] = None
    featured_badge_text: Optional[str] = Field(None, max_length=50)
    priority: Optional[int] = None
    terms: Optional[List[str]] = None


class SpecialOfferResponse(SpecialOfferFields):
    id: str
    tenant_id: str
    type: str
    tour_option_selections: List[Dict[str, Any]] = Field(default_factory=list)
    used_count: int = 0
    created_at: Optional[datetime] = None


class OfferBadge(CamelModel):
    id: str
    name: str
    type: str
    discount_value: float
    display_text: str
    badge_color: Dict[str, str]
    is_featured: bool = False
    featured_badge_text: Optional[str] = None
    time_remaining: str
    show_urgency: bool
    end_date: datetime


class TourOfferSummary(CamelModel):
    tour_id: str
    has_offer: bool = False
    offer_count: int = 0
    best_offer: Optional[OfferBadge] = None


class OfferBatchRequest(CamelModel):
    tour_ids: Optional[List[str]] = None
    tenant_id: Optional[str] = None


class TourOffersResponse(CamelModel):
    tour_id: str
    original_price: float
    offers: List[Dict[str, Any]]
    best_offer: Optional[Dict[str, Any]] = None
    has_offers: bool
    offer_count: int
