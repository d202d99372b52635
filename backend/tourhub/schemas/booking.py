from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import EmailStr, Field, field_validator

from ..core.constants import MAX_SPECIAL_REQUESTS_LENGTH
from ..core.enums import PaymentMethod, PaymentStatus
from .base import CamelModel, Pagination, StrictCamelModel


class BookingTour(CamelModel):
    id: str
    title: str
    slug: Optional[str] = None
    image: Optional[str] = None
    tenant_id: Optional[str] = None
    meeting_point: Optional[str] = None
    duration: Optional[str] = None


class BookingCustomer(CamelModel):
    id: str
    email: str
    first_name: str = ""
    last_name: str = ""
    name: str = ""
    phone: Optional[str] = None


class BookingResponse(CamelModel):
    id: str
    tenant_id: str
    booking_reference: str
    tour_id: Optional[str] = None
    user_id: str
    source: str
    date: datetime
    date_string: Optional[str] = None
    time: str
    guests: int
    adult_guests: int
    child_guests: int
    infant_guests: int
    guest_breakdown: str
    total_price: float
    currency: str
    status: str
    payment_id: Optional[str] = None
    payment_method: Optional[str] = None
    payment_status: Optional[str] = None
    amount_paid: Optional[float] = None
    customer_phone: Optional[str] = None
    customer_country: Optional[str] = None
    special_requests: Optional[str] = None
    emergency_contact: Optional[str] = None
    hotel_pickup_details: Optional[str] = None
    hotel_pickup_location: Optional[Dict[str, Any]] = None
    pickup_location: Optional[str] = None
    pickup_address: Optional[str] = None
    internal_notes: Optional[str] = None
    discount_code: Optional[str] = None
    discount_amount: Optional[float] = None
    applied_offer: Optional[Dict[str, Any]] = None
    selected_booking_option: Optional[Dict[str, Any]] = None
    selected_add_ons: Optional[Dict[str, Any]] = None
    selected_add_on_details: Optional[Dict[str, Any]] = None
    refund_amount: Optional[float] = None
    cancelled_at: Optional[datetime] = None
    cancellation_reason: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None
    tour: Optional[BookingTour] = None
    user: Optional[BookingCustomer] = None


class CancelBookingRequest(CamelModel):
    reason: Optional[str] = Field(None, max_length=500)


class CancelBookingResponse(CamelModel):
    booking: BookingResponse
    refund_amount: float
    refund_percentage: int
    cancelled_by: Optional[str] = None


class BookingVerifyResponse(CamelModel):
    booking_reference: str
    status: str
    date: datetime
    date_string: Optional[str] = None
    time: str
    guests: int
    guest_breakdown: str
    total_price: float
    currency: str
    tour: Optional[BookingTour] = None
    customer_name: str
    customer_email: str


class AdminBookingListResponse(CamelModel):
    bookings: List[BookingResponse]
    pagination: Pagination
    filters: Dict[str, Any]


class AdminStatusUpdate(CamelModel):
    status: str


class BulkDeleteRequest(CamelModel):
    ids: List[str] = Field(default_factory=list)


class BulkDeleteResponse(CamelModel):
    deleted_count: int


class ManualBookingRequest(StrictCamelModel):
    tenant_id: Optional[str] = None
    tour_id: Optional[str] = None
    option_type: Optional[str] = None
    date: Optional[str] = None
    time: Optional[str] = None
    adults: int = Field(1, ge=0)
    children: int = Field(0, ge=0)
    infants: int = Field(0, ge=0)
    customer_name: Optional[str] = None
    customer_email: Optional[EmailStr] = None
    customer_phone: Optional[str] = None
    customer_country: Optional[str] = None
    payment_method: PaymentMethod = PaymentMethod.CASH
    payment_status: PaymentStatus = PaymentStatus.PENDING
    amount_paid: Optional[float] = Field(None, ge=0)
    special_requests: Optional[str] = Field(None, max_length=MAX_SPECIAL_REQUESTS_LENGTH)
    pickup_location: Optional[str] = Field(None, max_length=255)
    pickup_address: Optional[str] = Field(None, max_length=500)
    internal_notes: Optional[str] = None

    @field_validator("customer_email", mode="before")
    @classmethod
    def _blank_email(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v


class ManifestBooking(CamelModel):
    id: str
    booking_reference: str
    time: str
    status: str
    guests: int
    guest_breakdown: str
    customer_name: str
    customer_email: str
    customer_phone: Optional[str] = None
    pickup_location: Optional[str] = None
    hotel_pickup_details: Optional[str] = None
    special_requests: Optional[str] = None
    booking_option: Optional[str] = None


class ManifestResponse(CamelModel):
    tour_id: str
    tour_title: str
    date: str
    total_guests: int
    bookings: List[ManifestBooking]
