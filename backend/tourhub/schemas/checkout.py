from typing import Any, Dict, List, Optional

from pydantic import Field

from ..core.constants import MAX_SPECIAL_REQUESTS_LENGTH
from ..core.enums import PaymentMethod
from .base import CamelModel


class CustomerInfo(CamelModel):
    """Customer details; completeness is checked by the checkout service."""

    first_name: str = ""
    last_name: str = ""
    email: str = ""
    phone: Optional[str] = None
    country: Optional[str] = None
    special_requests: Optional[str] = Field(None, max_length=MAX_SPECIAL_REQUESTS_LENGTH)
    emergency_contact: Optional[str] = None
    hotel_pickup_details: Optional[str] = None
    hotel_pickup_location: Optional[Dict[str, Any]] = None


class SelectedOption(CamelModel):
    id: Optional[str] = None
    type: Optional[str] = None


class CartItem(CamelModel):
    """
    One tour in the cart.

    Only identifiers and quantities are read; prices come from the tour.
    ``selected_add_ons`` maps add-on id to quantity.
    """

    tour_id: str
    selected_date: str
    selected_time: str = "10:00"
    quantity: int = Field(1, ge=0)
    child_quantity: int = Field(0, ge=0)
    infant_quantity: int = Field(0, ge=0)
    selected_booking_option: Optional[SelectedOption] = None
    selected_add_ons: Dict[str, int] = Field(default_factory=dict)


class PricingBreakdown(CamelModel):
    subtotal: float
    service_fee: float
    tax: float
    discount: float
    total: float
    currency: str


class PaymentIntentRequest(CamelModel):
    customer: CustomerInfo = Field(default_factory=CustomerInfo)
    cart: List[CartItem] = Field(default_factory=list)
    discount_code: Optional[str] = None


class PaymentIntentResponse(CamelModel):
    client_secret: str
    payment_intent_id: str
    pricing: PricingBreakdown


class PaymentDetails(CamelModel):
    payment_intent_id: Optional[str] = None


class CheckoutRequest(CamelModel):
    customer: CustomerInfo = Field(default_factory=CustomerInfo)
    cart: List[CartItem] = Field(default_factory=list)
    payment_method: PaymentMethod = PaymentMethod.CARD
    payment_details: Optional[PaymentDetails] = None
    discount_code: Optional[str] = None


class CheckoutResponse(CamelModel):
    success: bool = True
    booking_id: str
    booking_references: List[str]
    bookings: List[str]
    payment_id: str
    pricing: PricingBreakdown
    guest_account: bool = False


class WebhookResponse(CamelModel):
    received: bool = True
    outcome: Optional[Dict[str, Any]] = None
