# backend/tourhub/services/booking_service.py
"""
Booking Service for Tourhub

Customer-facing booking operations: listing a customer's bookings,
owner-only reads and cancellation under the refund policy, public
confirmation lookups, and the tenant-aware reference generator used by
every booking path.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from ..core.booking_status import BookingStatus
from ..core.constants import DEFAULT_TENANT_ID
from ..core.exceptions import (
    BookingAlreadyCancelledException,
    ForbiddenException,
    NotFoundException,
)
from ..models.booking import Booking
from ..models.user import User
from ..repositories.factory import RepositoryFactory
from .base import BaseService
from .booking_reference import generate_booking_reference
from .pricing import cancellation_refund


class BookingService(BaseService):
    def __init__(self, db: Session, cache=None):
        super().__init__(db, cache)
        self.repository = RepositoryFactory.create_booking_repository(db)

    def new_reference(self, tenant_id: str, tenant_name: Optional[str] = None) -> str:
        return generate_booking_reference(
            tenant_id,
            tenant_name,
            exists=lambda candidate: self.repository.reference_exists(tenant_id, candidate),
        )

    def list_user_bookings(self, user: User) -> List[Booking]:
        return self.repository.list_for_user(user.id)

    def _get_owned(self, booking_id: str, user: User) -> Booking:
        booking = self.repository.get_with_details(booking_id)
        if booking is None:
            raise NotFoundException("Booking not found", details={"booking_id": booking_id})
        if booking.user_id != user.id:
            raise ForbiddenException("You can only access your own bookings")
        return booking

    def get_user_booking(self, booking_id: str, user: User) -> Booking:
        return self._get_owned(booking_id, user)

    @BaseService.measure_operation("cancel_booking")
    def cancel_booking(
        self,
        booking_id: str,
        user: User,
        reason: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> Dict[str, Any]:
        booking = self._get_owned(booking_id, user)
        if booking.is_cancelled:
            raise BookingAlreadyCancelledException(booking_id)

        moment = now or datetime.now(timezone.utc)
        refund_amount, refund_percentage = cancellation_refund(booking.total_price, booking.date, moment)

        with self.transaction():
            booking.status = BookingStatus.CANCELLED.value
            booking.cancelled_at = moment
            booking.cancellation_reason = reason or None
            booking.refund_amount = refund_amount
            self.repository.flush()

        self.log_operation(
            "cancel_booking", booking_id=booking.id, refund_percentage=refund_percentage, by="customer"
        )
        return {"booking": booking, "refundAmount": refund_amount, "refundPercentage": refund_percentage}

    def verify_reference(self, reference: str, tenant_id: Optional[str] = None) -> Dict[str, Any]:
        """
        Public confirmation lookup by booking reference.

        References are unique per tenant only. The request tenant is tried
        first, then the default tenant, whose tours every storefront sells.
        """
        tenant_ids = list(dict.fromkeys([tenant_id or DEFAULT_TENANT_ID, DEFAULT_TENANT_ID]))
        booking = self.repository.get_by_reference(reference.strip(), tenant_ids)
        if booking is None:
            raise NotFoundException("Booking not found")
        customer = booking.user
        return {
            "bookingReference": booking.booking_reference,
            "status": booking.status,
            "date": booking.date,
            "dateString": booking.date_string,
            "time": booking.time,
            "guests": booking.guests,
            "guestBreakdown": booking.guest_breakdown,
            "totalPrice": float(booking.total_price or 0),
            "currency": booking.currency,
            "tour": booking.tour,
            "customerName": customer.name if customer else "",
            "customerEmail": customer.email if customer else "",
        }
