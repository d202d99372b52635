# backend/tourhub/services/admin_booking_service.py
"""
Admin Booking Service for Tourhub

Back-office booking operations:
- Filtered, paginated booking lists across tenants
- Status changes and admin cancellations
- Bulk deletes
- Manual (phone / walk-in) bookings priced with the best active offer
- Daily tour manifests
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from ..core.booking_status import BOOKING_STATUSES_DB, BookingStatus, to_booking_status_db
from ..core.enums import BookingSource, PaymentStatus
from ..core.exceptions import BookingAlreadyCancelledException, NotFoundException, ValidationException
from ..core.ulid_helper import is_valid_ulid
from ..models.booking import Booking
from ..models.user import User
from ..repositories.factory import RepositoryFactory
from ..schemas.booking import ManualBookingRequest
from ..utils.money import round_money
from ..utils.time_utils import parse_date_only, utc_end_of_day, utc_midnight
from .admin_booking_filters import (
    build_base_match,
    build_tenant_stage,
    combine_criteria,
    resolve_effective_tenant_id,
    resolve_pagination,
    resolve_sort,
)
from .auth_service import AuthService, split_name
from .base import BaseService
from .booking_service import BookingService
from .offers.offer_service import OfferService, offer_snapshot
from .pricing import cancellation_refund, item_subtotal
from .tenant_service import TenantService


class AdminBookingService(BaseService):
    def __init__(self, db: Session, cache=None):
        super().__init__(db, cache)
        self.repository = RepositoryFactory.create_booking_repository(db)
        self.tour_repository = RepositoryFactory.create_tour_repository(db)

    @BaseService.measure_operation("list_admin_bookings")
    def list_bookings(
        self,
        tenant_id: Optional[str] = None,
        status: Optional[str] = None,
        tour_id: Optional[str] = None,
        purchase_from: Optional[str] = None,
        purchase_to: Optional[str] = None,
        activity_from: Optional[str] = None,
        activity_to: Optional[str] = None,
        sort: Optional[str] = None,
        page: Any = None,
        limit: Any = None,
    ) -> Dict[str, Any]:
        effective_tenant = resolve_effective_tenant_id(tenant_id)
        base = build_base_match(status, tour_id, purchase_from, purchase_to, activity_from, activity_to)
        criteria = combine_criteria(base, build_tenant_stage(effective_tenant))
        page_number, page_size, skip = resolve_pagination(page, limit)

        bookings, total = self.repository.find_page(
            criteria, order_by=resolve_sort(sort), skip=skip, limit=page_size
        )
        total_pages = (total + page_size - 1) // page_size if total else 0
        return {
            "bookings": bookings,
            "pagination": {"page": page_number, "limit": page_size, "total": total, "totalPages": total_pages},
            "filters": {
                "tenantId": effective_tenant or "all",
                "status": status or "all",
                "tourId": tour_id,
                "purchaseFrom": purchase_from,
                "purchaseTo": purchase_to,
                "activityFrom": activity_from,
                "activityTo": activity_to,
                "sort": sort or "createdAt_desc",
            },
        }

    def get_booking(self, booking_id: str) -> Booking:
        booking = self.repository.get_with_details(booking_id)
        if booking is None:
            raise NotFoundException("Booking not found", details={"booking_id": booking_id})
        return booking

    def update_status(self, booking_id: str, status: Optional[str]) -> Booking:
        normalized = to_booking_status_db(status) if isinstance(status, str) else None
        if normalized is None or normalized not in BOOKING_STATUSES_DB:
            raise ValidationException("Invalid status value", code="INVALID_STATUS")

        booking = self.get_booking(booking_id)
        previous = booking.status
        with self.transaction():
            booking.status = normalized
            if normalized == BookingStatus.CANCELLED.value and booking.cancelled_at is None:
                booking.cancelled_at = datetime.now(timezone.utc)
            self.repository.flush()

        self.log_operation("update_booking_status", booking_id=booking.id, previous=previous, status=normalized)
        return booking

    @BaseService.measure_operation("admin_cancel_booking")
    def cancel_booking(
        self,
        booking_id: str,
        admin: User,
        reason: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> Dict[str, Any]:
        booking = self.get_booking(booking_id)
        if booking.is_cancelled:
            raise BookingAlreadyCancelledException(booking_id)

        moment = now or datetime.now(timezone.utc)
        refund_amount, refund_percentage = cancellation_refund(booking.total_price, booking.date, moment)
        with self.transaction():
            booking.status = BookingStatus.CANCELLED.value
            booking.cancelled_at = moment
            booking.cancellation_reason = reason or "Cancelled by administrator"
            booking.refund_amount = refund_amount
            self.repository.flush()

        cancelled_by = admin.email or admin.id
        self.log_operation("cancel_booking", booking_id=booking.id, by=cancelled_by)
        return {
            "booking": booking,
            "refundAmount": refund_amount,
            "refundPercentage": refund_percentage,
            "cancelledBy": cancelled_by,
        }

    def bulk_delete(self, ids: List[str]) -> int:
        if not ids:
            raise ValidationException("No booking IDs provided", code="NO_IDS")
        invalid = [booking_id for booking_id in ids if not is_valid_ulid(booking_id)]
        if invalid:
            raise ValidationException(
                "Invalid booking ID format", code="INVALID_IDS", details={"invalid_ids": invalid}
            )

        with self.transaction():
            deleted = self.repository.delete_many(ids)
        self.log_operation("bulk_delete_bookings", requested=len(ids), deleted=deleted)
        return deleted

    @BaseService.measure_operation("create_manual_booking")
    def create_manual_booking(self, data: ManualBookingRequest, admin: User) -> Booking:
        """
        Record a phone, walk-in or corporate booking.

        Prices come from the chosen option: adults at full price, children
        at the child rate, infants free, then the best active offer.
        """
        tenant_id = (data.tenant_id or "").strip()
        if not tenant_id or tenant_id == "all":
            raise ValidationException("Brand selection is required.", code="TENANT_REQUIRED")
        if not (data.tour_id and data.option_type and data.date and data.time):
            raise ValidationException("Tour, option, date, and time are required.", code="MISSING_FIELDS")
        if not (data.customer_name and data.customer_email and data.customer_phone):
            raise ValidationException("Customer name, email, and phone are required.", code="MISSING_CUSTOMER")

        day = parse_date_only(data.date)
        if day is None:
            raise ValidationException("Invalid date format.", code="INVALID_DATE")

        total_guests = data.adults + data.children + data.infants
        if total_guests < 1:
            raise ValidationException("At least 1 participant is required.", code="NO_GUESTS")

        tour = self.tour_repository.get_by_id(data.tour_id)
        if tour is None:
            raise NotFoundException("Tour not found.", details={"tour_id": data.tour_id})
        if tour.tenant_id != tenant_id:
            raise ValidationException("Selected tour does not belong to selected brand.", code="TENANT_MISMATCH")

        option = tour.get_option(data.option_type)
        if option is None:
            raise ValidationException("Selected booking option not found for this tour.", code="UNKNOWN_OPTION")

        unit_price = float(option.get("price") or 0)
        subtotal = item_subtotal(unit_price, data.adults, data.children)
        travel_date = utc_midnight(day)

        best = OfferService(self.db).find_best_offer(
            tenant_id,
            tour.id,
            subtotal,
            travel_date=travel_date,
            group_size=total_guests,
            option_type=option.get("type"),
        )
        total_price = best.discounted_price if best else subtotal

        first_name, last_name = split_name(data.customer_name)
        status = (
            BookingStatus.CONFIRMED.value
            if data.payment_status == PaymentStatus.PAID.value
            else BookingStatus.PENDING.value
        )

        with self.transaction():
            customer = AuthService(self.db).find_or_create_customer(
                data.customer_email, first_name, last_name, data.customer_phone
            )
            tenant_name = TenantService(self.db).get_tenant_name(tenant_id)
            reference = BookingService(self.db).new_reference(tenant_id, tenant_name)
            booking = self.repository.create(
                tenant_id=tenant_id,
                booking_reference=reference,
                tour_id=tour.id,
                user_id=customer.id,
                source=BookingSource.MANUAL.value,
                created_by_id=admin.id,
                customer_phone=data.customer_phone,
                customer_country=data.customer_country,
                date=travel_date,
                date_string=day.isoformat(),
                time=data.time,
                guests=total_guests,
                adult_guests=data.adults,
                child_guests=data.children,
                infant_guests=data.infants,
                total_price=round_money(total_price),
                status=status,
                payment_method=data.payment_method,
                payment_status=data.payment_status,
                amount_paid=data.amount_paid,
                special_requests=data.special_requests,
                pickup_location=data.pickup_location,
                pickup_address=data.pickup_address,
                internal_notes=data.internal_notes,
                discount_amount=best.discount_amount if best else None,
                applied_offer=offer_snapshot(best) if best else None,
                selected_booking_option={
                    "id": option.get("id") or option.get("type"),
                    "title": option.get("label") or option.get("type"),
                    "price": unit_price,
                },
            )

        self.log_operation(
            "create_manual_booking", booking_id=booking.id, tenant_id=tenant_id, created_by=admin.id
        )
        return booking

    def get_manifest(self, tour_id: Optional[str], date: Optional[str], tenant_id: Optional[str] = None) -> Dict[str, Any]:
        if not tour_id or not date:
            raise ValidationException("Tour ID and date are required", code="MISSING_FIELDS")
        day = parse_date_only(date)
        if day is None:
            raise ValidationException("Invalid date format.", code="INVALID_DATE")

        tour = self.tour_repository.get_by_id(tour_id)
        if tour is None:
            raise NotFoundException("Tour not found", details={"tour_id": tour_id})

        bookings = self.repository.find_for_manifest(tour_id, utc_midnight(day), utc_end_of_day(day))
        effective_tenant = resolve_effective_tenant_id(tenant_id)
        if effective_tenant:
            bookings = [booking for booking in bookings if booking.tenant_id == effective_tenant]

        rows = []
        for booking in bookings:
            customer = booking.user
            option = booking.selected_booking_option or {}
            rows.append(
                {
                    "id": booking.id,
                    "bookingReference": booking.booking_reference,
                    "time": booking.time,
                    "status": booking.status,
                    "guests": booking.guests,
                    "guestBreakdown": booking.guest_breakdown,
                    "customerName": customer.name if customer else "",
                    "customerEmail": customer.email if customer else "",
                    "customerPhone": booking.customer_phone or (customer.phone if customer else None),
                    "pickupLocation": booking.pickup_location,
                    "hotelPickupDetails": booking.hotel_pickup_details,
                    "specialRequests": booking.special_requests,
                    "bookingOption": option.get("title"),
                }
            )

        return {
            "tourId": tour.id,
            "tourTitle": tour.title,
            "date": day.isoformat(),
            "totalGuests": sum(row["guests"] for row in rows if row["status"] != BookingStatus.CANCELLED.value),
            "bookings": rows,
        }
