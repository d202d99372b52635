# backend/tourhub/routes/v1/user_bookings.py
"""
User bookings routes - API v1

Endpoints:
    GET /bookings → The caller's bookings, newest first
"""

from typing import List

from fastapi import APIRouter, Depends

from ...api.dependencies.auth import get_current_user
from ...api.dependencies.services import get_booking_service
from ...models.user import User
from ...schemas.booking import BookingResponse
from ...services.booking_service import BookingService

router = APIRouter(tags=["bookings-v1"])


@router.get("/bookings", response_model=List[BookingResponse])
def list_my_bookings(
    current_user: User = Depends(get_current_user),
    service: BookingService = Depends(get_booking_service),
) -> List[BookingResponse]:
    return [BookingResponse.model_validate(booking) for booking in service.list_user_bookings(current_user)]
