# backend/tourhub/routes/v1/tours.py
"""
Tour routes - API v1

Catalogue reads for the storefront. Listing is scoped to the resolved
tenant plus the shared default catalogue.

Endpoints:
    GET /                           → Published tours
    GET /{tour_id}                  → One tour
    GET /{tour_id}/booking-options  → Booking options and add-ons
"""

import logging
from typing import List, NoReturn

from fastapi import APIRouter, Depends, Request

from ...api.dependencies.services import get_tour_service
from ...core.exceptions import DomainException
from ...middleware.tenant import get_request_tenant_id
from ...schemas.tour import BookingOptionsResponse, TourResponse
from ...services.tour_service import TourService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["tours-v1"])


def handle_domain_exception(exc: DomainException) -> NoReturn:
    """Convert domain exceptions to HTTP exceptions."""
    raise exc.to_http_exception()


@router.get("", response_model=List[TourResponse])
def list_tours(request: Request, service: TourService = Depends(get_tour_service)) -> List[TourResponse]:
    tours = service.list_tours(get_request_tenant_id(request))
    return [TourResponse.model_validate(tour) for tour in tours]


@router.get("/{tour_id}", response_model=TourResponse)
def get_tour(tour_id: str, service: TourService = Depends(get_tour_service)) -> TourResponse:
    try:
        return TourResponse.model_validate(service.get_tour(tour_id))
    except DomainException as e:
        handle_domain_exception(e)


@router.get("/{tour_id}/booking-options", response_model=BookingOptionsResponse)
def get_booking_options(tour_id: str, service: TourService = Depends(get_tour_service)) -> BookingOptionsResponse:
    """Options get stable ids on first read so stop-sales can reference them."""
    try:
        return BookingOptionsResponse.model_validate(service.get_booking_options(tour_id))
    except DomainException as e:
        handle_domain_exception(e)
