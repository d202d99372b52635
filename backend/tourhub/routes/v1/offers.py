# backend/tourhub/routes/v1/offers.py
"""
Offers routes - API v1

Storefront special-offer lookups.

Endpoints:
    GET /tour/{tour_id}  → Active offers for a tour with the best auto-applied one
    POST /batch          → Offer badges for a listing page
"""

import logging
from typing import Any, Dict, List, NoReturn, Optional

from fastapi import APIRouter, Depends, Query

from ...api.dependencies.services import get_offer_service
from ...core.exceptions import DomainException
from ...schemas.special_offer import OfferBatchRequest, TourOfferSummary
from ...services.offers.offer_service import OfferService
from ...utils.time_utils import parse_datetime_param

logger = logging.getLogger(__name__)

router = APIRouter(tags=["offers-v1"])


def handle_domain_exception(exc: DomainException) -> NoReturn:
    """Convert domain exceptions to HTTP exceptions."""
    raise exc.to_http_exception()


@router.get("/tour/{tour_id}")
def get_tour_offers(
    tour_id: str,
    travel_date: Optional[str] = Query(None, alias="travelDate"),
    group_size: int = Query(1, alias="groupSize", ge=1),
    option_type: Optional[str] = Query(None, alias="optionType"),
    service: OfferService = Depends(get_offer_service),
) -> Dict[str, Any]:
    """An unparseable travel date is treated as absent."""
    try:
        return service.get_tour_offers(
            tour_id,
            travel_date=parse_datetime_param(travel_date),
            group_size=group_size,
            option_type=option_type,
        )
    except DomainException as e:
        handle_domain_exception(e)


@router.post("/batch", response_model=List[TourOfferSummary])
def get_batch_offers(
    payload: OfferBatchRequest,
    service: OfferService = Depends(get_offer_service),
) -> List[Dict[str, Any]]:
    try:
        return service.get_batch_offers(payload.tour_ids, payload.tenant_id)
    except DomainException as e:
        handle_domain_exception(e)
