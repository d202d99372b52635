# backend/tourhub/services/offers/offer_service.py
"""
Storefront offer lookups and admin management of special offers.

Rule evaluation lives in ``calculations``; this service loads offers,
applies the rules, and shapes the payloads the storefront renders.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, Sequence

from sqlalchemy.orm import Session

from ...core.enums import OfferType
from ...core.exceptions import ConflictException, NotFoundException, ValidationException
from ...models.special_offer import SpecialOffer
from ...repositories.factory import RepositoryFactory
from ...schemas.special_offer import SpecialOfferResponse, TourOptionSelection
from ...utils.time_utils import ensure_utc
from ..base import BaseService
from .calculations import (
    DiscountResult,
    calculate_discounted_price,
    format_offer_time_remaining,
    get_best_offer,
    get_offer_badge_color,
    get_offer_display_text,
    is_offer_applicable_by_travel_date,
    is_offer_applicable_to_tour,
    should_show_urgency,
)


def serialize_offer(offer: SpecialOffer) -> Dict[str, Any]:
    return SpecialOfferResponse.model_validate(offer).model_dump(mode="json", by_alias=True)


def offer_snapshot(result: DiscountResult) -> Dict[str, Any]:
    """What a booking remembers about the offer it was priced with."""
    offer = result.offer
    return {
        "offerId": offer.id,
        "name": offer.name,
        "type": offer.type,
        "discountValue": float(offer.discount_value or 0),
        "originalPrice": result.original_price,
        "discountedPrice": result.discounted_price,
        "discountAmount": result.discount_amount,
        "discountPercentage": result.discount_percentage,
    }


def _normalize_values(data: Mapping[str, Any]) -> Dict[str, Any]:
    values = dict(data)
    if values.get("code"):
        values["code"] = values["code"].strip().upper()
    if values.get("tour_option_selections") is not None:
        # Stored with the camelCase keys the rule functions read
        values["tour_option_selections"] = [
            TourOptionSelection.model_validate(selection).model_dump(by_alias=True)
            for selection in values["tour_option_selections"]
        ]
    return values


def _badge(offer: SpecialOffer, now: datetime) -> Dict[str, Any]:
    return {
        "id": offer.id,
        "name": offer.name,
        "type": offer.type,
        "discountValue": float(offer.discount_value or 0),
        "displayText": get_offer_display_text(offer),
        "badgeColor": get_offer_badge_color(offer.type),
        "isFeatured": bool(offer.is_featured),
        "featuredBadgeText": offer.featured_badge_text,
        "timeRemaining": format_offer_time_remaining(offer.end_date, now),
        "showUrgency": should_show_urgency(offer.end_date, now),
        "endDate": ensure_utc(offer.end_date).isoformat(),
    }


class OfferService(BaseService):
    def __init__(self, db: Session, cache=None):
        super().__init__(db, cache)
        self.repository = RepositoryFactory.create_special_offer_repository(db)
        self.tour_repository = RepositoryFactory.create_tour_repository(db)

    # Storefront

    @BaseService.measure_operation("get_tour_offers")
    def get_tour_offers(
        self,
        tour_id: str,
        travel_date: Optional[datetime] = None,
        group_size: int = 1,
        option_type: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> Dict[str, Any]:
        tour = self.tour_repository.get_by_id(tour_id)
        if tour is None:
            raise NotFoundException("Tour not found")

        moment = now or datetime.now(timezone.utc)
        original_price = tour.display_price
        offers = [
            offer
            for offer in self.repository.find_active_offers(tour.tenant_id, tour_id=tour_id, now=moment)
            if is_offer_applicable_to_tour(offer, tour_id, option_type)
            and is_offer_applicable_by_travel_date(offer, travel_date)
        ]

        payloads: List[Dict[str, Any]] = []
        for offer in offers:
            result = calculate_discounted_price(original_price, offer, travel_date, group_size, moment)
            payloads.append(
                {
                    **serialize_offer(offer),
                    "displayText": get_offer_display_text(offer),
                    "timeRemaining": format_offer_time_remaining(offer.end_date, moment),
                    "showUrgency": should_show_urgency(offer.end_date, moment),
                    "discountResult": result.to_dict() if result.is_applicable else None,
                }
            )

        best = get_best_offer(offers, original_price, travel_date, group_size, moment)
        best_payload = None
        if best is not None:
            best_payload = {
                **best.to_dict(offer_payload=serialize_offer(best.offer)),
                "displayText": get_offer_display_text(best.offer),
                "timeRemaining": format_offer_time_remaining(best.offer.end_date, moment),
                "showUrgency": should_show_urgency(best.offer.end_date, moment),
            }

        return {
            "tourId": tour_id,
            "originalPrice": original_price,
            "offers": payloads,
            "bestOffer": best_payload,
            "hasOffers": bool(payloads),
            "offerCount": len(payloads),
        }

    @BaseService.measure_operation("get_batch_offers")
    def get_batch_offers(
        self, tour_ids: Optional[Sequence[str]], tenant_id: Optional[str], now: Optional[datetime] = None
    ) -> List[Dict[str, Any]]:
        """Badge summaries for a listing page: offer count plus the best auto-applied offer per tour."""
        if not tour_ids:
            raise ValidationException("tourIds array is required")
        if not tenant_id:
            raise ValidationException("tenantId is required")

        moment = now or datetime.now(timezone.utc)
        offers = [
            offer
            for offer in self.repository.find_active_offers(tenant_id, now=moment)
            if offer.type != OfferType.PROMO_CODE.value
        ]

        summaries: Dict[str, Dict[str, Any]] = {
            tour_id: {"tourId": tour_id, "hasOffer": False, "offerCount": 0, "bestOffer": None}
            for tour_id in tour_ids
        }
        for offer in offers:
            for tour_id, summary in summaries.items():
                if not is_offer_applicable_to_tour(offer, tour_id):
                    continue
                summary["offerCount"] += 1
                summary["hasOffer"] = True
                # Offers arrive ordered by priority then value, so the first match is the best
                if summary["bestOffer"] is None:
                    summary["bestOffer"] = _badge(offer, moment)
        return list(summaries.values())

    def find_best_offer(
        self,
        tenant_id: str,
        tour_id: str,
        original_price: float,
        travel_date: Optional[datetime] = None,
        group_size: int = 1,
        option_type: Optional[str] = None,
    ) -> Optional[DiscountResult]:
        offers = [
            offer
            for offer in self.repository.find_active_offers(tenant_id, tour_id=tour_id)
            if is_offer_applicable_to_tour(offer, tour_id, option_type)
        ]
        return get_best_offer(offers, original_price, travel_date, group_size)

    # Admin

    def list_offers(
        self, tenant_id: Optional[str], is_active: Optional[bool] = None, offer_type: Optional[str] = None
    ) -> List[SpecialOffer]:
        offers = self.repository.list_for_tenant(None if tenant_id == "all" else tenant_id)
        if is_active is not None:
            offers = [offer for offer in offers if bool(offer.is_active) == is_active]
        if offer_type:
            offers = [offer for offer in offers if offer.type == offer_type]
        return offers

    def _check_dates(self, start: Optional[datetime], end: Optional[datetime]) -> None:
        if start is not None and end is not None and ensure_utc(end) <= ensure_utc(start):
            raise ValidationException("End date must be after start date", code="INVALID_DATE_RANGE")

    def _check_code(self, tenant_id: str, code: Optional[str], exclude_id: Optional[str] = None) -> None:
        if code and self.repository.code_taken(tenant_id, code, exclude_id=exclude_id):
            raise ConflictException("Offer code already exists", code="DUPLICATE_OFFER_CODE")

    @BaseService.measure_operation("create_offer")
    def create_offer(self, data: Mapping[str, Any], created_by_id: Optional[str] = None) -> SpecialOffer:
        values = _normalize_values(data)
        values["code"] = values.get("code") or None
        self._check_dates(values.get("start_date"), values.get("end_date"))
        self._check_code(values["tenant_id"], values["code"])

        with self.transaction():
            offer = self.repository.create(created_by_id=created_by_id, used_count=0, **values)
        self.log_operation("create_offer", offer_id=offer.id, tenant_id=offer.tenant_id)
        return offer

    @BaseService.measure_operation("update_offer")
    def update_offer(self, offer_id: str, data: Mapping[str, Any]) -> SpecialOffer:
        offer = self.repository.get_by_id(offer_id)
        if offer is None:
            raise NotFoundException("Offer not found")

        values = _normalize_values(data)
        self._check_dates(values.get("start_date", offer.start_date), values.get("end_date", offer.end_date))
        self._check_code(offer.tenant_id, values.get("code"), exclude_id=offer.id)

        with self.transaction():
            self.repository.update(offer_id, **values)
        return offer

    def delete_offer(self, offer_id: str) -> None:
        with self.transaction():
            if not self.repository.delete(offer_id):
                raise NotFoundException("Offer not found")
