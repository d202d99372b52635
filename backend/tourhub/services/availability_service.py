# backend/tourhub/services/availability_service.py
"""
Availability Service for Tourhub

Admin management of per-day availability (slots, day-level stop-sales)
and the public per-option stop-sale calendar the booking widget reads.
"""

from datetime import date
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from ..core.constants import DEFAULT_TENANT_ID
from ..core.enums import StopSaleDayStatus
from ..core.exceptions import NotFoundException, ValidationException
from ..models.availability import Availability
from ..models.stop_sale import StopSale
from ..models.tour import Tour
from ..repositories.factory import RepositoryFactory
from ..schemas.availability import AvailabilityBulkAction, AvailabilityUpsert
from ..utils.time_utils import iter_days, month_bounds, parse_date_only, utcnow
from .base import BaseService
from .tour_service import TourService

MAX_CALENDAR_YEAR = 9998


def serialize_availability(row: Availability) -> Dict[str, Any]:
    return {
        "id": row.id,
        "tourId": row.tour_id,
        "tenantId": row.tenant_id,
        "date": row.date,
        "slots": list(row.slots or []),
        "stopSale": bool(row.stop_sale),
        "stopSaleReason": row.stop_sale_reason,
        "notes": row.notes,
        "totalCapacity": row.total_capacity,
        "booked": row.booked,
        "available": row.available,
        "status": row.get_availability_status(),
    }


def option_labels(tour: Tour) -> List[Dict[str, str]]:
    return [
        {"id": str(option["id"]), "label": option.get("label") or option.get("type") or "Option"}
        for option in (tour.booking_options or [])
        if option.get("id")
    ]


def build_stop_sale_days(
    stop_sales: List[StopSale], start: date, end: date, option_count: int
) -> Dict[str, Dict[str, Any]]:
    """
    Fold stop-sale windows into one entry per day.

    A window with no option ids stops the whole day (reason key "all");
    otherwise its first option id is stopped. A day with every option
    stopped counts as full.
    """
    days: Dict[str, Dict[str, Any]] = {
        day.isoformat(): {"status": StopSaleDayStatus.NONE.value, "stoppedOptionIds": [], "reasons": {}}
        for day in iter_days(start, end)
    }

    for stop_sale in stop_sales:
        window_start = max(stop_sale.start_date, start)
        window_end = min(stop_sale.end_date, end)
        for day in iter_days(window_start, window_end):
            entry = days[day.isoformat()]
            reason = stop_sale.reason or ""
            if stop_sale.covers_all_options:
                entry["status"] = StopSaleDayStatus.FULL.value
                entry["stoppedOptionIds"] = []
                entry["reasons"]["all"] = reason
                continue
            option_id = str(stop_sale.option_ids[0])
            entry["stoppedOptionIds"].append(option_id)
            entry["reasons"][option_id] = reason
            if entry["status"] != StopSaleDayStatus.FULL.value:
                entry["status"] = StopSaleDayStatus.PARTIAL.value

    for entry in days.values():
        if entry["status"] == StopSaleDayStatus.FULL.value and "all" in entry["reasons"]:
            entry["stoppedOptionIds"] = []
            continue
        entry["stoppedOptionIds"] = list(dict.fromkeys(entry["stoppedOptionIds"]))
        if (
            entry["status"] == StopSaleDayStatus.PARTIAL.value
            and option_count > 0
            and len(entry["stoppedOptionIds"]) >= option_count
        ):
            entry["status"] = StopSaleDayStatus.FULL.value
    return days


def _parse_month(month: Any, year: Any) -> tuple:
    try:
        month_number = int(month)
        year_number = int(year)
    except (TypeError, ValueError):
        raise ValidationException("Invalid month/year", code="INVALID_MONTH")
    # month_bounds also builds January of the following year
    if not 1 <= month_number <= 12 or not 1 <= year_number <= MAX_CALENDAR_YEAR:
        raise ValidationException("Invalid month/year", code="INVALID_MONTH")
    return month_number, year_number


class AvailabilityService(BaseService):
    def __init__(self, db: Session, cache=None):
        super().__init__(db, cache)
        self.repository = RepositoryFactory.create_availability_repository(db)
        self.tour_repository = RepositoryFactory.create_tour_repository(db)
        self.stop_sale_repository = RepositoryFactory.create_stop_sale_repository(db)

    def _require_tour(self, tour_id: Optional[str]) -> Tour:
        tour = self.tour_repository.get_by_id(tour_id) if tour_id else None
        if tour is None:
            raise NotFoundException("Tour not found", details={"tour_id": tour_id})
        return tour

    # Admin

    def list_month(
        self, tour_id: Optional[str], month: Any = None, year: Any = None, tenant_id: Optional[str] = None
    ) -> Dict[str, Any]:
        if not tour_id:
            raise ValidationException("Tour ID is required", code="MISSING_TOUR")
        today = utcnow()
        month_number, year_number = _parse_month(month or today.month, year or today.year)
        first, last = month_bounds(year_number, month_number)
        effective_tenant = None if tenant_id in (None, "", "all") else tenant_id
        rows = self.repository.list_range(tour_id, first, last, effective_tenant)
        return {
            "tourId": tour_id,
            "month": month_number,
            "year": year_number,
            "days": [serialize_availability(row) for row in rows],
        }

    @BaseService.measure_operation("upsert_availability")
    def upsert_day(self, data: AvailabilityUpsert) -> Availability:
        if not (data.tour_id and data.date and data.tenant_id):
            raise ValidationException("Tour ID, date, and tenant ID are required", code="MISSING_FIELDS")
        day = parse_date_only(data.date)
        if day is None:
            raise ValidationException("Invalid date", code="INVALID_DATE")
        self._require_tour(data.tour_id)

        values = {
            "tenant_id": data.tenant_id,
            "slots": [slot.model_dump() for slot in (data.slots or [])],
            "stop_sale": bool(data.stop_sale),
            "stop_sale_reason": data.stop_sale_reason or None,
            "notes": data.notes or None,
        }
        with self.transaction():
            row, created = self.repository.upsert(data.tour_id, day, values)
        self.log_operation("upsert_availability", tour_id=data.tour_id, date=day.isoformat(), created=created)
        return row

    @BaseService.measure_operation("bulk_update_availability")
    def bulk_update(self, data: AvailabilityBulkAction) -> Dict[str, int]:
        if not (data.tour_id and data.dates and data.tenant_id):
            raise ValidationException(
                "Tour ID, dates array, action, and tenant ID are required", code="MISSING_FIELDS"
            )
        days = []
        for raw in data.dates:
            day = parse_date_only(raw)
            if day is None:
                raise ValidationException(f"Invalid date: {raw}", code="INVALID_DATE")
            days.append(day)

        values: Dict[str, Any] = {"tenant_id": data.tenant_id}
        if data.action == "block":
            values.update(stop_sale=True, stop_sale_reason=data.stop_sale_reason or "Blocked")
        elif data.action == "unblock":
            values.update(stop_sale=False, stop_sale_reason=None)
        elif data.action == "updateSlots":
            if data.slots is not None:
                values["slots"] = [slot.model_dump() for slot in data.slots]
        elif data.action == "setStopSale":
            values.update(stop_sale=bool(data.stop_sale), stop_sale_reason=data.stop_sale_reason or None)

        modified = upserted = 0
        with self.transaction():
            for day in days:
                _, created = self.repository.upsert(data.tour_id, day, values)
                if created:
                    upserted += 1
                else:
                    modified += 1

        self.log_operation(
            "bulk_update_availability", tour_id=data.tour_id, action=data.action, modified=modified, upserted=upserted
        )
        return {"modified": modified, "upserted": upserted}

    # Public

    @BaseService.measure_operation("get_stop_sale_status")
    def get_stop_sale_status(
        self,
        tour_id: str,
        tenant_id: Optional[str] = None,
        day: Optional[str] = None,
        month: Optional[str] = None,
        year: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Per-option stop-sale calendar for one day or one month."""
        if day:
            single = parse_date_only(day)
            if single is None:
                raise ValidationException("Invalid date", code="INVALID_DATE")
            start = end = single
        elif month and year:
            month_number, year_number = _parse_month(month, year)
            start, end = month_bounds(year_number, month_number)
        else:
            raise ValidationException(
                "Provide either ?date=YYYY-MM-DD or ?month=MM&year=YYYY", code="MISSING_RANGE"
            )

        tour = TourService(self.db).ensure_option_ids(self._require_tour(tour_id))
        options = option_labels(tour)
        effective_tenant = tenant_id or DEFAULT_TENANT_ID

        stop_sales = [
            stop_sale
            for stop_sale in self.stop_sale_repository.list_overlapping(tour.id, start, end)
            if stop_sale.tenant_id == effective_tenant
        ]
        days = build_stop_sale_days(stop_sales, start, end, len(options))

        if day:
            entry = days[start.isoformat()]
            return {
                "tourId": tour.id,
                "date": start.isoformat(),
                "options": options,
                "stopSaleStatus": entry["status"],
                "stoppedOptionIds": entry["stoppedOptionIds"],
                "reasons": entry["reasons"],
            }
        return {"tourId": tour.id, "options": options, "days": days}
