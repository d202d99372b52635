# backend/tourhub/services/stop_sale_service.py
"""
Stop-sale windows per tour option, with an audit log.

One stop-sale row is stored per stopped option (``option_ids=[id]``), or a
single row with an empty list when every option is stopped. The log keeps
one row per option (``option_id`` None for all options) and records when
and by whom each window was lifted.
"""

from datetime import date, datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.orm import Session

from ..core.constants import DEFAULT_TENANT_ID
from ..core.enums import StopSaleLogStatus
from ..core.exceptions import NotFoundException, ValidationException
from ..models.stop_sale import StopSaleLog
from ..models.user import User
from ..repositories.factory import RepositoryFactory
from ..schemas.availability import StopSaleRequest
from ..utils.time_utils import parse_datetime_param
from .base import BaseService
from .tour_service import TourService

DEFAULT_LOG_PAGE_SIZE = 20
MAX_LOG_PAGE_SIZE = 100


def normalize_option_ids(option_ids: Optional[List[str]]) -> List[str]:
    """Drop blanks and duplicates, keeping order."""
    return list(dict.fromkeys(str(option_id) for option_id in (option_ids or []) if option_id))


def _user_label(user: Optional[User]) -> Optional[str]:
    if user is None:
        return None
    return user.name or user.email


def serialize_log(log: StopSaleLog) -> Dict[str, Any]:
    options = {str(o.get("id")): o for o in ((log.tour.booking_options if log.tour else None) or [])}
    option = options.get(log.option_id or "")
    if log.option_id is None:
        option_title = "All options"
    else:
        option_title = (option or {}).get("label") or (option or {}).get("type") or log.option_id
    return {
        "id": log.id,
        "tenantId": log.tenant_id,
        "tourId": log.tour_id,
        "tourTitle": log.tour.title if log.tour else None,
        "optionId": log.option_id,
        "optionTitle": option_title,
        "dateFrom": log.date_from,
        "dateTo": log.date_to,
        "reason": log.reason,
        "appliedBy": _user_label(log.applied_by) or "Unknown",
        "appliedAt": log.applied_at,
        "status": log.status,
        "removedBy": _user_label(log.removed_by),
        "removedAt": log.removed_at,
    }


class StopSaleService(BaseService):
    def __init__(self, db: Session, cache=None):
        super().__init__(db, cache)
        self.repository = RepositoryFactory.create_stop_sale_repository(db)
        self.log_repository = RepositoryFactory.create_stop_sale_log_repository(db)
        self.tour_service = TourService(db)

    def _validate(self, data: StopSaleRequest, request_tenant: Optional[str]) -> Tuple[str, str, date, date]:
        tour_id = (data.tour_id or "").strip()
        if not tour_id:
            raise ValidationException("tourId is required", code="MISSING_TOUR")

        start = parse_datetime_param(data.start_date)
        end = parse_datetime_param(data.end_date)
        if start is None or end is None:
            raise ValidationException("Invalid startDate/endDate", code="INVALID_DATES")
        if end.date() < start.date():
            raise ValidationException("endDate must be >= startDate", code="INVALID_RANGE")

        tenant_id = (data.tenant_id or request_tenant or DEFAULT_TENANT_ID).strip()
        return tenant_id, tour_id, start.date(), end.date()

    @BaseService.measure_operation("apply_stop_sale")
    def apply(self, data: StopSaleRequest, admin: Optional[User], request_tenant: Optional[str] = None) -> Dict[str, int]:
        tenant_id, tour_id, start, end = self._validate(data, request_tenant)
        tour = self.tour_service.repository.get_by_id(tour_id)
        if tour is None:
            raise NotFoundException("Tour not found", details={"tour_id": tour_id})

        option_ids = normalize_option_ids(data.option_ids)
        reason = (data.reason or "").strip()
        targets = [[option_id] for option_id in option_ids] or [[]]
        upserted = modified = matched = 0
        now = datetime.now(timezone.utc)

        with self.transaction():
            self.tour_service.ensure_option_ids(tour)
            existing = self.repository.find_exact(tenant_id, tour_id, start, end)
            for target in targets:
                row = next((s for s in existing if list(s.option_ids or []) == target), None)
                if row is None:
                    self.repository.create(
                        tenant_id=tenant_id,
                        tour_id=tour_id,
                        start_date=start,
                        end_date=end,
                        option_ids=target,
                        reason=reason,
                        created_by_id=admin.id if admin else None,
                    )
                    upserted += 1
                    continue
                matched += 1
                if row.reason != reason:
                    row.reason = reason
                    modified += 1

            self.log_repository.bulk_create(
                [
                    {
                        "tenant_id": tenant_id,
                        "tour_id": tour_id,
                        "option_id": option_id,
                        "date_from": start,
                        "date_to": end,
                        "reason": reason,
                        "applied_by_id": admin.id if admin else None,
                        "applied_at": now,
                        "status": StopSaleLogStatus.ACTIVE.value,
                    }
                    for option_id in option_ids or [None]
                ]
            )

        self.log_operation("apply_stop_sale", tour_id=tour_id, tenant_id=tenant_id, options=len(option_ids))
        return {"upserted": upserted, "modified": modified, "matched": matched}

    @BaseService.measure_operation("remove_stop_sale")
    def remove(self, data: StopSaleRequest, admin: Optional[User], request_tenant: Optional[str] = None) -> Dict[str, int]:
        tenant_id, tour_id, start, end = self._validate(data, request_tenant)
        option_ids = normalize_option_ids(data.option_ids)
        targets = [[option_id] for option_id in option_ids] or [[]]

        with self.transaction():
            rows = [
                row
                for row in self.repository.find_exact(tenant_id, tour_id, start, end)
                if list(row.option_ids or []) in targets
            ]
            deleted = self.repository.delete_many([row.id for row in rows])
            self.log_repository.mark_removed(
                tenant_id=tenant_id,
                tour_id=tour_id,
                option_ids=option_ids,
                date_from=start,
                date_to=end,
                removed_by_id=admin.id if admin else None,
                removed_at=datetime.now(timezone.utc),
            )

        self.log_operation("remove_stop_sale", tour_id=tour_id, tenant_id=tenant_id, deleted=deleted)
        return {"deleted": deleted}

    def list_logs(
        self,
        tenant_id: Optional[str] = None,
        tour_id: Optional[str] = None,
        status: Optional[str] = None,
        page: Any = 1,
        limit: Any = DEFAULT_LOG_PAGE_SIZE,
    ) -> Dict[str, Any]:
        try:
            page_number = max(1, int(page or 1))
        except (TypeError, ValueError):
            page_number = 1
        try:
            page_size = min(MAX_LOG_PAGE_SIZE, max(1, int(limit or DEFAULT_LOG_PAGE_SIZE)))
        except (TypeError, ValueError):
            page_size = DEFAULT_LOG_PAGE_SIZE

        rows, total = self.log_repository.page(
            tenant_id=None if tenant_id in (None, "", "all") else tenant_id,
            tour_id=None if tour_id in (None, "", "all") else tour_id,
            status=None if status in (None, "", "all") else status,
            skip=(page_number - 1) * page_size,
            limit=page_size,
        )
        return {
            "logs": [serialize_log(row) for row in rows],
            "pagination": {
                "page": page_number,
                "limit": page_size,
                "total": total,
                "totalPages": (total + page_size - 1) // page_size if total else 0,
            },
        }
