# backend/tourhub/services/dashboard_service.py
"""
Admin dashboard and reports.

Tours are counted for the tenant plus the shared default catalogue;
bookings, customers and revenue are strictly per tenant. No tenant (or
"all") means the whole platform.
"""

from datetime import date, datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from ..core.constants import RECENT_ACTIVITY_LIMIT, REPORT_MONTHS, REVENUE_STATUSES, TOP_TOURS_LIMIT
from ..repositories.factory import RepositoryFactory
from ..utils.money import round_money
from ..utils.time_utils import ensure_utc
from .admin_booking_filters import resolve_effective_tenant_id
from .base import BaseService
from .tenant_service import build_tenant_query


def last_months(today: date, count: int = REPORT_MONTHS) -> List[date]:
    """First day of each of the last ``count`` months, oldest first."""
    months = []
    year, month = today.year, today.month
    for _ in range(count):
        months.append(date(year, month, 1))
        month -= 1
        if month == 0:
            year, month = year - 1, 12
    return list(reversed(months))


def bucket_monthly_revenue(rows, months: List[date]) -> List[Dict[str, Any]]:
    totals = {(m.year, m.month): 0.0 for m in months}
    for created_at, amount in rows:
        created = ensure_utc(created_at)
        key = (created.year, created.month)
        if key in totals:
            totals[key] += amount
    return [{"month": m.strftime("%b %Y"), "revenue": round_money(totals[(m.year, m.month)])} for m in months]


class DashboardService(BaseService):
    def __init__(self, db: Session, cache=None):
        super().__init__(db, cache)
        self.booking_repository = RepositoryFactory.create_booking_repository(db)
        self.tour_repository = RepositoryFactory.create_tour_repository(db)
        self.user_repository = RepositoryFactory.create_user_repository(db)

    @BaseService.measure_operation("get_dashboard")
    def get_dashboard(self, tenant_id: Optional[str] = None, now: Optional[datetime] = None) -> Dict[str, Any]:
        tenant = resolve_effective_tenant_id(tenant_id)
        moment = now or datetime.now(timezone.utc)

        tour_criteria: Dict[str, Any] = {"is_published": True}
        if tenant:
            tour_criteria = build_tenant_query(tour_criteria, tenant)
        booking_criteria: Dict[str, Any] = {"tenant_id": tenant} if tenant else {}

        recent = self.booking_repository.latest(booking_criteria, RECENT_ACTIVITY_LIMIT)
        activities = []
        for booking in recent:
            if booking.tour is None or booking.user is None:
                continue
            user_name = booking.user.name or booking.user.email or "Unknown User"
            activities.append(
                {
                    "id": booking.id,
                    "text": f'New booking for "{booking.tour.title}" by {user_name}',
                    "time": booking.created_at,
                }
            )

        return {
            "totalTours": self.tour_repository.count_by_criteria(tour_criteria),
            "totalBookings": self.booking_repository.count_by_criteria(booking_criteria),
            "totalUsers": self.user_repository.count_for_tenant(tenant),
            "totalRevenue": round_money(self.booking_repository.sum_revenue(booking_criteria)),
            "recentBookingsCount": self.booking_repository.count_by_criteria(
                {**booking_criteria, "created_at": {"$gte": moment - timedelta(days=1)}}
            ),
            "recentActivities": activities,
        }

    @BaseService.measure_operation("get_reports")
    def get_reports(self, tenant_id: Optional[str] = None, now: Optional[datetime] = None) -> Dict[str, Any]:
        tenant = resolve_effective_tenant_id(tenant_id)
        moment = now or datetime.now(timezone.utc)
        criteria: Dict[str, Any] = {"status": {"$in": list(REVENUE_STATUSES)}}
        if tenant:
            criteria["tenant_id"] = tenant

        months = last_months(moment.date())
        window_start = datetime(months[0].year, months[0].month, 1, tzinfo=timezone.utc)
        rows = self.booking_repository.revenue_rows({**criteria, "created_at": {"$gte": window_start}})

        top = self.booking_repository.top_tours(criteria, TOP_TOURS_LIMIT)
        tours = self.tour_repository.get_many([tour_id for tour_id, _, _ in top if tour_id])
        top_tours = [
            {
                "tourId": tour_id,
                "title": tours[tour_id].title if tour_id in tours else "Unknown Tour",
                "bookings": bookings,
                "revenue": round_money(revenue),
            }
            for tour_id, bookings, revenue in top
        ]

        total_revenue = round_money(self.booking_repository.sum_revenue(criteria))
        total_bookings = self.booking_repository.count_by_criteria(criteria)
        return {
            "monthlyRevenue": bucket_monthly_revenue(rows, months),
            "topTours": top_tours,
            "kpis": {
                "totalRevenue": total_revenue,
                "totalBookings": total_bookings,
                "averageBookingValue": round_money(total_revenue / total_bookings) if total_bookings else 0.0,
            },
        }
