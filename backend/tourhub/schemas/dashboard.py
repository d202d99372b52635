from datetime import datetime
from typing import List, Optional

from .base import CamelModel


class RecentActivity(CamelModel):
    id: str
    text: str
    time: datetime


class DashboardResponse(CamelModel):
    total_tours: int
    total_bookings: int
    total_users: int
    total_revenue: float
    recent_bookings_count: int
    recent_activities: List[RecentActivity]


class MonthlyRevenue(CamelModel):
    month: str
    revenue: float


class TopTour(CamelModel):
    tour_id: Optional[str] = None
    title: str
    bookings: int
    revenue: float


class ReportKpis(CamelModel):
    total_revenue: float
    total_bookings: int
    average_booking_value: float


class ReportsResponse(CamelModel):
    monthly_revenue: List[MonthlyRevenue]
    top_tours: List[TopTour]
    kpis: ReportKpis
