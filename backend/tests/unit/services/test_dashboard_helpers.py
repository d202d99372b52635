from datetime import date, datetime, timezone

from tourhub.services.dashboard_service import bucket_monthly_revenue, last_months


def test_last_months_crosses_year_boundary():
    months = last_months(date(2026, 2, 14), count=4)
    assert months == [date(2025, 11, 1), date(2025, 12, 1), date(2026, 1, 1), date(2026, 2, 1)]


def test_last_months_default_is_six():
    assert len(last_months(date(2026, 7, 1))) == 6


def test_bucket_monthly_revenue():
    months = last_months(date(2026, 3, 10), count=3)
    rows = [
        (datetime(2026, 1, 5, tzinfo=timezone.utc), 100.0),
        (datetime(2026, 1, 31, 23, 0), 50.25),
        (datetime(2026, 3, 1, tzinfo=timezone.utc), 20.0),
        # Outside the window
        (datetime(2025, 12, 31, tzinfo=timezone.utc), 999.0),
    ]
    assert bucket_monthly_revenue(rows, months) == [
        {"month": "Jan 2026", "revenue": 150.25},
        {"month": "Feb 2026", "revenue": 0.0},
        {"month": "Mar 2026", "revenue": 20.0},
    ]
