from datetime import date, timedelta
from decimal import Decimal
from types import SimpleNamespace

import pytest

from barberbook.services.revenue import period_start, summarize

TODAY = date(2026, 3, 31)


def _booking(name, price, quantity=1, days_ago=0):
    return SimpleNamespace(
        service_name=name,
        service_price=Decimal(str(price)),
        quantity=quantity,
        date=TODAY - timedelta(days=days_ago),
    )


def test_revenue_multiplies_price_by_quantity():
    summary = summarize([_booking("Skin Fade", 30, quantity=2)], "all", TODAY)
    assert summary["total_revenue"] == 60.0
    assert summary["total_bookings"] == 1
    assert summary["average_booking"] == 60.0


def test_revenue_by_service_sorted_by_revenue():
    bookings = [
        _booking("Beard Trim", 15),
        _booking("Skin Fade", 30),
        _booking("Skin Fade", 30),
        _booking("Hot Towel Shave", 40),
    ]
    summary = summarize(bookings, "all", TODAY)
    assert summary["by_service"] == [
        {"name": "Skin Fade", "count": 2, "revenue": 60.0},
        {"name": "Hot Towel Shave", "count": 1, "revenue": 40.0},
        {"name": "Beard Trim", "count": 1, "revenue": 15.0},
    ]
    assert summary["total_revenue"] == 115.0
    assert summary["average_booking"] == 28.75


def test_period_filters():
    bookings = [
        _booking("A", 10, days_ago=0),
        _booking("B", 10, days_ago=5),
        _booking("C", 10, days_ago=20),
        _booking("D", 10, days_ago=90),
    ]
    assert summarize(bookings, "today", TODAY)["total_bookings"] == 1
    assert summarize(bookings, "week", TODAY)["total_bookings"] == 2
    assert summarize(bookings, "month", TODAY)["total_bookings"] == 3
    assert summarize(bookings, "all", TODAY)["total_bookings"] == 4


def test_no_bookings_means_zero_average():
    summary = summarize([], "month", TODAY)
    assert summary["total_revenue"] == 0
    assert summary["average_booking"] == 0
    assert summary["by_service"] == []


def test_month_start_clamps_to_shorter_month():
    assert period_start("month", TODAY) == date(2026, 2, 28)
    assert period_start("month", date(2026, 1, 15)) == date(2025, 12, 15)
    assert period_start("all", TODAY) is None


def test_unknown_period():
    with pytest.raises(ValueError):
        period_start("year", TODAY)
