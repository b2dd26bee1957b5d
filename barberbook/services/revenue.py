from datetime import date, timedelta
from decimal import Decimal
from typing import Iterable, List

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from barberbook.models.booking_model import Booking
from barberbook.logger import get_logger

logger = get_logger(__name__)

PERIODS = ("today", "week", "month", "all")


def _month_before(day: date) -> date:
    year, month = (day.year, day.month - 1) if day.month > 1 else (day.year - 1, 12)
    # Clamp e.g. 31 March to 28/29 February
    for candidate_day in (day.day, 30, 29, 28):
        try:
            return day.replace(year=year, month=month, day=candidate_day)
        except ValueError:
            continue
    raise ValueError(f"No month before {day}")


def period_start(period: str, today: date):
    """First booking date counted for a period, None for all time"""
    if period == "today":
        return today
    if period == "week":
        return today - timedelta(days=7)
    if period == "month":
        return _month_before(today)
    if period == "all":
        return None
    raise ValueError(f"Unknown period: {period}")


def filter_by_period(bookings: Iterable[Booking], period: str, today: date) -> List[Booking]:
    start = period_start(period, today)
    if start is None:
        return list(bookings)
    return [booking for booking in bookings if booking.date >= start]


def summarize(bookings: Iterable[Booking], period: str, today: date) -> dict:
    """Revenue totals for completed bookings; each booking earns price times quantity"""
    counted = filter_by_period(bookings, period, today)

    total_revenue = Decimal("0")
    by_service = {}
    for booking in counted:
        earned = Decimal(str(booking.service_price)) * (booking.quantity or 1)
        total_revenue += earned
        entry = by_service.setdefault(booking.service_name, {"count": 0, "revenue": Decimal("0")})
        entry["count"] += 1
        entry["revenue"] += earned

    total_bookings = len(counted)
    average = total_revenue / total_bookings if total_bookings else Decimal("0")

    services = [
        {"name": name, "count": entry["count"], "revenue": float(entry["revenue"])}
        for name, entry in by_service.items()
    ]
    services.sort(key=lambda item: item["revenue"], reverse=True)

    return {
        "period": period,
        "total_revenue": float(total_revenue),
        "total_bookings": total_bookings,
        "average_booking": round(float(average), 2),
        "by_service": services,
    }


def get_revenue_summary(db: Session, barber_id: str, period: str, today: date) -> dict:
    if period not in PERIODS:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Period must be one of: {', '.join(PERIODS)}"
        )
    completed = (
        db.query(Booking)
        .filter(Booking.barber_id == barber_id, Booking.status == "completed")
        .all()
    )
    summary = summarize(completed, period, today)
    logger.info(f"Revenue for barber {barber_id} ({period}): {summary['total_revenue']}")
    return summary
