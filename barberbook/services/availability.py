from datetime import date, timedelta
from typing import Dict, List, Tuple

SLOT_MINUTES = 30
BOOKING_WINDOW_DAYS = 30

# (label, first hour, hour after the last)
SLOT_BUCKETS = (
    ("Morning", 0, 12),
    ("Afternoon", 12, 17),
    ("Evening", 17, 24),
)


def _hour_of(hhmm: str) -> int:
    return int(hhmm.split(":")[0])


def generate_time_slots(open_time: str, close_time: str) -> List[str]:
    """Half-hour slots from the opening hour up to, not including, the closing hour.

    Only the hour component is used: "09:30"-"11:45" yields the same slots
    as "09:00"-"11:00".
    """
    slots = []
    for hour in range(_hour_of(open_time), _hour_of(close_time)):
        for minute in range(0, 60, SLOT_MINUTES):
            slots.append(f"{hour:02d}:{minute:02d}")
    return slots


def bucket_time_slots(slots: List[str]) -> List[Dict[str, object]]:
    """Group slots into Morning/Afternoon/Evening, leaving out empty groups"""
    buckets = []
    for label, start, end in SLOT_BUCKETS:
        in_bucket = [slot for slot in slots if start <= _hour_of(slot) < end]
        if in_bucket:
            buckets.append({"label": label, "slots": in_bucket})
    return buckets


def booking_window(today: date) -> Tuple[date, date]:
    return today, today + timedelta(days=BOOKING_WINDOW_DAYS)


def is_selectable_date(day: date, today: date) -> bool:
    first, last = booking_window(today)
    return first <= day <= last
