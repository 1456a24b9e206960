"""Day-number <-> calendar date mapping.

Day 1 is the trip start date. Dates are plain calendar dates; no timezone math.
"""

from collections.abc import Iterable
from datetime import date, datetime, timedelta
from typing import Protocol, TypeVar


class Dated(Protocol):
    date: date


D = TypeVar("D", bound=Dated)


def _as_date(value: date | str) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(value[:10])


def day_to_date(trip_start: date | str, day_number: int) -> date:
    """Calendar date of ``day_number`` (1-based)."""
    if day_number < 1:
        raise ValueError(f"day_number must be >= 1, got {day_number}")
    return _as_date(trip_start) + timedelta(days=day_number - 1)


def date_to_day(trip_start: date | str, value: date | str) -> int:
    """Day number of ``value``; may fall outside the trip's range."""
    return (_as_date(value) - _as_date(trip_start)).days + 1


def start_for_day(day_number: int, new_date: date | str) -> date:
    """Start date that puts ``day_number`` on ``new_date``."""
    return _as_date(new_date) - timedelta(days=day_number - 1)


def current_day(trip_start: date | str, today: date, total_days: int) -> int | None:
    """Day number for ``today`` if the trip is under way, else None."""
    day = date_to_day(trip_start, today)
    if 1 <= day <= total_days:
        return day
    return None


def trips_for_day(trips: Iterable[D], trip_start: date | str, day_number: int) -> list[D]:
    """Trips whose date maps to ``day_number``."""
    target = day_to_date(trip_start, day_number)
    return [t for t in trips if t.date == target]
