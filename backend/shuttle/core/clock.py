"""
Time helpers. Travel timestamps are epoch milliseconds; calendar-day
comparisons happen in the service time zone, not in UTC.
"""

import time
from datetime import date, datetime, timedelta
from functools import lru_cache
from zoneinfo import ZoneInfo

from shuttle.core.config import get_settings


@lru_cache()
def service_tz() -> ZoneInfo:
    return ZoneInfo(get_settings().TIMEZONE)


def now_ms() -> int:
    return int(time.time() * 1000)


def today() -> date:
    return datetime.now(service_tz()).date()


def parse_hhmm(value: str) -> tuple[int, int]:
    hours, minutes = value.split(":")
    h, m = int(hours), int(minutes)
    if not (0 <= h < 24 and 0 <= m < 60):
        raise ValueError(f"invalid time of day: {value!r}")
    return h, m


def combine(day: date, hhmm: str) -> int:
    """Travel timestamp for a route departing at `hhmm` on `day`."""
    h, m = parse_hhmm(hhmm)
    local = datetime(day.year, day.month, day.day, h, m, tzinfo=service_tz())
    return int(local.timestamp() * 1000)


def to_local(ms: int) -> datetime:
    return datetime.fromtimestamp(ms / 1000, tz=service_tz())


def day_of(ms: int) -> date:
    return to_local(ms).date()


def booking_window(start: date, days: int) -> list[date]:
    return [start + timedelta(days=i) for i in range(days)]


def day_bounds(day: date) -> tuple[int, int]:
    """[start, end) of a calendar day in epoch milliseconds."""
    return combine(day, "00:00"), combine(day + timedelta(days=1), "00:00")
