"""
Venue Calendar

Slots are labelled in venue-local wall-clock time (a date plus an hour 0..24),
while instants (clock readings, hold deadlines) are timezone-aware UTC.
These helpers convert between the two.
"""

from datetime import date, datetime, time, timedelta, tzinfo
from functools import lru_cache
from zoneinfo import ZoneInfo

from src.platform.config.core_setting import settings


WEEKDAY_NAMES = ('Monday', 'Tuesday', 'Wednesday', 'Thursday', 'Friday', 'Saturday', 'Sunday')


@lru_cache(maxsize=8)
def venue_timezone(name: str | None = None) -> tzinfo:
    return ZoneInfo(name or settings.VENUE_TIMEZONE)


def weekday_name(day: date) -> str:
    return WEEKDAY_NAMES[day.weekday()]


def is_weekend(day: date) -> bool:
    return day.weekday() >= 5


def matches_weekday(day: date, names: list[str]) -> bool:
    """Empty filter means every day."""
    if not names:
        return True
    current = weekday_name(day).lower()
    return any(name.strip().lower() == current for name in names)


def slot_start_at(day: date, hour: int, tz: tzinfo) -> datetime:
    # hour may be 24 (midnight close), so add it as a delta
    return datetime.combine(day, time(0), tzinfo=tz) + timedelta(hours=hour)


def venue_today(now: datetime, tz: tzinfo) -> date:
    return now.astimezone(tz).date()


def week_start(day: date) -> date:
    """Monday of the week containing ``day``"""
    return day - timedelta(days=day.weekday())


def date_range(start: date, days: int) -> list[date]:
    return [start + timedelta(days=offset) for offset in range(days)]
