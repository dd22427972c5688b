"""Clock helpers - "today" is a calendar date in the configured timezone."""
from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo

from app.config import get_settings


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def today_local() -> date:
    return datetime.now(tz=ZoneInfo(get_settings().TIMEZONE)).date()


def month_bounds(year: int, month: int) -> tuple[date, date]:
    """[first day of month, first day of next month)"""
    start = date(year, month, 1)
    if month == 12:
        return start, date(year + 1, 1, 1)
    return start, date(year, month + 1, 1)
