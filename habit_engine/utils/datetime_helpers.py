"""
Standardized Date/Week Handling Utilities

All completion lookups and storage key on the YYYY-MM-DD day key, never on
datetime equality. Rules:
- Weeks start on Sunday (weekday index 0 = Sunday, 6 = Saturday)
- "Today" is the local calendar day in the session's timezone
- Time of day and timezone are normalized away before a key is derived
"""

import calendar
import logging
from datetime import datetime, date, timedelta
from typing import Optional, Union
from zoneinfo import ZoneInfo

from habit_engine.config import TIMEZONE
from habit_engine.exceptions import ValidationError

logger = logging.getLogger(__name__)

DATE_KEY_FORMAT = "%Y-%m-%d"
DAYS_PER_WEEK = 7


def today_in_timezone(tz: str = TIMEZONE) -> date:
    """
    Get today's date in the given timezone

    Args:
        tz: IANA timezone name

    Returns:
        Local calendar date
    """
    return datetime.now(ZoneInfo(tz)).date()


def sunday_weekday(day: date) -> int:
    """Weekday index with 0 = Sunday ... 6 = Saturday"""
    return (day.weekday() + 1) % DAYS_PER_WEEK


def week_start(day: date) -> date:
    """Sunday that starts the week containing day"""
    return day - timedelta(days=sunday_weekday(day))


def week_key(day: date) -> str:
    """Date key of the week boundary (its Sunday), used as the weekly-reset marker"""
    return to_date_key(week_start(day))


def current_week_dates(today: Optional[date] = None, tz: str = TIMEZONE) -> list[date]:
    """
    Dates of the Sunday-starting week containing today

    Args:
        today: Override for the local day (defaults to today in tz)
        tz: IANA timezone used when today is not given

    Returns:
        Seven dates, Sunday first through Saturday last
    """
    if today is None:
        today = today_in_timezone(tz)
    start = week_start(today)
    return [start + timedelta(days=i) for i in range(DAYS_PER_WEEK)]


def is_same_week(first: date, second: date) -> bool:
    """Check if two dates fall in the same Sunday-starting week"""
    return week_start(first) == week_start(second)


def to_date_key(value: Union[date, datetime, str], tz: Optional[str] = None) -> str:
    """
    Canonical YYYY-MM-DD key for a calendar day

    Args:
        value: date, datetime (naive or aware) or ISO string
        tz: Timezone to convert aware datetimes into before truncating

    Returns:
        Day key string

    Raises:
        ValidationError: If a string value is not an ISO date
    """
    if isinstance(value, datetime):
        if value.tzinfo is not None and tz:
            value = value.astimezone(ZoneInfo(tz))
        return value.date().strftime(DATE_KEY_FORMAT)
    if isinstance(value, date):
        return value.strftime(DATE_KEY_FORMAT)
    return to_date_key(parse_date_key(value))


def parse_date_key(value: str) -> date:
    """
    Parse a day key (or a longer ISO timestamp) into a date

    Only the leading YYYY-MM-DD part is used.
    """
    try:
        return datetime.strptime(value[:10], DATE_KEY_FORMAT).date()
    except (TypeError, ValueError):
        raise ValidationError(
            message=f"Invalid date format: '{value}'. Must be YYYY-MM-DD",
            field="date",
            value=value
        )


def enumerate_days(start: date, end: date) -> list[date]:
    """
    Inclusive day-by-day range

    Returns:
        Dates from start to end, ascending; empty if end is before start
    """
    span = (end - start).days
    return [start + timedelta(days=i) for i in range(span + 1)]


def quarter_date_range(year: int, quarter: int) -> tuple[date, date]:
    """
    First and last day of a calendar quarter

    Quarter 1 covers January-March, 2 April-June, and so on.

    Raises:
        ValidationError: If quarter is not 1-4
    """
    if quarter not in (1, 2, 3, 4):
        raise ValidationError(
            message="Quarter must be between 1 and 4",
            field="quarter",
            value=quarter
        )
    start_month = (quarter - 1) * 3 + 1
    end_month = start_month + 2
    last_day = calendar.monthrange(year, end_month)[1]
    return date(year, start_month, 1), date(year, end_month, last_day)
