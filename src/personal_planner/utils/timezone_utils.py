"""
Timezone and calendar date utilities.

Daily keys are local calendar dates (``YYYY-MM-DD``) in the configured
timezone, never UTC dates.
"""

import math
from datetime import date, datetime, time

import pytz
from dateutil import parser

SECONDS_PER_DAY = 86400
MIDDAY = time(12, 0)


def local_today(timezone_str: str = "Europe/Rome", now: datetime | None = None) -> date:
    """
    Get the current calendar date in a timezone.

    Args:
        timezone_str: Timezone string (e.g., "Europe/Rome").
        now: Optional aware datetime to use instead of the current time.

    Returns:
        Local calendar date.
    """
    tz = pytz.timezone(timezone_str)

    if now is None:
        now = datetime.now(pytz.utc)
    elif now.tzinfo is None:
        now = pytz.utc.localize(now)

    return now.astimezone(tz).date()


def parse_iso_date(date_key: str) -> date | None:
    """Parse a ``YYYY-MM-DD`` key, returning None for impossible dates."""
    try:
        return date.fromisoformat(date_key)
    except (TypeError, ValueError):
        return None


def parse_date_argument(value: str) -> str:
    """
    Parse a user supplied date in any common format into an ISO key.

    Args:
        value: Date string (e.g., "2024-01-15", "15 Jan 2024", "Jan 15").

    Returns:
        ISO date key.

    Raises:
        ValueError: If the string cannot be parsed as a date.
    """
    try:
        parsed = parser.parse(value, default=datetime.combine(date.today(), MIDDAY))
    except (parser.ParserError, OverflowError) as e:
        raise ValueError(f"Invalid date: {value!r}") from e

    return parsed.date().isoformat()


def days_between_middays(start: date, end: date) -> int:
    """
    Count the days from start to end, rounded up.

    Both dates are anchored at midday so that a DST transition in between
    never shifts the result by one.

    Args:
        start: Start date.
        end: End date.

    Returns:
        Whole days (negative when end is before start).
    """
    delta = datetime.combine(end, MIDDAY) - datetime.combine(start, MIDDAY)
    return math.ceil(delta.total_seconds() / SECONDS_PER_DAY)


