"""
Calendar date helpers.

Every date in the booking domain is a calendar date normalized to UTC. A
"YYYY-MM-DD" string always maps to the same day regardless of server
timezone, and "today" is the current UTC date everywhere.
"""

import re
from datetime import date, datetime, timedelta, timezone

DATE_FORMAT = '%Y-%m-%d'

DATE_PATTERN = re.compile(r'\d{4}-\d{2}-\d{2}')
DATETIME_PATTERN = re.compile(
    r'\d{4}-\d{2}-\d{2}[T ]\d{2}:\d{2}(:\d{2}(\.(\d{3}|\d{6}))?)?([Zz]|[+-]\d{2}:\d{2})?'
)


def get_today() -> date:
    """Get today's date in UTC."""
    return datetime.now(timezone.utc).date()


def get_now() -> datetime:
    """Get current timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def now_timestamp() -> str:
    """Current UTC time formatted for TIMESTAMP columns."""
    return get_now().strftime('%Y-%m-%d %H:%M:%S')


def parse_date(value) -> date:
    """
    Normalize a date-only value to a date.

    Args:
        value: date, datetime, 'YYYY-MM-DD' string, or an ISO datetime
            string ('2025-06-01T23:00:00-05:00'); datetimes with an offset
            are converted to UTC first, naive ones are taken as UTC

    Returns:
        date

    Raises:
        ValueError: If the value is empty or not a valid calendar date
    """
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.date()
    if isinstance(value, date):
        return value
    if not value or not isinstance(value, str):
        raise ValueError(f'Invalid date: {value!r}')

    text = value.strip()
    if DATE_PATTERN.fullmatch(text):
        return datetime.strptime(text, DATE_FORMAT).date()
    if not DATETIME_PATTERN.fullmatch(text):
        raise ValueError(f'Invalid date: {value!r}')

    # fromisoformat only learned the 'Z' suffix in 3.11
    if text.endswith(('Z', 'z')):
        text = text[:-1] + '+00:00'
    return parse_date(datetime.fromisoformat(text))


def format_date(value) -> str:
    """Format a date-only value as 'YYYY-MM-DD'."""
    return parse_date(value).strftime(DATE_FORMAT)


def nights_between(start, end) -> int:
    """Number of nights in [start, end)."""
    return (parse_date(end) - parse_date(start)).days


def add_days(value, days: int) -> date:
    """Shift a date-only value by a number of days."""
    return parse_date(value) + timedelta(days=days)
