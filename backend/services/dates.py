"""
dates.py — Calendar-day helpers.
Every day comparison in the app uses the server's local calendar, never a UTC truncation.
"""

from datetime import date, datetime, timedelta

from services.errors import ValidationError


def local_now() -> datetime:
    return datetime.now()


def date_key(value: datetime | date | None = None) -> str:
    """YYYY-MM-DD string for a timestamp or date (default: today)."""
    value = value or local_now()
    if isinstance(value, datetime):
        value = value.date()
    return value.isoformat()


def yesterday_key(now: datetime | None = None) -> str:
    return date_key((now or local_now()) - timedelta(days=1))


def parse_date_key(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid date '{value}', expected YYYY-MM-DD")


def weekday_index(value: str) -> int:
    """Weekday of a YYYY-MM-DD string with 0 = Sunday ... 6 = Saturday."""
    return (parse_date_key(value).weekday() + 1) % 7


def same_day(a: datetime | None, b: datetime) -> bool:
    return a is not None and a.date() == b.date()
