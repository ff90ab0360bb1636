"""
Date Helpers

All datetimes in the core are timezone-aware UTC. Calendar boundaries are
computed in UTC so the same inputs give the same budget windows on any host.

Boundary helpers that can fail return Optional instead of raising; each
documents its fallback.
"""

import calendar
from datetime import datetime, timedelta, timezone
from typing import Optional

DISPLAY_FORMAT = "%b %d, %Y"
API_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Interpret naive datetimes as UTC; convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def start_of_month(value: datetime) -> datetime:
    value = as_utc(value)
    return value.replace(day=1, hour=0, minute=0, second=0, microsecond=0)


def end_of_month(value: datetime) -> datetime:
    """Last second of the month containing `value`."""
    start = start_of_month(value)
    days = calendar.monthrange(start.year, start.month)[1]
    return start + timedelta(days=days) - timedelta(seconds=1)


def start_of_week(value: datetime) -> datetime:
    """Monday 00:00 of the ISO week containing `value`."""
    value = as_utc(value)
    midnight = value.replace(hour=0, minute=0, second=0, microsecond=0)
    return midnight - timedelta(days=midnight.weekday())


def end_of_week(value: datetime) -> datetime:
    """Last second of the ISO week containing `value`."""
    return start_of_week(value) + timedelta(days=7) - timedelta(seconds=1)


def add_months(value: datetime, months: int) -> datetime:
    """
    Shift by whole months.

    When the target month is shorter, the day is clamped to its last day
    (Jan 31 + 1 month -> Feb 28/29).
    """
    value = as_utc(value)
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)


def months_between(start: datetime, end: datetime) -> int:
    """Whole months from `start` to `end` (negative when end is earlier)."""
    start, end = as_utc(start), as_utc(end)
    months = (end.year - start.year) * 12 + (end.month - start.month)
    if months > 0 and add_months(start, months) > end:
        months -= 1
    elif months < 0 and add_months(start, months) < end:
        months += 1
    return months


def is_same_month(first: datetime, second: datetime) -> bool:
    first, second = as_utc(first), as_utc(second)
    return (first.year, first.month) == (second.year, second.month)


def period_bounds(
    period: str,
    reference: datetime,
    custom_end: Optional[datetime] = None,
) -> Optional[tuple[datetime, datetime]]:
    """
    Compute the (start, end) window for a budget period.

    - "monthly": calendar month containing `reference`
    - "weekly": ISO week containing `reference`
    - "custom": `reference` to `custom_end`

    Returns None when no valid window exists: an unknown period, a custom
    period without an end, or a custom end not after the start.
    """
    if period == "monthly":
        return start_of_month(reference), end_of_month(reference)
    if period == "weekly":
        return start_of_week(reference), end_of_week(reference)
    if period == "custom":
        if custom_end is None:
            return None
        start, end = as_utc(reference), as_utc(custom_end)
        if end <= start:
            return None
        return start, end
    return None


def format_for_display(value: datetime) -> str:
    """e.g. "Jan 05, 2025"."""
    return as_utc(value).strftime(DISPLAY_FORMAT)


def format_for_api(value: datetime) -> str:
    return as_utc(value).strftime(API_FORMAT)


def parse_api_date(text: str) -> Optional[datetime]:
    """Parse an API-format string; None when it does not match."""
    try:
        return datetime.strptime(text, API_FORMAT).replace(tzinfo=timezone.utc)
    except ValueError:
        return None
