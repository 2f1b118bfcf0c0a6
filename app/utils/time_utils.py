"""
Local Time Utility

Helpers for the platform's local timezone (Morocco by default).
Database timestamps are stored as naive UTC; these helpers convert between
the two and compute reporting periods.
"""

from datetime import datetime, timedelta
from typing import Tuple

import pytz

from app.config import LOCAL_TIMEZONE

LOCAL_TZ = pytz.timezone(LOCAL_TIMEZONE)


def get_current_local_time() -> datetime:
    """
    Get current time in the platform timezone.

    Returns:
        datetime: Current timezone-aware datetime
    """
    return datetime.now(LOCAL_TZ)


def to_local(dt: datetime) -> datetime:
    """
    Convert a datetime to the platform timezone.

    Args:
        dt: Datetime to convert (naive values are assumed to be UTC)
    """
    if dt.tzinfo is None:
        dt = pytz.utc.localize(dt)
    return dt.astimezone(LOCAL_TZ)


def to_naive_utc(dt: datetime) -> datetime:
    """Convert an aware datetime to naive UTC, the storage format of timestamps."""
    if dt.tzinfo is None:
        return dt
    return dt.astimezone(pytz.utc).replace(tzinfo=None)


def hours_ago(hours: int, now: datetime = None) -> datetime:
    """Naive UTC cutoff `hours` before now."""
    if now is None:
        now = datetime.utcnow()
    return to_naive_utc(now) - timedelta(hours=hours)


def period_bounds(days: int, now: datetime = None) -> Tuple[datetime, datetime, datetime, datetime]:
    """
    Compute the current period and the previous period of equal length.

    The current period ends at the end of today (local time) and spans `days`
    local days; the previous period ends right before it.

    Args:
        days: Period length in days (must be positive)
        now: Reference time (defaults to now in the local timezone)

    Returns:
        tuple: (current_start, current_end, previous_start, previous_end) as naive UTC

    Example:
        days=7 on 2024-03-10 -> current 03-04 00:00 .. 03-10 23:59:59,
        previous 02-26 00:00 .. 03-03 23:59:59 (local)
    """
    if days <= 0:
        raise ValueError("days must be positive")

    local_now = get_current_local_time() if now is None else to_local(now)

    start_of_today = LOCAL_TZ.localize(
        datetime(local_now.year, local_now.month, local_now.day)
    )
    current_end = start_of_today + timedelta(days=1) - timedelta(microseconds=1)
    current_start = start_of_today - timedelta(days=days - 1)
    previous_end = current_start - timedelta(microseconds=1)
    previous_start = current_start - timedelta(days=days)

    return (
        to_naive_utc(current_start),
        to_naive_utc(current_end),
        to_naive_utc(previous_start),
        to_naive_utc(previous_end),
    )
