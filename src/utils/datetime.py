# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""DateTime utilities.

All subscription windows are computed and compared in UTC.

Design Decisions:
-----------------
1. All timestamps are stored in UTC (PostgreSQL TIMESTAMPTZ)
2. All Python datetimes are timezone-aware (with timezone.utc)
3. A calendar date chosen by an administrator means midnight UTC of that
   date, never the caller's local midnight

Usage:
------
    from src.utils.datetime import utc_now

    now = utc_now()
    end = days_from_now(30)
"""

from datetime import date, datetime, time, timedelta, timezone


def utc_now() -> datetime:
    """Get current UTC time as timezone-aware datetime.

    Returns:
        Timezone-aware datetime representing current UTC time.
    """
    return datetime.now(timezone.utc)


def ensure_utc(dt: datetime | None) -> datetime | None:
    """Ensure a datetime is timezone-aware UTC.

    Args:
        dt: A datetime object (naive or aware) or None.

    Returns:
        Timezone-aware UTC datetime or None.

    Note:
        - If dt is None, returns None
        - If dt is naive, assumes UTC and adds tzinfo
        - If dt is aware, converts to UTC
    """
    if dt is None:
        return None

    if dt.tzinfo is None:
        # Naive datetime - assume UTC
        return dt.replace(tzinfo=timezone.utc)

    return dt.astimezone(timezone.utc)


def days_from_now(days: int, now: datetime | None = None) -> datetime:
    """Get a datetime N whole days after ``now``.

    Args:
        days: Number of days to add.
        now: Reference time, defaults to the current UTC time.

    Returns:
        Timezone-aware UTC datetime.
    """
    reference = ensure_utc(now) if now is not None else utc_now()
    return reference + timedelta(days=days)


def utc_midnight(day: date) -> datetime:
    """Get midnight UTC at the start of a calendar date.

    Args:
        day: Calendar date.

    Returns:
        Timezone-aware UTC datetime at 00:00:00.
    """
    return datetime.combine(day, time.min, tzinfo=timezone.utc)


def utc_day_bounds(moment: datetime) -> tuple[datetime, datetime]:
    """Get the [start, end) bounds of the UTC day containing ``moment``.

    Args:
        moment: Any datetime.

    Returns:
        Tuple of (midnight of that day, midnight of the next day).
    """
    start = utc_midnight(ensure_utc(moment).date())
    return start, start + timedelta(days=1)
