"""
Calendar date helpers.

All scheduling math works on calendar dates (no time of day). Values coming
from storage or HTTP payloads may be ``date``, ``datetime`` or ISO strings;
``to_calendar_date`` folds them into a ``date`` or returns None.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Any

ONE_DAY = timedelta(days=1)


def _local_date(value: datetime) -> date:
    if value.tzinfo is not None:
        return value.astimezone().date()
    return value.date()


def to_calendar_date(value: Any) -> date | None:
    """
    Normalize a loosely typed date value to a calendar date.

    Accepts ``date``, ``datetime`` and ``YYYY-MM-DD`` or full ISO timestamps.
    Values carrying an offset (or ``Z``) are converted to local time before
    the date is taken; naive values keep their own wall-clock date.
    Anything else returns None.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return _local_date(value)
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None

    text = value.strip()
    if not text:
        return None
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"

    try:
        return _local_date(datetime.fromisoformat(text))
    except ValueError:
        pass
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        return None


def local_midnight(now: date | datetime) -> date:
    """Local calendar date of ``now``."""
    if isinstance(now, datetime):
        return _local_date(now)
    return now


def js_weekday(day: date) -> int:
    """Weekday with Sunday = 0 .. Saturday = 6."""
    return day.isoweekday() % 7
