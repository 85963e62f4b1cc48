"""
Date and time utilities shared by the scheduling services.

Dates travel as ``YYYY-MM-DD`` strings and times as ``HH:MM`` or
``HH:MM:SS`` strings. Times are naive wall-clock values in the business's
local time; only audit timestamps (created_at/updated_at) are UTC.
"""

import logging
from datetime import date, datetime, time, timedelta, timezone
from typing import Optional

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    """Get the current timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def parse_date_string(date_str: str) -> date:
    """
    Parse a date string in YYYY-MM-DD format.

    Args:
        date_str: Date string in YYYY-MM-DD format

    Returns:
        Parsed date object

    Raises:
        ValueError: If the string is not a valid YYYY-MM-DD date
    """
    try:
        return datetime.strptime(date_str, "%Y-%m-%d").date()
    except (TypeError, ValueError) as e:
        raise ValueError(f"Invalid date format (expected YYYY-MM-DD): {date_str}") from e


def parse_time_string(time_str: str) -> time:
    """
    Parse a time string in HH:MM or HH:MM:SS format.

    A seconds component is accepted and kept; anything else is rejected.

    Raises:
        ValueError: If the string is not a valid time
    """
    for fmt in ("%H:%M", "%H:%M:%S"):
        try:
            return datetime.strptime(time_str, fmt).time()
        except (TypeError, ValueError):
            continue
    raise ValueError(f"Invalid time format (expected HH:MM or HH:MM:SS): {time_str}")


def format_time_hhmm(value: time) -> str:
    """Format a time for display, dropping seconds."""
    return value.strftime("%H:%M")


def format_slot_label(start: time, end: time) -> str:
    """Build the display label of a slot, e.g. ``09:00 - 10:00``."""
    return f"{format_time_hhmm(start)} - {format_time_hhmm(end)}"


def minutes_since_midnight(value: time) -> int:
    """Minutes elapsed since 00:00 (seconds are ignored)."""
    return value.hour * 60 + value.minute


def minutes_between(start: time, end: time) -> int:
    """Whole minutes from ``start`` to ``end`` on the same day (negative if end is earlier)."""
    return minutes_since_midnight(end) - minutes_since_midnight(start)


def add_minutes(value: time, minutes: int) -> Optional[time]:
    """
    Add minutes to a wall-clock time.

    Returns:
        The shifted time, or None when the result would cross midnight
    """
    shifted = datetime.combine(date.min, value) + timedelta(minutes=minutes)
    if shifted.date() != date.min:
        return None
    return shifted.time()


def sunday_based_weekday(day: date) -> int:
    """
    Day of week with Sunday = 0 ... Saturday = 6.

    Python's ``weekday()`` uses Monday = 0; operating hours are keyed the
    other way around.
    """
    return (day.weekday() + 1) % 7
