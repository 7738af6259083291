"""Time-of-day and calendar helpers shared by the planner modules."""

import math
from datetime import date, datetime, timedelta
from typing import Union

MINUTES_PER_DAY = 24 * 60

Number = Union[int, float]


def parse_time(time_str: str) -> Number:
    """Convert an ``HH:MM`` string into minutes since midnight.

    The input is not validated. Anything that does not split into two
    integer fields produces ``math.nan`` instead of raising, so callers
    must check the result with :func:`is_valid_minutes`.

    Args:
        time_str: Time string like "09:30".

    Returns:
        Minutes since midnight, or NaN for malformed input.
    """
    try:
        hour_str, minute_str = str(time_str).split(":")
        return int(hour_str) * 60 + int(minute_str)
    except ValueError:
        return math.nan


def format_time(minutes: int) -> str:
    """Convert minutes since midnight into a zero-padded ``HH:MM`` string."""
    hour, minute = divmod(int(minutes), 60)
    return f"{hour:02d}:{minute:02d}"


def is_valid_minutes(value: Number) -> bool:
    """Return True if ``value`` is a usable (non-NaN) minute count."""
    return not (isinstance(value, float) and math.isnan(value))


def clamp(n: Number, lo: Number, hi: Number) -> Number:
    return max(lo, min(hi, n))


def round_half_up(value: float) -> int:
    # Python's round() rounds halves to even; percentages and logged
    # minutes round .5 upwards.
    return math.floor(value + 0.5)


def date_key(day: date) -> str:
    """Format a local calendar date as ``YYYY-MM-DD``."""
    if isinstance(day, datetime):
        day = day.date()
    return f"{day.year:04d}-{day.month:02d}-{day.day:02d}"


def start_of_week_monday(day: date) -> date:
    """Return the Monday on or before ``day``.

    A datetime argument yields midnight of that Monday; a plain date
    yields the Monday date.
    """
    monday = day - timedelta(days=day.weekday())
    if isinstance(monday, datetime):
        return monday.replace(hour=0, minute=0, second=0, microsecond=0)
    return monday
