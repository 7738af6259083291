"""Queries over the weekly timetable relative to a sampled instant."""

from typing import Optional

from .models import ClassEntry, Instant, Weekday
from .timeutil import clamp, is_valid_minutes, round_half_up

TOMORROW_PREVIEW_LIMIT = 6


def classes_for_day(classes: list[ClassEntry], weekday: int) -> list[ClassEntry]:
    """Return the entries held on ``weekday``, ordered by start time.

    Start times are zero-padded ``HH:MM`` strings, so ordering them as
    strings matches ordering them by minutes. The sort is stable, entries
    sharing a start time keep their stored order.
    """
    return sorted((c for c in classes if c.weekday == weekday), key=lambda c: c.start)


def weekly_timetable(classes: list[ClassEntry]) -> dict[Weekday, list[ClassEntry]]:
    """Group all entries by weekday, each day ordered by start time."""
    return {day: classes_for_day(classes, day) for day in Weekday}


def current_class(classes: list[ClassEntry], now: Instant) -> Optional[ClassEntry]:
    """Return the class in progress at ``now``, if any.

    When several entries overlap the current minute the first one in
    start order is returned, not the shortest or most recent one.
    """
    for entry in classes_for_day(classes, now.weekday):
        if entry.start_minutes <= now.minute < entry.end_minutes:
            return entry
    return None


def next_class(classes: list[ClassEntry], now: Instant) -> Optional[ClassEntry]:
    """Return the next class to start after ``now``.

    Looks at the rest of today first, then at tomorrow's first class.
    Days after tomorrow are never searched.
    """
    for entry in classes_for_day(classes, now.weekday):
        if entry.start_minutes > now.minute:
            return entry

    tomorrow = classes_for_day(classes, now.tomorrow)
    return tomorrow[0] if tomorrow else None


def progress_fraction(entry: ClassEntry, minute: int) -> int:
    """Elapsed share of ``entry`` at ``minute`` as an integer percentage.

    Args:
        entry: The class to measure.
        minute: Current minute of the day.

    Returns:
        0-100, or 0 for a degenerate entry with no usable duration.
    """
    start = entry.start_minutes
    end = entry.end_minutes
    if not (is_valid_minutes(start) and is_valid_minutes(end)):
        return 0
    total = end - start
    if total <= 0:
        return 0
    elapsed = clamp(minute - start, 0, total)
    return round_half_up(elapsed / total * 100)


def tomorrow_preview(
    classes: list[ClassEntry],
    now: Instant,
    limit: int = TOMORROW_PREVIEW_LIMIT,
) -> list[ClassEntry]:
    """Return up to ``limit`` of tomorrow's classes in start order."""
    return classes_for_day(classes, now.tomorrow)[:limit]
