"""Daily study-time log and its weekly/historical aggregates."""

import math
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Iterable, Optional

from .timeutil import MINUTES_PER_DAY, Number, clamp, date_key, round_half_up, start_of_week_monday


@dataclass(frozen=True)
class HistoryDay:
    """Logged minutes for one calendar day."""

    date: str  # "YYYY-MM-DD"
    minutes: int


@dataclass(frozen=True)
class SummaryStats:
    """Aggregate figures over a window of days."""

    total: int
    average: float
    max: int
    active_days: int


class StudyLog:
    """Manually entered study minutes keyed by calendar date.

    Writing a date replaces its previous value. Dates are never removed;
    a missing date counts as zero minutes.
    """

    MAX_DAY_MINUTES = MINUTES_PER_DAY

    def __init__(self, entries: Optional[dict[str, int]] = None) -> None:
        """Initialize the log.

        Args:
            entries: Existing ``{"YYYY-MM-DD": minutes}`` mapping. Values
                are re-clamped on load.
        """
        self._entries: dict[str, int] = {}
        for key, value in (entries or {}).items():
            self.set_minutes(key, value)

    def __len__(self) -> int:
        return len(self._entries)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, StudyLog):
            return NotImplemented
        return self._entries == other._entries

    def minutes_on(self, key: str) -> int:
        return self._entries.get(key, 0)

    def set_minutes(self, key: str, value: Number) -> int:
        """Overwrite the minutes logged for ``key``.

        The value is clamped to one day and rounded to whole minutes; NaN
        stores zero.

        Returns:
            The value actually stored.
        """
        if isinstance(value, float) and math.isnan(value):
            value = 0
        stored = round_half_up(clamp(value, 0, self.MAX_DAY_MINUTES))
        self._entries[key] = stored
        return stored

    def weekly_minutes(self, reference: date) -> list[int]:
        """Minutes for Monday..Sunday of the week containing ``reference``."""
        monday = start_of_week_monday(reference)
        return [self.minutes_on(date_key(monday + timedelta(days=i))) for i in range(7)]

    def history_window(self, days: int, reference: date) -> list[HistoryDay]:
        """Return ``days`` consecutive days ending at ``reference``, oldest first."""
        return [
            HistoryDay(date=key, minutes=self.minutes_on(key))
            for key in (date_key(reference - timedelta(days=offset)) for offset in range(days - 1, -1, -1))
        ]

    def to_dict(self) -> dict[str, int]:
        return dict(self._entries)


def summary_stats(window: Iterable[HistoryDay]) -> SummaryStats:
    minutes = [day.minutes for day in window]
    total = sum(minutes)
    return SummaryStats(
        total=total,
        average=total / len(minutes) if minutes else 0,
        max=max(minutes) if minutes else 0,
        active_days=sum(1 for m in minutes if m > 0),
    )


def longest_day(values: list[int]) -> int:
    """Index of the largest value; ties go to the earliest index."""
    best = 0
    best_value = -1
    for index, value in enumerate(values):
        if value > best_value:
            best = index
            best_value = value
    return best


def goal_progress(minutes: int, goal: int) -> float:
    """Percentage of the daily goal reached, capped at 100."""
    if goal <= 0:
        return 100.0
    return min(100.0, minutes / goal * 100)
