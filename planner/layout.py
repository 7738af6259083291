"""Timetable geometry: overlap columns and the visible hour range.

All positions are fractions of the column (0.0-1.0) so any renderer can
scale them to its own width and height.
"""

import math
from dataclasses import dataclass

from .models import ClassEntry
from .timeutil import clamp, is_valid_minutes

GRID_DEFAULT_BOUNDS = (6, 24)
GRID_LATEST_START_HOUR = 6
GRID_EARLIEST_END_HOUR = 18
MIN_VISIBLE_FRACTION = 0.02


@dataclass(frozen=True)
class GridBounds:
    """Visible hour range of the timetable, ``[start_hour, end_hour)``."""

    start_hour: int
    end_hour: int

    @property
    def start_minutes(self) -> int:
        return self.start_hour * 60

    @property
    def span_minutes(self) -> int:
        return (self.end_hour - self.start_hour) * 60

    @property
    def hours(self) -> list[int]:
        return list(range(self.start_hour, self.end_hour))


@dataclass(frozen=True)
class Slot:
    """Horizontal placement of an entry inside its day column."""

    entry: ClassEntry
    width: float
    left: float


@dataclass(frozen=True)
class Block:
    """Full placement of an entry: horizontal slot plus vertical extent."""

    entry: ClassEntry
    width: float
    left: float
    top: float
    height: float


def _has_valid_times(entry: ClassEntry) -> bool:
    return is_valid_minutes(entry.start_minutes) and is_valid_minutes(entry.end_minutes)


def overlap_groups(entries: list[ClassEntry]) -> list[list[ClassEntry]]:
    """Partition one day's entries into overlap groups.

    Entries are visited in start order and each joins the first group that
    already holds an entry it overlaps, or opens a new group. This is a
    single pass: A-B and B-C overlapping puts A, B and C in one group even
    when A and C never meet.
    """
    groups: list[list[ClassEntry]] = []
    ordered = sorted((e for e in entries if _has_valid_times(e)), key=lambda e: e.start_minutes)
    for entry in ordered:
        for group in groups:
            if any(entry.overlaps(member) for member in group):
                group.append(entry)
                break
        else:
            groups.append([entry])
    return groups


def layout_day(entries: list[ClassEntry]) -> list[Slot]:
    """Assign each entry a side-by-side slot within its overlap group.

    A group of ``k`` entries splits the column into ``k`` equal slots,
    filled in the group's insertion order.

    Args:
        entries: Classes of a single day, in any order.

    Returns:
        One slot per entry with parsable times, groups in start order.
    """
    slots: list[Slot] = []
    for group in overlap_groups(entries):
        size = len(group)
        for index, entry in enumerate(group):
            slots.append(Slot(entry=entry, width=1 / size, left=index / size))
    return slots


def grid_bounds(classes: list[ClassEntry]) -> GridBounds:
    """Derive the visible hour range from the classes on the grid.

    The range always covers 06:00-19:00 and widens to fit every entry.
    Without any classes it defaults to 06:00-24:00.
    """
    usable = [c for c in classes if _has_valid_times(c)]
    if not usable:
        return GridBounds(*GRID_DEFAULT_BOUNDS)

    earliest = min(math.floor(c.start_minutes / 60) for c in usable)
    latest = max(math.ceil(c.end_minutes / 60) for c in usable)
    return GridBounds(
        start_hour=max(0, min(GRID_LATEST_START_HOUR, earliest)),
        end_hour=min(24, max(GRID_EARLIEST_END_HOUR, latest) + 1),
    )


def vertical_extent(entry: ClassEntry, bounds: GridBounds) -> tuple[float, float]:
    """Return ``(top, height)`` of an entry as fractions of the grid height."""
    span = bounds.span_minutes
    start = entry.start_minutes
    top = clamp((start - bounds.start_minutes) / span, 0.0, 1.0)
    height = max((entry.end_minutes - start) / span, MIN_VISIBLE_FRACTION)
    return top, height


def place_blocks(entries: list[ClassEntry], bounds: GridBounds) -> list[Block]:
    """Combine overlap slots with vertical placement for one day column."""
    blocks: list[Block] = []
    for slot in layout_day(entries):
        top, height = vertical_extent(slot.entry, bounds)
        blocks.append(Block(
            entry=slot.entry,
            width=slot.width,
            left=slot.left,
            top=top,
            height=height,
        ))
    return blocks


def now_marker(bounds: GridBounds, minute: int) -> float:
    """Vertical position of the current-time line."""
    return clamp((minute - bounds.start_minutes) / bounds.span_minutes, 0.0, 1.0)
