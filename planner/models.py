"""Data models for the weekly timetable and to-do list."""

from dataclasses import asdict, dataclass, field
from datetime import date, datetime
from enum import IntEnum
from typing import Any, Optional

from .timeutil import Number, parse_time


class Weekday(IntEnum):
    """Canonical day numbering used everywhere in the planner (Monday=0)."""

    MONDAY = 0
    TUESDAY = 1
    WEDNESDAY = 2
    THURSDAY = 3
    FRIDAY = 4
    SATURDAY = 5
    SUNDAY = 6

    @property
    def short_name(self) -> str:
        return self.name[:3].title()

    @property
    def label(self) -> str:
        return self.name.title()

    def next(self) -> "Weekday":
        """Return the following day, wrapping Sunday to Monday."""
        return Weekday((self + 1) % 7)

    @classmethod
    def parse(cls, value: str) -> "Weekday":
        """Parse a day given as an index ("0".."6") or a name ("mon", "Monday").

        Raises:
            ValueError: If the value names no weekday.
        """
        text = value.strip().lower()
        if text.isdigit() and 0 <= int(text) <= 6:
            return cls(int(text))
        for day in cls:
            if len(text) >= 2 and day.name.lower().startswith(text):
                return day
        raise ValueError(f"Unknown weekday: '{value}'")


@dataclass
class ClassEntry:
    """A weekly recurring class in the timetable.

    ``end > start`` is only enforced when entries are created or edited
    through :class:`planner.state.AppState`; instances loaded from storage
    may violate it.
    """

    id: str
    name: str
    color: str
    weekday: int  # 0-6: Monday-Sunday
    start: str  # "HH:MM"
    end: str  # "HH:MM"

    @property
    def start_minutes(self) -> Number:
        return parse_time(self.start)

    @property
    def end_minutes(self) -> Number:
        return parse_time(self.end)

    def overlaps(self, other: "ClassEntry") -> bool:
        """True if the two entries share any moment of the day."""
        return (
            self.start_minutes < other.end_minutes
            and self.end_minutes > other.start_minutes
        )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ClassEntry":
        """Build an entry from its serialized form.

        Older snapshots store the weekday under ``day``; both keys are read.

        Raises:
            ValueError: If a required field is missing or has the wrong type.
        """
        if not isinstance(data, dict):
            raise ValueError("Class entry must be an object")
        weekday = data.get("weekday", data.get("day"))
        if isinstance(weekday, bool) or not isinstance(weekday, int):
            raise ValueError(f"Class entry has invalid weekday: {weekday!r}")
        try:
            return cls(
                id=str(data["id"]),
                name=str(data["name"]),
                color=str(data.get("color", "")),
                weekday=weekday,
                start=str(data["start"]),
                end=str(data["end"]),
            )
        except KeyError as e:
            raise ValueError(f"Class entry is missing field {e}") from None


@dataclass
class TodoItem:
    """A single to-do list entry."""

    id: str
    text: str
    done: bool = field(default=False)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TodoItem":
        if not isinstance(data, dict):
            raise ValueError("To-do item must be an object")
        try:
            return cls(id=str(data["id"]), text=str(data["text"]), done=bool(data.get("done", False)))
        except KeyError as e:
            raise ValueError(f"To-do item is missing field {e}") from None


@dataclass(frozen=True)
class Instant:
    """A sampled wall-clock moment: calendar date, weekday and minute of day."""

    date: date
    weekday: Weekday
    minute: int

    @classmethod
    def sample(cls, now: Optional[datetime] = None) -> "Instant":
        """Capture ``now`` (default: the current local time).

        This is the only place a platform weekday is converted into
        :class:`Weekday`.
        """
        if now is None:
            now = datetime.now()
        return cls(
            date=now.date(),
            weekday=Weekday(now.weekday()),
            minute=now.hour * 60 + now.minute,
        )

    @property
    def tomorrow(self) -> Weekday:
        return self.weekday.next()
