"""Application state and the mutation operations that persist it."""

import json
import random
import re
import string
from dataclasses import dataclass, field
from typing import Any, Optional

from store.base import KeyValueStore

from .models import ClassEntry, Instant, TodoItem
from .studylog import StudyLog
from .timeutil import Number, clamp, date_key, format_time, is_valid_minutes, parse_time, round_half_up

CLASSES_KEY = "studyplan_classes"
TODOS_KEY = "studyplan_todos"
STUDY_LOG_KEY = "studyplan_studylog"
GOAL_KEY = "studyplan_goal"
DARK_KEY = "studyplan_dark"

COLORS = ["#3b82f6", "#8b5cf6", "#ef4444", "#f59e0b", "#10b981", "#06b6d4", "#ec4899"]

DEFAULT_GOAL = 300
MIN_GOAL = 30
MAX_GOAL = 24 * 60

ID_ALPHABET = string.digits + string.ascii_lowercase
ID_LENGTH = 7

_TIME_RE = re.compile(r"^(\d{1,2}):(\d{2})$")
_COLOR_RE = re.compile(r"^#[0-9a-fA-F]{6}$")


def coerce_classes(raw: Any) -> list[ClassEntry]:
    """Convert a deserialized class list back into entries.

    Raises:
        ValueError: If ``raw`` is not a list of class objects.
    """
    if not isinstance(raw, list):
        raise ValueError("Expected a list of classes")
    return [ClassEntry.from_dict(item) for item in raw]


def coerce_todos(raw: Any) -> list[TodoItem]:
    if not isinstance(raw, list):
        raise ValueError("Expected a list of to-do items")
    return [TodoItem.from_dict(item) for item in raw]


def coerce_study_log(raw: Any) -> StudyLog:
    """Convert a deserialized ``{date: minutes}`` mapping into a StudyLog.

    Raises:
        ValueError: If ``raw`` is not a mapping of strings to numbers.
    """
    if not isinstance(raw, dict):
        raise ValueError("Expected a mapping of dates to minutes")
    for key, value in raw.items():
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValueError(f"Invalid study minutes for {key}: {value!r}")
    return StudyLog(raw)


def coerce_goal(raw: Any) -> int:
    if isinstance(raw, bool) or not isinstance(raw, (int, float)) or not is_valid_minutes(raw):
        raise ValueError(f"Invalid goal: {raw!r}")
    return round_half_up(clamp(raw, MIN_GOAL, MAX_GOAL))


def coerce_dark(raw: Any) -> bool:
    if not isinstance(raw, bool):
        raise ValueError(f"Invalid theme flag: {raw!r}")
    return raw


def _load_key(store: KeyValueStore, key: str, coerce, default: Any) -> Any:
    """Read and decode one key, falling back to ``default`` on any problem."""
    blob = store.get(key)
    if blob is None:
        return default
    try:
        return coerce(json.loads(blob))
    except ValueError:
        return default


@dataclass
class AppState:
    """Everything the planner owns, plus the store it persists to.

    Read the collections freely, but change them only through the methods
    below: each one validates its input and writes the affected collection
    back to the bound store.
    """

    classes: list[ClassEntry] = field(default_factory=list)
    todos: list[TodoItem] = field(default_factory=list)
    study_log: StudyLog = field(default_factory=StudyLog)
    goal: int = DEFAULT_GOAL
    dark: bool = False
    store: Optional[KeyValueStore] = field(default=None, repr=False, compare=False)

    @classmethod
    def load(cls, store: KeyValueStore) -> "AppState":
        """Load the state once at startup and bind it to ``store``.

        Each key is decoded independently; a missing or malformed value
        falls back to the empty default for its type.
        """
        return cls(
            classes=_load_key(store, CLASSES_KEY, coerce_classes, []),
            todos=_load_key(store, TODOS_KEY, coerce_todos, []),
            study_log=_load_key(store, STUDY_LOG_KEY, coerce_study_log, StudyLog()),
            goal=_load_key(store, GOAL_KEY, coerce_goal, DEFAULT_GOAL),
            dark=_load_key(store, DARK_KEY, coerce_dark, False),
            store=store,
        )

    # -- persistence -------------------------------------------------------

    def _save(self, key: str, payload: Any) -> None:
        if self.store is not None:
            self.store.set(key, json.dumps(payload))

    def save_classes(self) -> None:
        self._save(CLASSES_KEY, [c.to_dict() for c in self.classes])

    def save_todos(self) -> None:
        self._save(TODOS_KEY, [t.to_dict() for t in self.todos])

    def save_study_log(self) -> None:
        self._save(STUDY_LOG_KEY, self.study_log.to_dict())

    def save_all(self) -> None:
        """Write every collection back to the store."""
        self.save_classes()
        self.save_todos()
        self.save_study_log()
        self._save(GOAL_KEY, self.goal)
        self._save(DARK_KEY, self.dark)

    # -- classes -----------------------------------------------------------

    def _new_id(self, taken: set[str]) -> str:
        while True:
            candidate = "".join(random.choices(ID_ALPHABET, k=ID_LENGTH))
            if candidate not in taken:
                return candidate

    def find_class(self, class_id: str) -> ClassEntry:
        """Return the entry with ``class_id``.

        Raises:
            KeyError: If no entry has that id.
        """
        for entry in self.classes:
            if entry.id == class_id:
                return entry
        raise KeyError(f"No class with id '{class_id}'")

    @staticmethod
    def _normalize_time(value: str, allow_end_of_day: bool = False) -> str:
        """Validate an ``H:MM`` or ``HH:MM`` time and return it zero-padded.

        ``24:00`` is accepted only when ``allow_end_of_day`` is set.

        Raises:
            ValueError: If the value is not a wall-clock time.
        """
        match = _TIME_RE.match(str(value).strip())
        if not match:
            raise ValueError(f"Invalid time: '{value}'. Expected HH:MM.")
        hour, minute = map(int, match.groups())
        if allow_end_of_day and (hour, minute) == (24, 0):
            return "24:00"
        if not (0 <= hour <= 23 and 0 <= minute <= 59):
            raise ValueError(f"Invalid time: '{value}'. Expected 00:00-23:59.")
        return format_time(hour * 60 + minute)

    @staticmethod
    def _normalize_color(value: str) -> str:
        if not _COLOR_RE.match(value.strip()):
            raise ValueError(f"Invalid color: '{value}'. Expected a hex color like #3b82f6.")
        return value.strip().lower()

    @classmethod
    def _validate_class(cls, name: str, weekday: int, start: str, end: str) -> tuple[str, str]:
        """Check a class candidate; returns its zero-padded ``(start, end)``."""
        if not name.strip():
            raise ValueError("Class name cannot be empty.")
        if isinstance(weekday, bool) or not isinstance(weekday, int) or not 0 <= weekday <= 6:
            raise ValueError(f"Weekday must be 0-6 (Mon-Sun), got {weekday!r}")
        start = cls._normalize_time(start)
        end = cls._normalize_time(end, allow_end_of_day=True)
        if parse_time(end) <= parse_time(start):
            raise ValueError("End time must be after start time.")
        return start, end

    def add_class(
        self,
        name: str,
        weekday: int,
        start: str,
        end: str,
        color: Optional[str] = None,
    ) -> ClassEntry:
        """Create a class with a fresh id and persist the class list.

        Args:
            name: Display name; surrounding whitespace is removed.
            weekday: 0-6, Monday first.
            start: Start time, "HH:MM".
            end: End time, "HH:MM"; must be after ``start``.
            color: Hex color, defaults to the first palette color.

        Returns:
            The created entry.

        Raises:
            ValueError: If the name is blank, a time is not a valid
                wall-clock time, the range is empty or the color is not
                ``#rrggbb``.
        """
        start, end = self._validate_class(name, weekday, start, end)
        color = self._normalize_color(color) if color else COLORS[0]
        entry = ClassEntry(
            id=self._new_id({c.id for c in self.classes}),
            name=name.strip(),
            color=color,
            weekday=int(weekday),
            start=start,
            end=end,
        )
        self.classes.append(entry)
        self.save_classes()
        return entry

    def edit_class(
        self,
        class_id: str,
        *,
        name: Optional[str] = None,
        weekday: Optional[int] = None,
        start: Optional[str] = None,
        end: Optional[str] = None,
        color: Optional[str] = None,
    ) -> ClassEntry:
        """Update an existing class in place; omitted fields keep their value.

        The merged entry is validated as a whole before anything changes.

        Raises:
            KeyError: If no entry has ``class_id``.
            ValueError: If the merged entry is invalid.
        """
        entry = self.find_class(class_id)
        new_name = entry.name if name is None else name
        new_weekday = entry.weekday if weekday is None else weekday
        new_start = entry.start if start is None else start
        new_end = entry.end if end is None else end
        new_start, new_end = self._validate_class(new_name, new_weekday, new_start, new_end)
        new_color = entry.color if color is None else self._normalize_color(color)

        entry.name = new_name.strip()
        entry.weekday = int(new_weekday)
        entry.start = new_start
        entry.end = new_end
        entry.color = new_color
        self.save_classes()
        return entry

    def delete_class(self, class_id: str) -> ClassEntry:
        """Remove a class by id.

        Raises:
            KeyError: If no entry has ``class_id``.
        """
        entry = self.find_class(class_id)
        self.classes = [c for c in self.classes if c.id != class_id]
        self.save_classes()
        return entry

    # -- to-do list --------------------------------------------------------

    def _find_todo(self, todo_id: str) -> TodoItem:
        for item in self.todos:
            if item.id == todo_id:
                return item
        raise KeyError(f"No to-do item with id '{todo_id}'")

    def add_todo(self, text: str) -> TodoItem:
        """Append a to-do item.

        Raises:
            ValueError: If ``text`` is blank.
        """
        text = text.strip()
        if not text:
            raise ValueError("To-do text cannot be empty.")
        item = TodoItem(id=self._new_id({t.id for t in self.todos}), text=text)
        self.todos.append(item)
        self.save_todos()
        return item

    def toggle_todo(self, todo_id: str) -> TodoItem:
        item = self._find_todo(todo_id)
        item.done = not item.done
        self.save_todos()
        return item

    def remove_todo(self, todo_id: str) -> TodoItem:
        item = self._find_todo(todo_id)
        self.todos = [t for t in self.todos if t.id != todo_id]
        self.save_todos()
        return item

    # -- study log, goal, theme -------------------------------------------

    def set_study_minutes(self, key: str, minutes: Number) -> int:
        """Overwrite the minutes logged for date ``key``; returns the stored value."""
        stored = self.study_log.set_minutes(key, minutes)
        self.save_study_log()
        return stored

    def set_today_minutes(self, now: Instant, minutes: Number) -> int:
        return self.set_study_minutes(date_key(now.date), minutes)

    def set_goal(self, minutes: Number) -> int:
        """Set the daily goal, clamped to 30 minutes .. 24 hours.

        Raises:
            ValueError: If ``minutes`` is not a number.
        """
        self.goal = coerce_goal(minutes)
        self._save(GOAL_KEY, self.goal)
        return self.goal

    def set_dark(self, dark: bool) -> None:
        self.dark = bool(dark)
        self._save(DARK_KEY, self.dark)

    # -- backup restore ----------------------------------------------------

    def restore(
        self,
        *,
        classes: Optional[list[ClassEntry]] = None,
        todos: Optional[list[TodoItem]] = None,
        study_log: Optional[StudyLog] = None,
        goal: Optional[int] = None,
        dark: Optional[bool] = None,
    ) -> None:
        """Replace whole collections from a backup and persist everything once.

        Collections passed as None keep their current contents.
        """
        if classes is not None:
            self.classes = list(classes)
        if todos is not None:
            self.todos = list(todos)
        if study_log is not None:
            self.study_log = study_log
        if goal is not None:
            self.goal = coerce_goal(goal)
        if dark is not None:
            self.dark = bool(dark)
        self.save_all()
