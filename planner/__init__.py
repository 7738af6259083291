"""Weekly timetable, to-do list and study-time model."""

from .models import ClassEntry, Instant, TodoItem, Weekday
from .state import AppState
from .studylog import StudyLog

__all__ = ["AppState", "ClassEntry", "Instant", "StudyLog", "TodoItem", "Weekday"]
