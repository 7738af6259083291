"""Export and import of whole-planner backup snapshots."""

import json
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Optional, Union

from planner.state import (
    AppState,
    coerce_classes,
    coerce_dark,
    coerce_goal,
    coerce_study_log,
    coerce_todos,
)


def export_snapshot(state: AppState, now: Optional[datetime] = None) -> dict[str, Any]:
    """Build the backup document for ``state``.

    Args:
        state: Planner state to export.
        now: Export timestamp, defaults to the current local time.

    Returns:
        ``{classes, todos, studyLog, goal, dark, exportDate}``.
    """
    if now is None:
        now = datetime.now()
    return {
        "classes": [c.to_dict() for c in state.classes],
        "todos": [t.to_dict() for t in state.todos],
        "studyLog": state.study_log.to_dict(),
        "goal": state.goal,
        "dark": state.dark,
        "exportDate": now.isoformat(timespec="seconds"),
    }


def write_backup(
    state: AppState,
    output_path: Union[str, Path],
    now: Optional[datetime] = None,
) -> None:
    with open(output_path, "w", encoding="utf-8") as f:
        json.dump(export_snapshot(state, now), f, indent=2, ensure_ascii=False)


# Backup field name -> (decoder, AppState.restore keyword)
SNAPSHOT_FIELDS: dict[str, tuple[Callable[[Any], Any], str]] = {
    "classes": (coerce_classes, "classes"),
    "todos": (coerce_todos, "todos"),
    "studyLog": (coerce_study_log, "study_log"),
    "goal": (coerce_goal, "goal"),
    "dark": (coerce_dark, "dark"),
}


def import_snapshot(state: AppState, text: str) -> list[str]:
    """Apply a backup document to ``state``.

    Parsing is all-or-nothing: an unreadable document changes nothing.
    Once parsed, every field present in the document replaces the matching
    collection on its own, a field with the wrong shape is skipped, and
    absent fields leave the current data untouched. The result is written
    to the store in one pass.

    Args:
        state: Planner state to update.
        text: Backup file contents.

    Returns:
        Names of the fields that were applied.

    Raises:
        ValueError: If the document is not a JSON object.
    """
    try:
        snapshot = json.loads(text)
    except ValueError:
        raise ValueError("Invalid backup file: not valid JSON.") from None

    if not isinstance(snapshot, dict):
        raise ValueError("Invalid backup file: expected a JSON object.")

    applied: list[str] = []
    values: dict[str, Any] = {}
    for name, (coerce, keyword) in SNAPSHOT_FIELDS.items():
        if name not in snapshot:
            continue
        try:
            values[keyword] = coerce(snapshot[name])
        except ValueError:
            continue
        applied.append(name)

    if applied:
        state.restore(**values)
    return applied


def read_backup(state: AppState, input_path: Union[str, Path]) -> list[str]:
    """Load a backup file from disk and apply it.

    Raises:
        ValueError: If the file is not a valid backup document.
        OSError: If the file cannot be read.
    """
    with open(input_path, "r", encoding="utf-8") as f:
        return import_snapshot(state, f.read())
