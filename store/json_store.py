"""Key/value store backed by a single JSON file."""

import json
import os
from pathlib import Path
from typing import Optional, Union

from .base import KeyValueStore


class JsonFileStore(KeyValueStore):
    """Store that keeps every key in one JSON document on disk.

    The file is read once when the store is opened. Each ``set`` writes the
    whole document back (last writer wins). Use it as a context manager so
    the final state is flushed on exit:

        with JsonFileStore("~/.studyplan.json") as store:
            state = AppState.load(store)
    """

    def __init__(self, path: Union[str, Path], autoflush: bool = True) -> None:
        """Open the store.

        Args:
            path: Location of the JSON file. ``~`` is expanded. The file is
                created on the first write.
            autoflush: Write the file on every ``set``. When False, writes
                are kept in memory until ``flush()`` or ``close()``.
        """
        self._path = Path(path).expanduser()
        self._autoflush = autoflush
        self._dirty = False
        self._data: dict[str, str] = self._read()

    def _read(self) -> dict[str, str]:
        """Load the document; a missing or corrupt file reads as empty."""
        try:
            with open(self._path, "r", encoding="utf-8") as f:
                raw = json.load(f)
        except (OSError, ValueError):
            return {}

        if not isinstance(raw, dict):
            return {}
        return {k: v for k, v in raw.items() if isinstance(v, str)}

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value
        self._dirty = True
        if self._autoflush:
            self.flush()

    def flush(self) -> None:
        """Write pending changes to disk."""
        if not self._dirty:
            return

        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self._path.with_name(self._path.name + ".tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(self._data, f, indent=2, sort_keys=True)
        os.replace(tmp_path, self._path)
        self._dirty = False

    def close(self) -> None:
        self.flush()
