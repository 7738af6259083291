"""In-process key/value store."""

from typing import Optional

from .base import KeyValueStore


class MemoryStore(KeyValueStore):
    """Store that keeps blobs in a dictionary; nothing survives the process."""

    def __init__(self, initial: Optional[dict[str, str]] = None) -> None:
        self.data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value
