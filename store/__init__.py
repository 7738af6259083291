"""Persistence backends for the planner state."""

from .base import KeyValueStore
from .json_store import JsonFileStore
from .memory_store import MemoryStore

__all__ = ["KeyValueStore", "JsonFileStore", "MemoryStore"]
