"""Abstract base class for key/value stores."""

from abc import ABC, abstractmethod
from typing import Optional


class KeyValueStore(ABC):
    """Interface for the single local store the planner persists to.

    Values are serialized blobs (JSON text). Extend this class to back the
    planner with a different medium (a file, a database row, etc.).
    """

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Return the blob stored under ``key``, or None if absent.

        Args:
            key: Storage key.
        """
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``, replacing any previous blob.

        Args:
            key: Storage key.
            value: Serialized blob.
        """
        pass

    def close(self) -> None:
        """Release the store, flushing pending writes."""

    def __enter__(self) -> "KeyValueStore":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
