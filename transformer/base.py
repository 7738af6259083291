"""Abstract base class for timetable transformers."""

from abc import ABC, abstractmethod
from datetime import date
from typing import Any

from planner.models import ClassEntry


class BaseTransformer(ABC):
    """Abstract base class defining the interface for timetable transformers.

    Extend this class to implement exports of the weekly timetable to other
    formats (e.g., iCalendar, CSV, etc.).
    """

    @abstractmethod
    def transform(
        self,
        classes: list[ClassEntry],
        start_date: date,
        end_date: date
    ) -> Any:
        """Transform weekly classes into the target format.

        Args:
            classes: Timetable entries to transform.
            start_date: First day of the exported period.
            end_date: Last day of the exported period.

        Returns:
            Transformed data in the target format.
        """
        pass

    @abstractmethod
    def save(self, output_path: str) -> None:
        """Save the transformed data to a file.

        Args:
            output_path: Path to the output file.
        """
        pass
