"""iCalendar transformer for the weekly timetable."""

import hashlib
from datetime import date, datetime, time, timedelta, timezone
from typing import Optional

from icalendar import Calendar, Event, vRecur

from planner.models import ClassEntry
from planner.timeutil import is_valid_minutes
from .base import BaseTransformer


class ICalTransformer(BaseTransformer):
    """Transformer that converts timetable entries to iCalendar format.

    Events use floating local times (no TZID): a class at 09:00 stays at
    09:00 wherever the calendar is opened.
    """

    PRODID = "-//studyplan//Weekly timetable//EN"
    UID_DOMAIN = "studyplan.local"

    def __init__(self, calendar_name: str = "Timetable") -> None:
        """Initialize the iCalendar transformer.

        Args:
            calendar_name: Value for the X-WR-CALNAME header.
        """
        self._calendar: Optional[Calendar] = None
        self._calendar_name = calendar_name
        self.skipped: list[ClassEntry] = []

    def _generate_uid(self, entry: ClassEntry, start_date: date) -> str:
        """Generate a unique identifier for an event.

        Args:
            entry: The timetable entry.
            start_date: Start date of the exported period.

        Returns:
            Unique identifier string, stable across repeated exports.
        """
        unique_string = f"{entry.id}-{entry.weekday}-{entry.start}-{start_date}"
        return hashlib.md5(unique_string.encode()).hexdigest() + "@" + self.UID_DOMAIN

    def _find_first_occurrence(self, entry: ClassEntry, start_date: date) -> date:
        """Find the first date on or after start_date falling on the entry's weekday."""
        days_ahead = entry.weekday - start_date.weekday()
        if days_ahead < 0:
            days_ahead += 7

        return start_date + timedelta(days=days_ahead)

    @staticmethod
    def _is_exportable(entry: ClassEntry) -> bool:
        start = entry.start_minutes
        end = entry.end_minutes
        if not (is_valid_minutes(start) and is_valid_minutes(end)):
            return False
        return 0 <= entry.weekday <= 6 and 0 <= start < end <= 24 * 60

    @staticmethod
    def _at(day: date, minutes: int) -> datetime:
        # 24:00 is a valid class end but not a valid time()
        return datetime.combine(day, time()) + timedelta(minutes=minutes)

    def transform(
        self,
        classes: list[ClassEntry],
        start_date: date,
        end_date: date
    ) -> Calendar:
        """Transform timetable entries into iCalendar format.

        Every valid entry becomes one weekly recurring event between
        start_date and end_date. Entries with unusable times are left out
        and collected in ``skipped``.

        Args:
            classes: Timetable entries to transform.
            start_date: First day of the exported period.
            end_date: Last day of the exported period.

        Returns:
            iCalendar Calendar object.
        """
        self._calendar = Calendar()
        self._calendar.add("prodid", self.PRODID)
        self._calendar.add("version", "2.0")
        self._calendar.add("calscale", "GREGORIAN")
        self._calendar.add("method", "PUBLISH")
        self._calendar.add("x-wr-calname", self._calendar_name)
        self.skipped = []

        for entry in classes:
            if not self._is_exportable(entry):
                self.skipped.append(entry)
                continue

            first_date = self._find_first_occurrence(entry, start_date)
            if first_date > end_date:
                continue

            start_datetime = self._at(first_date, entry.start_minutes)
            end_datetime = self._at(first_date, entry.end_minutes)

            ical_event = Event()
            ical_event.add("uid", self._generate_uid(entry, start_date))
            ical_event.add("dtstart", start_datetime)
            ical_event.add("dtend", end_datetime)
            ical_event.add("dtstamp", datetime.now(timezone.utc))
            ical_event.add("summary", entry.name)
            if entry.color:
                ical_event.add("color", entry.color)

            until_datetime = datetime.combine(end_date, start_datetime.time())
            rrule = vRecur({
                "freq": "weekly",
                "until": until_datetime
            })
            ical_event.add("rrule", rrule)

            self._calendar.add_component(ical_event)

        return self._calendar

    def save(self, output_path: str) -> None:
        """Save the calendar to an .ics file.

        Args:
            output_path: Path to the output file.

        Raises:
            RuntimeError: If transform() hasn't been called yet.
        """
        if self._calendar is None:
            raise RuntimeError("No calendar data. Call transform() first.")

        with open(output_path, "wb") as f:
            f.write(self._calendar.to_ical())
