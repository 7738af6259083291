import tempfile
import unittest
from datetime import date, datetime
from pathlib import Path

from icalendar import Calendar

from planner.models import ClassEntry
from transformer import ICalTransformer


def make(cid: str, weekday: int, start: str, end: str) -> ClassEntry:
    return ClassEntry(id=cid, name=cid.title(), color="#10b981", weekday=weekday, start=start, end=end)


class TestICalTransformerContract(unittest.TestCase):
    def test_weekly_events_start_on_first_matching_weekday(self) -> None:
        transformer = ICalTransformer()
        # 2024-01-03 is a Wednesday.
        cal = transformer.transform(
            [make("math", 0, "09:00", "10:30"), make("lit", 4, "22:00", "24:00")],
            date(2024, 1, 3),
            date(2024, 6, 30),
        )
        events = cal.walk("VEVENT")
        self.assertEqual(len(events), 2)

        math_event = events[0]
        self.assertEqual(str(math_event["summary"]), "Math")
        self.assertEqual(math_event.decoded("dtstart"), datetime(2024, 1, 8, 9, 0))
        self.assertEqual(math_event.decoded("dtend"), datetime(2024, 1, 8, 10, 30))
        self.assertIn(b"FREQ=WEEKLY", math_event["rrule"].to_ical())

        lit_event = events[1]
        self.assertEqual(lit_event.decoded("dtstart"), datetime(2024, 1, 5, 22, 0))
        self.assertEqual(lit_event.decoded("dtend"), datetime(2024, 1, 6, 0, 0))

    def test_invalid_entries_are_skipped(self) -> None:
        transformer = ICalTransformer()
        bad = [make("rev", 1, "11:00", "10:00"), make("nan", 1, "x", "10:00")]
        cal = transformer.transform(bad + [make("ok", 1, "08:00", "09:00")], date(2024, 1, 1), date(2024, 2, 1))
        self.assertEqual(len(cal.walk("VEVENT")), 1)
        self.assertEqual([e.id for e in transformer.skipped], ["rev", "nan"])

    def test_uid_is_stable(self) -> None:
        entry = make("math", 0, "09:00", "10:00")
        first = ICalTransformer().transform([entry], date(2024, 1, 1), date(2024, 2, 1))
        second = ICalTransformer().transform([entry], date(2024, 1, 1), date(2024, 2, 1))
        self.assertEqual(str(first.walk("VEVENT")[0]["uid"]), str(second.walk("VEVENT")[0]["uid"]))

    def test_save_requires_transform(self) -> None:
        with self.assertRaises(RuntimeError):
            ICalTransformer().save("never.ics")

    def test_save_writes_parsable_file(self) -> None:
        transformer = ICalTransformer()
        transformer.transform([make("math", 0, "09:00", "10:00")], date(2024, 1, 1), date(2024, 2, 1))
        with tempfile.TemporaryDirectory() as td:
            path = Path(td) / "out.ics"
            transformer.save(str(path))
            parsed = Calendar.from_ical(path.read_bytes())
        self.assertEqual(len(parsed.walk("VEVENT")), 1)


if __name__ == "__main__":
    unittest.main(verbosity=2)
