import math
import re
import unittest
from datetime import date, datetime

from planner.timeutil import (
    clamp,
    date_key,
    format_time,
    is_valid_minutes,
    parse_time,
    round_half_up,
    start_of_week_monday,
)


class TestTimeUtilContract(unittest.TestCase):
    def test_parse_and_format_are_inverse_over_the_day(self) -> None:
        for m in range(0, 1440):
            self.assertEqual(parse_time(format_time(m)), m)

    def test_parse_time_basic(self) -> None:
        self.assertEqual(parse_time("00:30"), 30)
        self.assertEqual(parse_time("23:59"), 1439)
        self.assertEqual(format_time(150), "02:30")

    def test_malformed_time_yields_nan(self) -> None:
        for bad in ("", "9", "ab:cd", "09:30:00", "nine"):
            value = parse_time(bad)
            self.assertTrue(math.isnan(value), bad)
            self.assertFalse(is_valid_minutes(value))
        self.assertTrue(is_valid_minutes(0))

    def test_clamp(self) -> None:
        self.assertEqual(clamp(5, 0, 4), 4)
        self.assertEqual(clamp(-10, 0, 1), 0)
        self.assertEqual(clamp(10, 0, 1), 1)
        for n in range(-5, 15):
            v = clamp(n, 0, 10)
            self.assertTrue(0 <= v <= 10)
            if 0 <= n <= 10:
                self.assertEqual(v, n)

    def test_round_half_up(self) -> None:
        self.assertEqual(round_half_up(0.5), 1)
        self.assertEqual(round_half_up(2.5), 3)
        self.assertEqual(round_half_up(2.49), 2)

    def test_date_key_format(self) -> None:
        for d in (date(2024, 1, 5), date(999, 12, 31), datetime(2024, 11, 30, 23, 59)):
            key = date_key(d)
            self.assertEqual(len(key), 10)
            self.assertRegex(key, re.compile(r"^\d{4}-\d{2}-\d{2}$"))
        self.assertEqual(date_key(datetime(2024, 3, 9, 23, 30)), "2024-03-09")

    def test_start_of_week_monday(self) -> None:
        # 2024-01-01 is a Monday.
        self.assertEqual(start_of_week_monday(date(2024, 1, 1)), date(2024, 1, 1))
        self.assertEqual(start_of_week_monday(date(2024, 1, 7)), date(2024, 1, 1))
        self.assertEqual(start_of_week_monday(date(2024, 1, 8)), date(2024, 1, 8))
        self.assertEqual(
            start_of_week_monday(datetime(2024, 1, 3, 15, 45, 12)),
            datetime(2024, 1, 1, 0, 0, 0),
        )


if __name__ == "__main__":
    unittest.main(verbosity=2)
