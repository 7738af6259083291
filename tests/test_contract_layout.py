import unittest

from planner.layout import (
    MIN_VISIBLE_FRACTION,
    GridBounds,
    grid_bounds,
    layout_day,
    now_marker,
    overlap_groups,
    place_blocks,
    vertical_extent,
)
from planner.models import ClassEntry


def make(cid: str, start: str, end: str, weekday: int = 0) -> ClassEntry:
    return ClassEntry(id=cid, name=cid, color="#3b82f6", weekday=weekday, start=start, end=end)


class TestOverlapLayoutContract(unittest.TestCase):
    def test_chain_overlap_shares_one_group(self) -> None:
        entries = [
            make("pe", "10:15", "11:00"),
            make("math", "09:00", "10:00"),
            make("lit", "09:30", "10:30"),
        ]
        slots = layout_day(entries)
        self.assertEqual([s.entry.id for s in slots], ["math", "lit", "pe"])
        for slot in slots:
            self.assertAlmostEqual(slot.width, 1 / 3)
        self.assertEqual([s.left for s in slots], [0, 1 / 3, 2 / 3])

    def test_disjoint_entries_get_full_width(self) -> None:
        slots = layout_day([make("a", "08:00", "09:00"), make("b", "09:00", "10:00")])
        self.assertEqual([(s.width, s.left) for s in slots], [(1.0, 0.0), (1.0, 0.0)])

    def test_groups_split_by_first_match(self) -> None:
        entries = [
            make("a", "08:00", "09:00"),
            make("b", "08:30", "09:30"),
            make("c", "12:00", "13:00"),
            make("d", "12:00", "12:30"),
        ]
        groups = overlap_groups(entries)
        self.assertEqual([[e.id for e in g] for g in groups], [["a", "b"], ["c", "d"]])

    def test_unparsable_entries_are_left_out(self) -> None:
        slots = layout_day([make("ok", "08:00", "09:00"), make("bad", "x", "09:00")])
        self.assertEqual([s.entry.id for s in slots], ["ok"])

    def test_vertical_extent(self) -> None:
        bounds = GridBounds(6, 24)
        top, height = vertical_extent(make("a", "06:00", "09:00"), bounds)
        self.assertEqual(top, 0.0)
        self.assertAlmostEqual(height, 3 / 18)

        top, height = vertical_extent(make("b", "05:00", "05:05"), bounds)
        self.assertEqual(top, 0.0)
        self.assertEqual(height, MIN_VISIBLE_FRACTION)

    def test_place_blocks_combines_slot_and_extent(self) -> None:
        bounds = GridBounds(6, 24)
        blocks = place_blocks([make("a", "15:00", "18:00"), make("b", "16:00", "17:00")], bounds)
        self.assertEqual(len(blocks), 2)
        self.assertEqual(blocks[1].left, 0.5)
        self.assertAlmostEqual(blocks[0].top, 0.5)

    def test_now_marker_is_clamped(self) -> None:
        bounds = GridBounds(6, 24)
        self.assertEqual(now_marker(bounds, 0), 0.0)
        self.assertEqual(now_marker(bounds, 15 * 60), 0.5)


class TestGridBoundsContract(unittest.TestCase):
    def test_default_without_classes(self) -> None:
        bounds = grid_bounds([])
        self.assertEqual((bounds.start_hour, bounds.end_hour), (6, 24))
        self.assertEqual(bounds.span_minutes, 18 * 60)
        self.assertEqual(bounds.hours[0], 6)

    def test_lower_bound_never_later_than_six(self) -> None:
        bounds = grid_bounds([make("a", "07:30", "08:00")])
        self.assertEqual(bounds.start_hour, 6)
        self.assertEqual(bounds.end_hour, 19)

    def test_widens_to_fit_entries(self) -> None:
        bounds = grid_bounds([make("a", "05:15", "06:00"), make("b", "20:10", "21:20")])
        self.assertEqual((bounds.start_hour, bounds.end_hour), (5, 23))
        late = grid_bounds([make("c", "22:00", "23:30")])
        self.assertEqual(late.end_hour, 24)


if __name__ == "__main__":
    unittest.main(verbosity=2)
