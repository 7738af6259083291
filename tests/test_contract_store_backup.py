import json
import tempfile
import unittest
from datetime import datetime
from pathlib import Path

from planner.state import CLASSES_KEY, AppState
from store import JsonFileStore, MemoryStore
from store.backup import export_snapshot, import_snapshot, read_backup, write_backup


class TestJsonFileStoreContract(unittest.TestCase):
    def test_roundtrip_through_disk(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            path = Path(td) / "nested" / "store.json"
            with JsonFileStore(path) as store:
                self.assertIsNone(store.get("k"))
                store.set("k", "[1, 2]")
            self.assertTrue(path.exists())

            with JsonFileStore(path) as store:
                self.assertEqual(store.get("k"), "[1, 2]")

    def test_corrupt_file_reads_as_empty(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            path = Path(td) / "store.json"
            path.write_text("{ definitely not json", encoding="utf-8")
            store = JsonFileStore(path)
            self.assertIsNone(store.get(CLASSES_KEY))
            state = AppState.load(store)
            self.assertEqual(state.classes, [])

    def test_deferred_writes_flush_on_close(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            path = Path(td) / "store.json"
            with JsonFileStore(path, autoflush=False) as store:
                store.set("k", "true")
                self.assertFalse(path.exists())
            self.assertEqual(json.loads(path.read_text(encoding="utf-8")), {"k": "true"})


class TestBackupContract(unittest.TestCase):
    def setUp(self) -> None:
        self.state = AppState.load(MemoryStore())
        self.state.add_class("Math", 0, "09:00", "10:00")
        self.state.add_todo("revise")
        self.state.set_study_minutes("2024-01-01", 90)
        self.state.set_goal(240)

    def test_export_snapshot_shape(self) -> None:
        snapshot = export_snapshot(self.state, datetime(2024, 1, 2, 8, 30))
        self.assertEqual(
            sorted(snapshot), ["classes", "dark", "exportDate", "goal", "studyLog", "todos"]
        )
        self.assertEqual(snapshot["studyLog"], {"2024-01-01": 90})
        self.assertEqual(snapshot["goal"], 240)
        self.assertEqual(snapshot["exportDate"], "2024-01-02T08:30:00")

    def test_import_replaces_present_fields_only(self) -> None:
        other = AppState.load(MemoryStore())
        applied = import_snapshot(other, json.dumps({
            "classes": export_snapshot(self.state)["classes"],
            "goal": 120,
        }))
        self.assertEqual(applied, ["classes", "goal"])
        self.assertEqual(other.classes, self.state.classes)
        self.assertEqual(other.goal, 120)
        self.assertEqual(other.todos, [])

    def test_import_skips_malformed_fields(self) -> None:
        applied = import_snapshot(self.state, json.dumps({
            "classes": "oops",
            "studyLog": {"2024-02-01": 30},
            "dark": True,
        }))
        self.assertEqual(applied, ["studyLog", "dark"])
        self.assertEqual(len(self.state.classes), 1)
        self.assertEqual(self.state.study_log.minutes_on("2024-01-01"), 0)
        self.assertEqual(self.state.study_log.minutes_on("2024-02-01"), 30)
        self.assertTrue(self.state.dark)

    def test_unparsable_backup_changes_nothing(self) -> None:
        before = export_snapshot(self.state, datetime(2024, 1, 1))
        for text in ("not json", "[1, 2, 3]"):
            with self.assertRaisesRegex(ValueError, "Invalid backup file"):
                import_snapshot(self.state, text)
        self.assertEqual(export_snapshot(self.state, datetime(2024, 1, 1)), before)

    def test_file_roundtrip(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            path = Path(td) / "backup.json"
            write_backup(self.state, path)
            restored = AppState.load(MemoryStore())
            read_backup(restored, path)
        self.assertEqual(restored.classes, self.state.classes)
        self.assertEqual(restored.todos, self.state.todos)
        self.assertEqual(restored.study_log, self.state.study_log)
        self.assertEqual(restored.goal, 240)


if __name__ == "__main__":
    unittest.main(verbosity=2)
