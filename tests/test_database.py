import gzip
import json
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from core.database import (
    BackupManager, DatabaseCorruptionError, DatabaseMigration, HabitStore, PersistenceError,
)
from core.models import Habit, HabitKind


def sample_habits():
    return [
        Habit(id="h1", title="Meditate", created_at="2024-01-07", completed_dates=["2024-01-08"]),
        Habit(id="r1", title="Call mom", created_at="2024-01-07", kind=HabitKind.REMINDER),
    ]


class StoreTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name)
        self.data_file = self.root / "habits.json"
        self.backup_dir = self.root / "backups"
        self.store = HabitStore(self.data_file, backup_dir=self.backup_dir, max_backups=3)

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def write_raw(self, payload) -> None:
        self.data_file.write_text(
            payload if isinstance(payload, str) else json.dumps(payload), encoding="utf-8"
        )


class TestHabitStore(StoreTestCase):
    def test_missing_file_loads_nothing(self) -> None:
        self.assertIsNone(self.store.load())

    def test_save_then_load(self) -> None:
        habits = sample_habits()
        self.store.save(habits)
        self.assertEqual(self.store.load(), habits)

        document = json.loads(self.data_file.read_text(encoding="utf-8"))
        self.assertEqual(document[DatabaseMigration.VERSION_KEY], DatabaseMigration.CURRENT_VERSION)
        self.assertEqual(document["habits"][0]["completedDates"], ["2024-01-08"])
        self.assertFalse(self.data_file.with_suffix(".tmp").exists())

    def test_bare_list_is_migrated(self) -> None:
        self.write_raw([
            {"id": "a", "title": "Walk", "category": "Fitness", "completedDates": [], "createdAt": "2024-01-07"},
        ])
        habits = self.store.load()
        self.assertEqual(len(habits), 1)
        self.assertEqual(habits[0].kind, HabitKind.HABIT)
        self.assertEqual(habits[0].excluded_dates, [])

        document = json.loads(self.data_file.read_text(encoding="utf-8"))
        self.assertEqual(document[DatabaseMigration.VERSION_KEY], "1.1.0")
        self.assertEqual(document["habits"][0]["type"], "habit")

    def test_malformed_records_are_skipped(self) -> None:
        self.write_raw({
            DatabaseMigration.VERSION_KEY: DatabaseMigration.CURRENT_VERSION,
            "habits": [
                {"id": "a", "title": "Walk", "createdAt": "2024-01-07"},
                {"id": "b", "title": "No date"},
                "garbage",
                {"id": "a", "title": "Duplicate", "createdAt": "2024-01-07"},
            ],
        })
        habits = self.store.load()
        self.assertEqual([h.id for h in habits], ["a"])
        self.assertEqual(habits[0].title, "Walk")
        self.assertEqual(self.store.stats.skipped_records, 3)

    def test_corrupt_file_is_restored_from_backup(self) -> None:
        self.store.save(sample_habits())
        self.assertIsNotNone(self.store.create_backup())
        self.write_raw("{not json")

        habits = self.store.load()
        self.assertEqual([h.id for h in habits], ["h1", "r1"])
        self.assertTrue(self.data_file.with_suffix(".corrupted").exists())

    def test_corrupt_file_without_backup_raises(self) -> None:
        self.write_raw("{not json")
        with self.assertRaises(DatabaseCorruptionError):
            self.store.load()

    def test_unsupported_version_raises(self) -> None:
        self.write_raw({DatabaseMigration.VERSION_KEY: "9.9.9", "habits": []})
        with self.assertRaises(DatabaseCorruptionError):
            self.store.load()

    def test_unwritable_location_raises_persistence_error(self) -> None:
        blocker = self.root / "blocker"
        blocker.write_text("file, not a directory", encoding="utf-8")
        store = HabitStore(blocker / "habits.json", backup_dir=self.backup_dir)
        with self.assertRaises(PersistenceError):
            store.save(sample_habits())
        self.assertEqual(store.stats.error_count, 1)

    def test_stats(self) -> None:
        self.store.save(sample_habits())
        stats = self.store.get_stats()
        self.assertEqual(stats["total_habits"], 2)
        self.assertEqual(stats["save_count"], 1)
        self.assertEqual(stats["backups"], 0)

    def test_habits_not_a_list_is_corruption(self) -> None:
        self.write_raw({DatabaseMigration.VERSION_KEY: DatabaseMigration.CURRENT_VERSION, "habits": None})
        with self.assertRaises(DatabaseCorruptionError):
            self.store.load()

    def test_habits_not_a_list_is_restored_from_backup(self) -> None:
        self.store.save(sample_habits())
        self.store.create_backup()
        self.write_raw({DatabaseMigration.VERSION_KEY: DatabaseMigration.CURRENT_VERSION, "habits": {"h1": {}}})

        habits = self.store.load()
        self.assertEqual([h.id for h in habits], ["h1", "r1"])
        document = json.loads(self.data_file.read_text(encoding="utf-8"))
        self.assertEqual(len(document["habits"]), 2)

    def test_failed_migration_write_still_returns_habits(self) -> None:
        self.write_raw([{"id": "a", "title": "Walk", "createdAt": "2024-01-07"}])
        with mock.patch.object(HabitStore, "_write_document", side_effect=PersistenceError("disk full")):
            habits = self.store.load()
        self.assertEqual([h.id for h in habits], ["a"])
        self.assertEqual(self.store.stats.error_count, 1)
        self.assertIsInstance(json.loads(self.data_file.read_text(encoding="utf-8")), list)


class TestBackupManager(StoreTestCase):
    def test_backups_are_compressed_and_rotated(self) -> None:
        self.store.save(sample_habits())
        manager = BackupManager(self.backup_dir, max_backups=2)
        paths = [manager.create_backup(self.data_file) for _ in range(4)]

        backups = manager.list_backups()
        self.assertEqual(len(backups), 2)
        self.assertEqual(backups[0].path, paths[-1])
        self.assertTrue(backups[0].name.endswith(".json.gz"))
        with gzip.open(paths[-1], "rt", encoding="utf-8") as f:
            self.assertEqual(len(json.load(f)["habits"]), 2)
        self.assertEqual(len(manager.read_backup(backups[0])["habits"]), 2)

    def test_backup_of_missing_file(self) -> None:
        manager = BackupManager(self.backup_dir)
        self.assertIsNone(manager.create_backup(self.data_file))
        self.assertEqual(manager.list_backups(), [])

    def test_unreadable_backup_is_skipped(self) -> None:
        self.store.save(sample_habits())
        self.store.create_backup()
        broken = self.backup_dir / "habits_99999999_000000_000000.json.gz"
        broken.write_bytes(b"not gzip")
        self.write_raw("{not json")

        habits = self.store.load()
        self.assertEqual(len(habits), 2)

        with self.assertRaises(DatabaseCorruptionError):
            self.store.backup_manager.read_backup(self.store.backup_manager.list_backups()[0])


if __name__ == "__main__":
    unittest.main()
