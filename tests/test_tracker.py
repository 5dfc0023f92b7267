import tempfile
import unittest
from datetime import date
from pathlib import Path

from core.database import HabitStore, PersistenceError
from core.models import Habit, HabitKind, ValidationError
from core.tracker import HabitTracker, build_board
from core.week import resolve_week


class FailingStore(HabitStore):
    def __init__(self):
        super().__init__(Path("unused.json"))

    def save(self, habits):
        raise PersistenceError("disk full")


def fixed_clock(value: date):
    return lambda: value


class TestNavigation(unittest.TestCase):
    def setUp(self) -> None:
        self.tracker = HabitTracker(reference_date=date(2024, 3, 13), clock=fixed_clock(date(2024, 5, 2)))

    def test_initial_week(self) -> None:
        self.assertEqual(self.tracker.week.start_iso, "2024-03-10")

    def test_next_and_previous(self) -> None:
        self.assertEqual(self.tracker.next_week().start_iso, "2024-03-17")
        self.assertEqual(self.tracker.previous_week().start_iso, "2024-03-10")
        self.assertEqual(self.tracker.previous_week().start_iso, "2024-03-03")

    def test_go_to_and_today(self) -> None:
        self.assertEqual(self.tracker.go_to("2024-01-01").start_iso, "2023-12-31")
        week = self.tracker.go_to_today()
        self.assertEqual(week.start_iso, "2024-04-28")
        self.assertTrue(week.day("2024-05-02").is_today)

    def test_defaults_to_clock_date(self) -> None:
        tracker = HabitTracker(clock=fixed_clock(date(2024, 5, 2)))
        self.assertEqual(tracker.reference_date, date(2024, 5, 2))


class TestMutations(unittest.TestCase):
    def setUp(self) -> None:
        self.tracker = HabitTracker(
            reference_date=date(2024, 3, 13),
            clock=fixed_clock(date(2024, 5, 2)),
            habits=[
                Habit(id="h1", title="Meditate", created_at="2024-01-07",
                      completed_dates=["2024-02-01", "2024-03-05"]),
                Habit(id="r1", title="Renew passport", created_at="2024-01-07", kind=HabitKind.REMINDER),
            ],
        )

    def test_reminder_completes_on_real_today(self) -> None:
        self.assertTrue(self.tracker.toggle_reminder("r1"))
        self.assertEqual(self.tracker.get_habit("r1").completed_dates, ["2024-05-02"])

    def test_reminder_toggle_on_recurring_habit_is_rejected(self) -> None:
        with self.assertRaises(ValidationError):
            self.tracker.toggle_reminder("h1")
        self.assertEqual(self.tracker.get_habit("h1").completed_dates, ["2024-02-01", "2024-03-05"])

    def test_toggle_and_exclude(self) -> None:
        self.assertTrue(self.tracker.toggle_completion("h1", "2024-03-12"))
        self.assertTrue(self.tracker.get_habit("h1").is_completed_on("2024-03-12"))
        self.assertTrue(self.tracker.exclude_for_day("h1", date(2024, 3, 12)))
        habit = self.tracker.get_habit("h1")
        self.assertFalse(habit.is_completed_on("2024-03-12"))
        self.assertTrue(habit.is_excluded_on("2024-03-12"))

    def test_unknown_habit_is_a_no_op(self) -> None:
        before = self.tracker.habits
        self.assertFalse(self.tracker.toggle_completion("missing", "2024-03-12"))
        self.assertFalse(self.tracker.toggle_reminder("missing"))
        self.assertFalse(self.tracker.exclude_for_day("missing", "2024-03-12"))
        self.assertFalse(self.tracker.remove_or_archive("missing"))
        self.assertEqual(self.tracker.habits, before)

    def test_remove_or_archive_uses_viewed_week(self) -> None:
        self.assertTrue(self.tracker.remove_or_archive("h1"))
        self.assertEqual(self.tracker.get_habit("h1").archived_at, "2024-03-10")
        self.assertTrue(self.tracker.remove_or_archive("r1"))
        self.assertIsNone(self.tracker.get_habit("r1"))

    def test_create_in_viewed_week(self) -> None:
        habit = self.tracker.create_habit("Journal", HabitKind.HABIT)
        self.assertEqual(habit.created_at, "2024-03-10")
        self.assertIs(self.tracker.get_habit(habit.id), habit)

    def test_create_rejects_blank_title(self) -> None:
        with self.assertRaises(ValidationError):
            self.tracker.create_habit("   ")
        self.assertEqual(len(self.tracker.habits), 2)

    def test_stats(self) -> None:
        self.tracker.remove_or_archive("h1")
        stats = self.tracker.get_stats()
        self.assertEqual(stats["habits"], 1)
        self.assertEqual(stats["reminders"], 1)
        self.assertEqual(stats["archived"], 1)
        self.assertEqual(stats["reference_date"], "2024-03-13")


class TestPersistence(unittest.TestCase):
    def test_failed_save_keeps_state(self) -> None:
        tracker = HabitTracker(store=FailingStore(), reference_date=date(2024, 3, 13),
                               habits=[Habit(id="h1", title="Read", created_at="2024-03-10")])
        self.assertTrue(tracker.toggle_completion("h1", "2024-03-11"))
        self.assertTrue(tracker.get_habit("h1").is_completed_on("2024-03-11"))
        self.assertEqual(tracker.last_save_error, "disk full")

    def test_changes_are_written_and_reloaded(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            store = HabitStore(Path(tmp) / "habits.json")
            tracker = HabitTracker(store=store, reference_date=date(2024, 3, 13))
            self.assertEqual(tracker.load(), 0)
            habit = tracker.create_habit("Stretch")
            tracker.toggle_completion(habit.id, "2024-03-14")

            reloaded = HabitTracker(store=HabitStore(Path(tmp) / "habits.json"))
            self.assertEqual(reloaded.load(), 1)
            self.assertEqual(reloaded.habits[0].completed_dates, ["2024-03-14"])
            self.assertIsNone(tracker.last_save_error)

    def test_unreadable_store_starts_empty(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            data_file = Path(tmp) / "habits.json"
            data_file.write_text("{broken", encoding="utf-8")
            tracker = HabitTracker(store=HabitStore(data_file))
            self.assertEqual(tracker.load(), 0)
            self.assertIsNotNone(tracker.last_load_error)


class TestBoard(unittest.TestCase):
    def test_board_splits_habits_and_reminders(self) -> None:
        habits = [
            Habit(id="h1", title="Read", created_at="2024-03-10", completed_dates=["2024-03-11"],
                  excluded_dates=["2024-03-12"]),
            Habit(id="r1", title="Dentist", created_at="2024-03-10", kind=HabitKind.REMINDER,
                  completed_dates=["2024-03-01"]),
            Habit(id="h2", title="Future", created_at="2024-03-17"),
        ]
        week = resolve_week(date(2024, 3, 13), today=date(2024, 3, 13))
        board = build_board(habits, week)

        self.assertEqual([h.id for h in board.habits], ["h1"])
        self.assertEqual([r.id for r in board.reminders], ["r1"])
        self.assertEqual(board.reminders_done, 1)
        self.assertEqual(len(board.columns), 7)
        self.assertEqual(board.columns[2].habits, ())
        self.assertEqual(board.stats.completed, 1)
        self.assertEqual(board.stats.total, 6)

        data = board.to_dict()
        self.assertTrue(data["habits"][0]["days"]["2024-03-11"]["done"])
        self.assertTrue(data["habits"][0]["days"]["2024-03-12"]["excluded"])
        self.assertEqual(data["reminders"]["done"], 1)
        self.assertTrue(data["columns"][3]["isToday"])


if __name__ == "__main__":
    unittest.main()
