import math
import unittest
from datetime import date

from core.aggregates import DayStats, WeekStats, compute_day_stats, compute_week_stats
from core.models import Habit, HabitKind
from core.week import resolve_week


def make_habit(habit_id, created_at="2024-01-07", **kwargs) -> Habit:
    return Habit(id=habit_id, title=habit_id, created_at=created_at, **kwargs)


class TestCompletionAggregator(unittest.TestCase):
    def test_empty_collection_has_zero_rates(self) -> None:
        stats = compute_week_stats([], resolve_week(date(2024, 3, 10)))
        self.assertEqual(stats.total, 0)
        self.assertEqual(stats.completed, 0)
        self.assertEqual(stats.rate, 0.0)
        self.assertFalse(math.isnan(stats.rate))
        for day in stats.days:
            self.assertEqual(day.rate, 0.0)

    def test_day_counts(self) -> None:
        week = resolve_week(date(2024, 3, 10))
        habits = [
            make_habit("a", completed_dates=["2024-03-11"]),
            make_habit("b"),
            make_habit("c", excluded_dates=["2024-03-11"]),
            make_habit("r", kind=HabitKind.REMINDER, completed_dates=["2024-03-11"]),
        ]
        monday = compute_day_stats(habits, week, week.day("2024-03-11"))
        self.assertEqual((monday.completed, monday.total), (1, 2))
        self.assertAlmostEqual(monday.rate, 0.5)
        self.assertAlmostEqual(monday.percentage, 50.0)
        self.assertEqual(monday.day, "Mon")

    def test_weekly_rate_is_ratio_of_sums_not_mean_of_daily_rates(self) -> None:
        week = resolve_week(date(2024, 3, 10))
        # "a" active all week; "b" only on Sunday (excluded Mon-Sat)
        excluded = [d.iso for d in week][1:]
        habits = [
            make_habit("a", completed_dates=["2024-03-10"]),
            make_habit("b", excluded_dates=excluded, completed_dates=["2024-03-10"]),
        ]
        stats = compute_week_stats(habits, week)
        self.assertEqual(stats.days[0].total, 2)
        self.assertEqual(stats.days[0].completed, 2)
        self.assertEqual(stats.total, 8)
        self.assertEqual(stats.completed, 2)
        self.assertAlmostEqual(stats.rate, 2 / 8)
        mean_of_days = sum(d.rate for d in stats.days) / 7
        self.assertNotAlmostEqual(stats.rate, mean_of_days)

    def test_weekly_sums_match_daily_sums(self) -> None:
        week = resolve_week(date(2024, 3, 10))
        habits = [
            make_habit("a", completed_dates=["2024-03-10", "2024-03-12", "2024-03-16"]),
            make_habit("b", completed_dates=["2024-03-12"], excluded_dates=["2024-03-13"]),
            make_habit("c", created_at="2024-03-17"),
        ]
        stats = compute_week_stats(habits, week)
        self.assertEqual(stats.completed, sum(d.completed for d in stats.days))
        self.assertEqual(stats.total, sum(d.total for d in stats.days))
        self.assertEqual(stats.total, 13)
        self.assertEqual(stats.completed, 4)
        self.assertEqual(stats.remaining, 9)

    def test_completions_outside_week_do_not_count(self) -> None:
        week = resolve_week(date(2024, 3, 10))
        stats = compute_week_stats([make_habit("a", completed_dates=["2024-03-09", "2024-03-17"])], week)
        self.assertEqual(stats.completed, 0)
        self.assertEqual(stats.total, 7)

    def test_creation_scenario(self) -> None:
        habit = make_habit("new", created_at="2024-03-10")
        before = compute_week_stats([habit], resolve_week(date(2024, 3, 3)))
        self.assertEqual(before.total, 0)
        during = compute_week_stats([habit], resolve_week(date(2024, 3, 10)))
        self.assertEqual(during.total, 7)
        self.assertEqual(during.completed, 0)
        self.assertEqual(during.days[0].total, 1)

    def test_serialisation(self) -> None:
        stats = WeekStats(days=(DayStats("2024-03-10", "Sun", 1, 3), DayStats("2024-03-11", "Mon", 0, 0)))
        data = stats.to_dict()
        self.assertEqual(data["completed"], 1)
        self.assertEqual(data["total"], 3)
        self.assertEqual(data["percentage"], 33.33)
        self.assertEqual(data["days"][0], {
            "day": "Sun", "fullDate": "2024-03-10", "completed": 1, "total": 3, "percentage": 33.33,
        })


if __name__ == "__main__":
    unittest.main()
