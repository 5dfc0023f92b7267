"""
ZenHabit - Completion Aggregator
"""

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Tuple

from core.models import Habit
from core.visibility import active_habits_for_day
from core.week import DayDescriptor, WeekWindow

def _ratio(completed: int, total: int) -> float:
    return completed / total if total > 0 else 0.0

@dataclass(frozen=True)
class DayStats:
    iso: str
    day: str
    completed: int
    total: int

    @property
    def remaining(self) -> int:
        return self.total - self.completed

    @property
    def rate(self) -> float:
        return _ratio(self.completed, self.total)

    @property
    def percentage(self) -> float:
        return self.rate * 100

    def to_dict(self) -> Dict[str, Any]:
        return {
            "day": self.day,
            "fullDate": self.iso,
            "completed": self.completed,
            "total": self.total,
            "percentage": round(self.percentage, 2),
        }

@dataclass(frozen=True)
class WeekStats:
    """Weekly rate is completions over tasks, not the mean of daily rates"""
    days: Tuple[DayStats, ...]

    @property
    def completed(self) -> int:
        return sum(d.completed for d in self.days)

    @property
    def total(self) -> int:
        return sum(d.total for d in self.days)

    @property
    def remaining(self) -> int:
        return self.total - self.completed

    @property
    def rate(self) -> float:
        return _ratio(self.completed, self.total)

    @property
    def percentage(self) -> float:
        return self.rate * 100

    def to_dict(self) -> Dict[str, Any]:
        return {
            "completed": self.completed,
            "total": self.total,
            "percentage": round(self.percentage, 2),
            "days": [d.to_dict() for d in self.days],
        }

def count_completed(habits: Iterable[Habit], iso_day: str) -> int:
    return sum(1 for h in habits if h.is_completed_on(iso_day))

def compute_day_stats(habits: Iterable[Habit], week: WeekWindow, day: DayDescriptor) -> DayStats:
    active: List[Habit] = active_habits_for_day(habits, week, day)
    return DayStats(
        iso=day.iso,
        day=day.short_weekday_name,
        completed=count_completed(active, day.iso),
        total=len(active),
    )

def compute_week_stats(habits: Iterable[Habit], week: WeekWindow) -> WeekStats:
    habits = list(habits)
    return WeekStats(days=tuple(compute_day_stats(habits, week, day) for day in week))
