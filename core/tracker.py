#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
ZenHabit - Habit Tracker
Owns the habit collection and the viewed week

The tracker is the only holder of the collection. Each mutation computes the
next collection with the pure functions in ``core.mutations``, swaps it in and
then persists it. Storage failures are logged and remembered but never undo
the in-memory change.
"""

from dataclasses import dataclass
from datetime import date
from typing import Any, Callable, Dict, List, Optional, Sequence
import logging
import threading

from core import mutations
from core.aggregates import DayStats, WeekStats, compute_week_stats
from core.ai_service import HabitSummary
from core.database import HabitStore, PersistenceError
from core.models import Category, Habit, HabitKind, HabitNotFoundError
from core.visibility import active_habits_for_day, visible_habits
from core.week import DayDescriptor, WeekWindow, resolve_week, shift_week
from utils.datetime_utils import DateLike, to_date

logger = logging.getLogger(__name__)

# ===== VIEW MODELS =====

@dataclass(frozen=True)
class DayColumn:
    """One day of the board: its active habits and their state"""
    day: DayDescriptor
    habits: Sequence[Habit]
    stats: DayStats

    def to_dict(self) -> Dict[str, Any]:
        data = self.day.to_dict()
        data["habits"] = [
            {"id": h.id, "title": h.title, "category": h.category.value,
             "done": h.is_completed_on(self.day.iso)}
            for h in self.habits
        ]
        data["stats"] = self.stats.to_dict()
        return data

@dataclass(frozen=True)
class WeekBoard:
    """Everything derived for the viewed week"""
    week: WeekWindow
    habits: Sequence[Habit]
    reminders: Sequence[Habit]
    columns: Sequence[DayColumn]
    stats: WeekStats

    @property
    def reminders_done(self) -> int:
        return sum(1 for r in self.reminders if r.is_done)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "week": self.week.to_dict(),
            "habits": [
                {**h.to_dict(),
                 "days": {d.iso: {"done": h.is_completed_on(d.iso), "excluded": h.is_excluded_on(d.iso)}
                          for d in self.week}}
                for h in self.habits
            ],
            "reminders": {
                "done": self.reminders_done,
                "total": len(self.reminders),
                "items": [{**r.to_dict(), "done": r.is_done} for r in self.reminders],
            },
            "columns": [c.to_dict() for c in self.columns],
            "stats": self.stats.to_dict(),
        }

def build_board(habits: Sequence[Habit], week: WeekWindow) -> WeekBoard:
    stats = compute_week_stats(habits, week)
    columns = tuple(
        DayColumn(day=day, habits=tuple(active_habits_for_day(habits, week, day)), stats=day_stats)
        for day, day_stats in zip(week, stats.days)
    )
    return WeekBoard(
        week=week,
        habits=tuple(visible_habits(habits, week, HabitKind.HABIT)),
        reminders=tuple(visible_habits(habits, week, HabitKind.REMINDER)),
        columns=columns,
        stats=stats,
    )

# ===== CONTROLLER =====

class HabitTracker:
    """State container for a single user's habits"""

    def __init__(self, store: Optional[HabitStore] = None,
                 reference_date: Optional[DateLike] = None,
                 clock: Optional[Callable[[], date]] = None,
                 habits: Optional[List[Habit]] = None):
        self.store = store
        self.clock = clock or date.today
        self.reference_date = to_date(reference_date) if reference_date else self.clock()
        self._habits: List[Habit] = list(habits or [])
        self._lock = threading.RLock()
        self.last_save_error: Optional[str] = None
        self.last_load_error: Optional[str] = None

    # ===== LOADING =====

    def load(self) -> int:
        """Replace the collection with the stored one; returns its size"""
        if self.store is None:
            return len(self._habits)

        try:
            stored = self.store.load()
        except PersistenceError as e:
            logger.error(f"Could not load habits, starting empty: {e}")
            self.last_load_error = str(e)
            stored = None
        else:
            self.last_load_error = None

        with self._lock:
            self._habits = list(stored or [])
            return len(self._habits)

    # ===== READS =====

    @property
    def habits(self) -> List[Habit]:
        return list(self._habits)

    @property
    def today(self) -> date:
        return self.clock()

    @property
    def week(self) -> WeekWindow:
        return resolve_week(self.reference_date, today=self.today)

    def get_habit(self, habit_id: str) -> Optional[Habit]:
        for habit in self._habits:
            if habit.id == habit_id:
                return habit
        return None

    def board(self) -> WeekBoard:
        return build_board(self._habits, self.week)

    def insight_summaries(self) -> List[HabitSummary]:
        """Summaries of the habits shown this week"""
        return [HabitSummary.from_habit(h) for h in visible_habits(self._habits, self.week, HabitKind.HABIT)]

    # ===== NAVIGATION =====

    def next_week(self) -> WeekWindow:
        self.reference_date = shift_week(self.reference_date, 1)
        return self.week

    def previous_week(self) -> WeekWindow:
        self.reference_date = shift_week(self.reference_date, -1)
        return self.week

    def go_to(self, reference: DateLike) -> WeekWindow:
        self.reference_date = to_date(reference)
        return self.week

    def go_to_today(self) -> WeekWindow:
        return self.go_to(self.today)

    # ===== MUTATIONS =====

    def toggle_completion(self, habit_id: str, day: DateLike) -> bool:
        return self._apply("toggle_completion", mutations.toggle_completion, habit_id, day)

    def toggle_reminder(self, habit_id: str) -> bool:
        """ValidationError when the habit is not a reminder"""
        return self._apply("toggle_reminder", mutations.toggle_reminder_done, habit_id, self.today)

    def exclude_for_day(self, habit_id: str, day: DateLike) -> bool:
        return self._apply("exclude_for_day", mutations.exclude_for_day, habit_id, day)

    def remove_or_archive(self, habit_id: str) -> bool:
        return self._apply("remove_or_archive", mutations.remove_or_archive, habit_id, self.week)

    def create_habit(self, title: str, kind: HabitKind = HabitKind.HABIT,
                     category: Category = Category.OTHER) -> Habit:
        """Create a habit in the viewed week; ValidationError on bad input"""
        with self._lock:
            updated = mutations.create_habit(self._habits, title, kind, self.week, category)
            self._commit(updated)
            habit = updated[-1]
        logger.info(f"Created {habit.kind.value} {habit.id} ({habit.title!r})")
        return habit

    def _apply(self, action: str, transition: Callable[..., List[Habit]],
               habit_id: str, *args) -> bool:
        with self._lock:
            try:
                updated = transition(self._habits, habit_id, *args)
            except HabitNotFoundError:
                logger.warning(f"{action}: habit {habit_id} not found, ignoring")
                return False
            self._commit(updated)
        logger.debug(f"{action} applied to habit {habit_id}")
        return True

    def _commit(self, habits: List[Habit]) -> None:
        self._habits = habits
        self._persist()

    def _persist(self) -> None:
        if self.store is None:
            return
        try:
            self.store.save(self._habits)
            self.last_save_error = None
        except PersistenceError as e:
            logger.error(f"Could not save habits, keeping in-memory state: {e}")
            self.last_save_error = e.reason

    def get_stats(self) -> Dict[str, Any]:
        habits = [h for h in self._habits if h.kind is HabitKind.HABIT]
        return {
            "habits": len(habits),
            "reminders": len(self._habits) - len(habits),
            "archived": sum(1 for h in self._habits if h.archived_at),
            "reference_date": self.reference_date.isoformat(),
            "last_save_error": self.last_save_error,
            "last_load_error": self.last_load_error,
        }
