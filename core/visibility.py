"""
ZenHabit - Visibility Filter

Decides which habits are shown for a week and which are active on each day.
Archival is compared against the week start: a habit archived mid-week stays
visible for the whole of that week.
"""

from typing import Iterable, List, Optional

from core.models import Habit, HabitKind
from core.week import DayDescriptor, WeekWindow

def is_visible(habit: Habit, week: WeekWindow) -> bool:
    """Creation and archival gating for a whole week"""
    created = habit.created_at <= week.end_iso
    not_archived = habit.archived_at is None or habit.archived_at > week.start_iso
    return created and not_archived

def visible_habits(habits: Iterable[Habit], week: WeekWindow,
                   kind: Optional[HabitKind] = HabitKind.HABIT) -> List[Habit]:
    """Visible habits of ``kind`` (all kinds when ``kind`` is None), in collection order"""
    return [
        h for h in habits
        if (kind is None or h.kind is kind) and is_visible(h, week)
    ]

def is_active_for_day(habit: Habit, week: WeekWindow, day: DayDescriptor) -> bool:
    return is_visible(habit, week) and not habit.is_excluded_on(day.iso)

def active_habits_for_day(habits: Iterable[Habit], week: WeekWindow,
                          day: DayDescriptor) -> List[Habit]:
    """Recurring habits shown in a day column; reminders never are"""
    return [
        h for h in visible_habits(habits, week, HabitKind.HABIT)
        if not h.is_excluded_on(day.iso)
    ]
