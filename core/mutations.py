#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
ZenHabit - Mutation Engine
Pure transitions over the habit collection

Every function takes the current collection and returns the next one. Input
lists and habits are never modified; validation happens before anything is
built, so a rejected mutation leaves no partial state behind.
"""

from dataclasses import replace
from datetime import date
from typing import List, Optional, Sequence, Tuple

from core.models import (
    Category, Habit, HabitKind, HabitNotFoundError, TITLE_MAX_LENGTH, ValidationError,
    new_habit_id, parse_category, validate_iso_date, validate_text,
)
from core.week import WeekWindow
from utils.datetime_utils import DateLike, to_iso

def find_habit(habits: Sequence[Habit], habit_id: str) -> Tuple[int, Habit]:
    for index, habit in enumerate(habits):
        if habit.id == habit_id:
            return index, habit
    raise HabitNotFoundError(habit_id)

def _replace_at(habits: Sequence[Habit], index: int, habit: Habit) -> List[Habit]:
    result = list(habits)
    result[index] = habit
    return result

def _iso_day(day: DateLike) -> str:
    if isinstance(day, str):
        return validate_iso_date(day)
    return to_iso(day)

def toggle_completion(habits: Sequence[Habit], habit_id: str, day: DateLike) -> List[Habit]:
    """Flip membership of ``day`` in the habit's completed dates"""
    iso_day = _iso_day(day)
    index, habit = find_habit(habits, habit_id)

    if habit.is_completed_on(iso_day):
        updated = replace(habit, completed_dates=[d for d in habit.completed_dates if d != iso_day])
    else:
        # Completing an excluded day brings the habit back for that day
        updated = replace(
            habit,
            completed_dates=habit.completed_dates + [iso_day],
            excluded_dates=[d for d in habit.excluded_dates if d != iso_day],
        )

    return _replace_at(habits, index, updated)

def toggle_reminder_done(habits: Sequence[Habit], habit_id: str, today: date) -> List[Habit]:
    """Reminders complete on the real current date, not the viewed day"""
    index, habit = find_habit(habits, habit_id)
    if not habit.is_reminder:
        raise ValidationError(f"Habit {habit_id} is not a reminder")
    completed = [] if habit.completed_dates else [to_iso(today)]
    return _replace_at(habits, index, replace(habit, completed_dates=completed))

def create_habit(habits: Sequence[Habit], title: str, kind: HabitKind, week: WeekWindow,
                 category: Category = Category.OTHER,
                 habit_id: Optional[str] = None) -> List[Habit]:
    """Append a new habit created on the first day of the viewed week"""
    title = validate_text(title, min_length=1, max_length=TITLE_MAX_LENGTH, field_name="title")
    try:
        kind = HabitKind(kind)
    except ValueError:
        raise ValidationError(f"type must be one of: {[k.value for k in HabitKind]}")
    category = parse_category(category)
    habit_id = habit_id or new_habit_id()
    if any(h.id == habit_id for h in habits):
        habit_id = new_habit_id()

    habit = Habit(
        id=habit_id,
        title=title,
        created_at=week.start_iso,
        category=category,
        kind=kind,
        completed_dates=[],
        excluded_dates=[],
    )
    return list(habits) + [habit]

def exclude_for_day(habits: Sequence[Habit], habit_id: str, day: DateLike) -> List[Habit]:
    """Hide a habit for one day and drop any completion on it"""
    iso_day = _iso_day(day)
    index, habit = find_habit(habits, habit_id)

    if habit.is_excluded_on(iso_day):
        return list(habits)

    return _replace_at(habits, index, replace(
        habit,
        completed_dates=[d for d in habit.completed_dates if d != iso_day],
        excluded_dates=habit.excluded_dates + [iso_day],
    ))

def remove_or_archive(habits: Sequence[Habit], habit_id: str, week: WeekWindow) -> List[Habit]:
    """Archive when there is history before the viewed week, otherwise delete"""
    index, habit = find_habit(habits, habit_id)

    if habit.has_history_before(week.start_iso):
        archived_at = week.start_iso
        if habit.archived_at is not None:
            # Re-archiving never reopens the weeks in between
            archived_at = min(habit.archived_at, archived_at)
        return _replace_at(habits, index, replace(habit, archived_at=archived_at))

    return [h for h in habits if h.id != habit_id]
