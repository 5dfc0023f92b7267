#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
ZenHabit - Core Package
Habit model, week resolution, visibility, aggregation and mutations
"""

from .models import (
    Category,
    HabitKind,
    Habit,
    ValidationError,
    HabitNotFoundError
)

from .week import (
    DayDescriptor,
    WeekWindow,
    resolve_week,
    shift_week
)

from .visibility import (
    is_visible,
    visible_habits,
    is_active_for_day,
    active_habits_for_day
)

from .aggregates import (
    DayStats,
    WeekStats,
    compute_day_stats,
    compute_week_stats
)

__all__ = [
    # Models
    'Category',
    'HabitKind',
    'Habit',
    'ValidationError',
    'HabitNotFoundError',

    # Week window
    'DayDescriptor',
    'WeekWindow',
    'resolve_week',
    'shift_week',

    # Visibility
    'is_visible',
    'visible_habits',
    'is_active_for_day',
    'active_habits_for_day',

    # Aggregates
    'DayStats',
    'WeekStats',
    'compute_day_stats',
    'compute_week_stats'
]
