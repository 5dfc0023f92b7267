#!/usr/bin/env python3
"""
Charts API for the ZenHabit dashboard
Chart data for the viewed week; rendering is left to the client
"""

import logging
from typing import Any, Dict, List

from fastapi import APIRouter, Depends

from core.aggregates import compute_week_stats
from core.tracker import HabitTracker
from shared.models import ChartPoint
from ..dependencies import get_tracker

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/charts", tags=["charts"])

@router.get("/weekly", response_model=List[Dict[str, Any]])
def weekly_progress(tracker: HabitTracker = Depends(get_tracker)):
    """Bar chart: completed vs total per day"""
    stats = compute_week_stats(tracker.habits, tracker.week)
    return [d.to_dict() for d in stats.days]

@router.get("/overview", response_model=Dict[str, Any])
def overview(tracker: HabitTracker = Depends(get_tracker)):
    """Donut of the week's completed vs remaining tasks"""
    stats = compute_week_stats(tracker.habits, tracker.week)
    return {
        "week": tracker.week.key,
        "completionRate": round(stats.percentage, 2),
        "totalTasks": stats.total,
        "completedTasks": stats.completed,
        "donut": [
            ChartPoint(name="Completed", value=stats.completed).model_dump(),
            ChartPoint(name="Remaining", value=stats.remaining).model_dump(),
        ],
    }

@router.get("/days", response_model=List[Dict[str, Any]])
def day_donuts(tracker: HabitTracker = Depends(get_tracker)):
    """Per-day completion percentage donuts"""
    stats = compute_week_stats(tracker.habits, tracker.week)
    result = []
    for day in stats.days:
        result.append({
            "date": day.iso,
            "day": day.day,
            "percentage": round(day.percentage, 2),
            "completed": day.completed,
            "remaining": day.remaining,
            "donut": [
                ChartPoint(name="Done", value=round(day.percentage, 2)).model_dump(),
                ChartPoint(name="Left", value=round(100 - day.percentage, 2)).model_dump(),
            ],
        })
    return result
