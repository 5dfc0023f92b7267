"""
Habits API - weekly board, navigation and mutations
"""

import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException, status

from core.models import ValidationError
from core.tracker import HabitTracker
from shared.models import ActionResult, DayAction, HabitCreate, WeekJump
from ..dependencies import get_tracker

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["habits"])

def _not_found(habit_id: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Habit {habit_id} not found")

# ===== WEEK =====

@router.get("/week", response_model=Dict[str, Any])
def get_week(tracker: HabitTracker = Depends(get_tracker)):
    """Board for the viewed week"""
    return tracker.board().to_dict()

@router.post("/week/next", response_model=Dict[str, Any])
def next_week(tracker: HabitTracker = Depends(get_tracker)):
    tracker.next_week()
    return tracker.board().to_dict()

@router.post("/week/previous", response_model=Dict[str, Any])
def previous_week(tracker: HabitTracker = Depends(get_tracker)):
    tracker.previous_week()
    return tracker.board().to_dict()

@router.post("/week/today", response_model=Dict[str, Any])
def current_week(tracker: HabitTracker = Depends(get_tracker)):
    tracker.go_to_today()
    return tracker.board().to_dict()

@router.post("/week/goto", response_model=Dict[str, Any])
def goto_week(payload: WeekJump, tracker: HabitTracker = Depends(get_tracker)):
    tracker.go_to(payload.date)
    return tracker.board().to_dict()

# ===== HABITS =====

@router.get("/habits", response_model=Dict[str, Any])
def list_habits(tracker: HabitTracker = Depends(get_tracker)):
    """Full collection, including archived habits"""
    return {"habits": [h.to_dict() for h in tracker.habits]}

@router.post("/habits", status_code=status.HTTP_201_CREATED, response_model=Dict[str, Any])
def create_habit(payload: HabitCreate, tracker: HabitTracker = Depends(get_tracker)):
    try:
        habit = tracker.create_habit(payload.title, payload.kind, payload.category)
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))
    return habit.to_dict()

@router.post("/habits/{habit_id}/toggle", response_model=ActionResult)
def toggle_habit(habit_id: str, payload: DayAction, tracker: HabitTracker = Depends(get_tracker)):
    if not tracker.toggle_completion(habit_id, payload.date):
        raise _not_found(habit_id)
    return ActionResult(applied=True, habit_id=habit_id)

@router.post("/habits/{habit_id}/reminder", response_model=ActionResult)
def toggle_reminder(habit_id: str, tracker: HabitTracker = Depends(get_tracker)):
    try:
        applied = tracker.toggle_reminder(habit_id)
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))
    if not applied:
        raise _not_found(habit_id)
    return ActionResult(applied=True, habit_id=habit_id)

@router.post("/habits/{habit_id}/exclude", response_model=ActionResult)
def exclude_habit(habit_id: str, payload: DayAction, tracker: HabitTracker = Depends(get_tracker)):
    if not tracker.exclude_for_day(habit_id, payload.date):
        raise _not_found(habit_id)
    return ActionResult(applied=True, habit_id=habit_id)

@router.delete("/habits/{habit_id}", response_model=ActionResult)
def delete_habit(habit_id: str, tracker: HabitTracker = Depends(get_tracker)):
    """Archive when the habit has earlier history, delete otherwise"""
    if not tracker.remove_or_archive(habit_id):
        raise _not_found(habit_id)
    archived = tracker.get_habit(habit_id) is not None
    return ActionResult(
        applied=True,
        habit_id=habit_id,
        message="archived" if archived else "deleted"
    )
