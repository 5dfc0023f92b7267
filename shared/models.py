import datetime as dt
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from core.models import Category, HabitKind, TITLE_MAX_LENGTH

# Request models

class HabitCreate(BaseModel):
    title: str = Field(..., max_length=TITLE_MAX_LENGTH)
    kind: HabitKind = Field(default=HabitKind.HABIT, alias="type")
    category: Category = Category.OTHER

    model_config = {"populate_by_name": True}

    @field_validator('title')
    @classmethod
    def validate_title(cls, v):
        if not v.strip():
            raise ValueError('Title must not be empty')
        return v.strip()

class DayAction(BaseModel):
    date: dt.date

class WeekJump(BaseModel):
    date: dt.date

# Response models

class HealthCheck(BaseModel):
    status: str
    service: str
    version: str
    timestamp: float
    details: Optional[Dict[str, Any]] = None

class ActionResult(BaseModel):
    applied: bool
    habit_id: str
    message: Optional[str] = None

class InsightsState(BaseModel):
    loading: bool
    tips: List[str] = []
    generation: int = 0
    updatedAt: Optional[float] = None

class ChartPoint(BaseModel):
    name: str
    value: float
