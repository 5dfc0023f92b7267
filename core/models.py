#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
ZenHabit - Core Data Models
Habit model with validation and serialisation

Version: 1.0.0
"""

import uuid
from datetime import date
from typing import Dict, List, Optional, Any
from dataclasses import dataclass, field
from enum import Enum
import logging

logger = logging.getLogger(__name__)

# ===== ENUMS =====

class Category(Enum):
    """Habit categories"""
    HEALTH = "Health"
    PRODUCTIVITY = "Productivity"
    MINDFULNESS = "Mindfulness"
    LEARNING = "Learning"
    FITNESS = "Fitness"
    OTHER = "Other"

class HabitKind(Enum):
    """Recurring habit or one-off reminder"""
    HABIT = "habit"
    REMINDER = "reminder"

# ===== EXCEPTIONS =====

class ValidationError(Exception):
    """Invalid input data"""
    pass

class HabitNotFoundError(LookupError):
    """Mutation references an unknown habit id"""

    def __init__(self, habit_id: str):
        super().__init__(f"Habit {habit_id!r} not found")
        self.habit_id = habit_id

# ===== VALIDATION HELPERS =====

TITLE_MAX_LENGTH = 200

def validate_text(text: str, min_length: int = 1, max_length: int = 1000, field_name: str = "text") -> str:
    """Validate and trim a text field"""
    if not isinstance(text, str):
        raise ValidationError(f"{field_name} must be a string")

    text = text.strip()
    if len(text) < min_length:
        raise ValidationError(f"{field_name} must contain at least {min_length} characters")

    if len(text) > max_length:
        raise ValidationError(f"{field_name} must contain at most {max_length} characters")

    return text

def validate_iso_date(value: str, field_name: str = "date") -> str:
    """Validate an ISO calendar date (YYYY-MM-DD)"""
    try:
        return date.fromisoformat(value).isoformat()
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid {field_name}: {value!r}")

def _unique(values: List[str]) -> List[str]:
    seen = set()
    result = []
    for value in values:
        if value not in seen:
            seen.add(value)
            result.append(value)
    return result

def new_habit_id() -> str:
    return uuid.uuid4().hex

# ===== CORE MODEL =====

@dataclass
class Habit:
    """Trackable habit or reminder"""
    id: str
    title: str
    created_at: str  # YYYY-MM-DD
    category: Category = Category.OTHER
    kind: HabitKind = HabitKind.HABIT
    completed_dates: List[str] = field(default_factory=list)
    archived_at: Optional[str] = None
    excluded_dates: List[str] = field(default_factory=list)

    def __post_init__(self):
        if not self.id:
            raise ValidationError("Habit id must not be empty")

        if isinstance(self.category, str):
            self.category = parse_category(self.category)
        if isinstance(self.kind, str):
            self.kind = parse_kind(self.kind)

        self.created_at = validate_iso_date(self.created_at, "createdAt")
        if self.archived_at is not None:
            self.archived_at = validate_iso_date(self.archived_at, "archivedAt")

        self.completed_dates = _unique(
            [validate_iso_date(d, "completed date") for d in self.completed_dates]
        )
        self.excluded_dates = _unique(
            [validate_iso_date(d, "excluded date") for d in self.excluded_dates]
        )

    @property
    def is_reminder(self) -> bool:
        return self.kind is HabitKind.REMINDER

    @property
    def is_done(self) -> bool:
        """Reminder semantics: any completion means done"""
        return bool(self.completed_dates)

    @property
    def last_completed(self) -> Optional[str]:
        return max(self.completed_dates) if self.completed_dates else None

    def is_completed_on(self, iso_day: str) -> bool:
        return iso_day in self.completed_dates

    def is_excluded_on(self, iso_day: str) -> bool:
        return iso_day in self.excluded_dates

    def has_history_before(self, iso_day: str) -> bool:
        return any(d < iso_day for d in self.completed_dates)

    # ===== SERIALIZATION =====

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "id": self.id,
            "title": self.title,
            "category": self.category.value,
            "type": self.kind.value,
            "completedDates": list(self.completed_dates),
            "createdAt": self.created_at,
            "excludedDates": list(self.excluded_dates),
        }
        if self.archived_at is not None:
            data["archivedAt"] = self.archived_at
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Habit":
        """Deserialise a stored record; missing or unknown type means habit"""
        try:
            return cls(
                id=str(data["id"]),
                title=str(data.get("title", "")),
                created_at=data["createdAt"],
                category=parse_category(data.get("category", Category.OTHER.value)),
                kind=parse_kind(data.get("type")),
                completed_dates=list(data.get("completedDates") or []),
                archived_at=data.get("archivedAt") or None,
                excluded_dates=list(data.get("excludedDates") or []),
            )
        except (KeyError, TypeError) as e:
            raise ValidationError(f"Could not load habit: {e}")

def parse_kind(value: Optional[str]) -> HabitKind:
    try:
        return HabitKind(value)
    except ValueError:
        if value is not None:
            logger.warning(f"Unknown habit type {value!r}, treating as habit")
        return HabitKind.HABIT

def parse_category(value: str) -> Category:
    if isinstance(value, Category):
        return value
    try:
        return Category(value)
    except ValueError:
        valid_values = [c.value for c in Category]
        raise ValidationError(f"category must be one of: {valid_values}")
