"""
ZenHabit - Week Window Resolver
Sunday-aligned 7-day windows around a reference date
"""

from dataclasses import dataclass
from datetime import date
from typing import Optional, Tuple

from utils.datetime_utils import DateLike, add_days, format_date, to_date

DAYS_IN_WEEK = 7

# Sunday first; independent of the process locale
WEEKDAY_NAMES = ("Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday")
SHORT_WEEKDAY_NAMES = ("Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat")

@dataclass(frozen=True)
class DayDescriptor:
    """One day of a week window"""
    date: date
    iso: str
    weekday_name: str
    short_weekday_name: str
    formatted_date: str
    is_today: bool = False

    def to_dict(self):
        return {
            "date": self.iso,
            "dayName": self.weekday_name,
            "shortDay": self.short_weekday_name,
            "formattedDate": self.formatted_date,
            "isToday": self.is_today,
        }

@dataclass(frozen=True)
class WeekWindow:
    days: Tuple[DayDescriptor, ...]

    @property
    def start(self) -> DayDescriptor:
        return self.days[0]

    @property
    def end(self) -> DayDescriptor:
        return self.days[-1]

    @property
    def start_iso(self) -> str:
        return self.days[0].iso

    @property
    def end_iso(self) -> str:
        return self.days[-1].iso

    @property
    def key(self) -> str:
        """Canonical week key: ISO date of the Sunday"""
        return self.start_iso

    def __iter__(self):
        return iter(self.days)

    def __len__(self):
        return len(self.days)

    def __getitem__(self, index):
        return self.days[index]

    def contains(self, value: DateLike) -> bool:
        return self.start.date <= to_date(value) <= self.end.date

    def day(self, value: DateLike) -> Optional[DayDescriptor]:
        iso = to_date(value).isoformat()
        for d in self.days:
            if d.iso == iso:
                return d
        return None

    def to_dict(self):
        return {
            "key": self.key,
            "start": self.start_iso,
            "end": self.end_iso,
            "days": [d.to_dict() for d in self.days],
        }

def week_start(reference: DateLike) -> date:
    """Sunday on or before the reference date"""
    d = to_date(reference)
    # date.weekday(): Monday == 0 ... Sunday == 6
    return add_days(d, -((d.weekday() + 1) % DAYS_IN_WEEK))

def resolve_week(reference: DateLike, today: Optional[date] = None) -> WeekWindow:
    """Resolve the Sunday-to-Saturday window containing ``reference``."""
    start = week_start(reference)
    days = []
    for offset in range(DAYS_IN_WEEK):
        d = add_days(start, offset)
        days.append(DayDescriptor(
            date=d,
            iso=d.isoformat(),
            weekday_name=WEEKDAY_NAMES[offset],
            short_weekday_name=SHORT_WEEKDAY_NAMES[offset],
            formatted_date=format_date(d),
            is_today=today is not None and d == today,
        ))
    return WeekWindow(days=tuple(days))

def shift_week(reference: DateLike, weeks: int) -> date:
    """Move the reference date by whole weeks (negative = back)"""
    return add_days(to_date(reference), DAYS_IN_WEEK * weeks)
