from datetime import date, datetime, timedelta
from typing import Union
import pytz

DateLike = Union[date, datetime, str]

def now_in(tz_name: str = "UTC") -> datetime:
    return datetime.now(pytz.timezone(tz_name))

def today(tz_name: str = "UTC") -> date:
    return now_in(tz_name).date()

def format_date(d: date, fmt: str = "%d.%m.%Y") -> str:
    return d.strftime(fmt)

def add_days(d: date, days: int) -> date:
    return d + timedelta(days=days)

def parse_date(date_str: str) -> date:
    return date.fromisoformat(date_str)

def to_date(value: DateLike) -> date:
    """Normalise a date, datetime or ISO string to a calendar date."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return parse_date(value)

def to_iso(value: DateLike) -> str:
    return to_date(value).isoformat()
