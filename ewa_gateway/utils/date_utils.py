"""Date manipulation utilities"""

import calendar
from datetime import date, datetime, timedelta
from typing import Union


def as_date(value: Union[date, datetime]) -> date:
    """Reduce a datetime to its calendar date (dates pass through)"""
    return value.date() if isinstance(value, datetime) else value


def start_of_month(day: date) -> date:
    return day.replace(day=1)


def clamped_day(year: int, month: int, day: int) -> date:
    """Build a date, pulling day back to the last day of short months (31 -> 30, 28, 29)"""
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day, last_day))


def shift_month(year: int, month: int, delta: int) -> tuple[int, int]:
    """Move (year, month) by delta months"""
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1


def add_days(from_date: date, days: int) -> date:
    return from_date + timedelta(days=days)
