"""
calendar_engine.py — Calendar grid generation and date keys for the schedule views.

This module implements:
- Month grid: a fixed 6 × 7 matrix of 42 days, weeks starting on Monday,
  padded with trailing days of the previous month and leading days of the
  next month
- Canonical date strings: zero-padded YYYY-MM-DD from local calendar fields
- Range containment: lexicographic comparison of canonical date strings
- Month views: grids whose days carry the tasks of the visible layers

Month indexes are zero-based (0 = January). They are not validated:
out-of-range indexes roll over into the adjacent year (12 → January of
year + 1, -1 → December of year - 1).
"""

from datetime import date, datetime, timedelta
from typing import Iterable, List

from models import ALL_TYPES, CalendarDay, ScheduleCollection, ScheduleType


GRID_ROWS = 6
GRID_COLUMNS = 7
GRID_CELLS = GRID_ROWS * GRID_COLUMNS

# April to November, zero-based
MONTHS_TO_DISPLAY = [3, 4, 5, 6, 7, 8, 9, 10]

WEEKDAYS = ['一', '二', '三', '四', '五', '六', '日']


def _month_start(year: int, month: int) -> date:
    """First day of a zero-based month, rolling the year on overflow."""
    years, month0 = divmod(month, 12)
    return date(year + years, month0 + 1, 1)


def days_in_month(year: int, month: int) -> List[date]:
    """Every date of a zero-based month, in order."""
    current = _month_start(year, month)
    target_month = current.month
    days = []
    while current.month == target_month:
        days.append(current)
        current += timedelta(days=1)
    return days


def generate_grid(year: int, month: int) -> List[CalendarDay]:
    """
    Build the 42-cell grid for a zero-based month.

    The first cell is always a Monday. Days outside the month are
    flagged is_current_month=False.
    """
    first_day = _month_start(year, month)
    # date.weekday() is already Monday = 0
    start_offset = first_day.weekday()

    days: List[CalendarDay] = []

    # Previous month padding, walking back from its last day
    if start_offset:
        prev_last = first_day - timedelta(days=1)
        for i in range(start_offset - 1, -1, -1):
            days.append(CalendarDay(prev_last - timedelta(days=i), False))

    for day in days_in_month(year, month):
        days.append(CalendarDay(day, True))

    # Next month padding, starting at day 1
    next_first = _month_start(year, month + 1)
    remaining = GRID_CELLS - len(days)
    for i in range(remaining):
        days.append(CalendarDay(next_first + timedelta(days=i), False))

    return days


def format_date(value) -> str:
    """Canonical YYYY-MM-DD key for a date or a (local) datetime."""
    if isinstance(value, datetime):
        value = value.date()
    return f"{value.year:04d}-{value.month:02d}-{value.day:02d}"


def in_range(date_str: str, start_date: str, end_date: str) -> bool:
    """Inclusive containment test on canonical date strings."""
    return start_date <= date_str <= end_date


def month_title(year: int, month: int) -> str:
    first_day = _month_start(year, month)
    return f"{first_day.year}年 {first_day.month}月"


def build_month(year: int, month: int, collection: ScheduleCollection,
                visible_types: Iterable[ScheduleType] = ALL_TYPES) -> List[CalendarDay]:
    """Grid for one month with each day's tasks from the visible layers."""
    visible = tuple(visible_types)
    days = generate_grid(year, month)
    for day in days:
        day.tasks = collection.tasks_on(format_date(day.date), visible)
    return days


def build_calendar(year: int, collection: ScheduleCollection,
                   visible_types: Iterable[ScheduleType] = ALL_TYPES,
                   months: Iterable[int] = MONTHS_TO_DISPLAY) -> List[dict]:
    """All displayed month views for a year."""
    visible = tuple(visible_types)
    return [
        {
            'year': year,
            'month': month,
            'title': month_title(year, month),
            'days': build_month(year, month, collection, visible),
        }
        for month in months
    ]
