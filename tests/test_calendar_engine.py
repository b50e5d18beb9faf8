"""
tests/test_calendar_engine.py — Tests for the month grid, date keys and range containment.

Tests cover:
- 42-cell grid with a Monday first cell
- Contiguous current-month run of the right length
- Year rollover for out-of-range month indexes
- Canonical date strings
- Inclusive range containment
- Month views carrying the tasks of visible layers
"""

import calendar
from datetime import date, datetime

import pytest

from calendar_engine import (
    GRID_CELLS,
    MONTHS_TO_DISPLAY,
    build_calendar,
    build_month,
    days_in_month,
    format_date,
    generate_grid,
    in_range,
    month_title,
)
from models import FarmingTask, ScheduleCollection, ScheduleType


# ========================================
# Grid Tests
# ========================================

class TestGenerateGrid:

    @pytest.mark.parametrize("year", [1999, 2000, 2023, 2024, 2100])
    def test_grid_invariants_for_every_month(self, year):
        for month in range(12):
            grid = generate_grid(year, month)
            assert len(grid) == GRID_CELLS
            assert grid[0].date.weekday() == 0

            flags = [d.is_current_month for d in grid]
            first = flags.index(True)
            run = flags[first:first + flags.count(True)]
            assert all(run), "current month days must be contiguous"
            assert len(run) == calendar.monthrange(year, month + 1)[1]

    def test_consecutive_days(self):
        grid = generate_grid(2024, 6)
        for prev, cur in zip(grid, grid[1:]):
            assert (cur.date - prev.date).days == 1

    def test_april_2024_starts_on_monday(self):
        grid = generate_grid(2024, 3)
        assert grid[0].date == date(2024, 4, 1)
        assert grid[0].is_current_month
        assert grid[29].date == date(2024, 4, 30)
        assert grid[30].date == date(2024, 5, 1)
        assert all(d.date.month == 5 and not d.is_current_month for d in grid[30:])

    def test_previous_month_padding(self):
        # May 1, 2024 is a Wednesday
        grid = generate_grid(2024, 4)
        assert [d.date for d in grid[:2]] == [date(2024, 4, 29), date(2024, 4, 30)]
        assert not grid[0].is_current_month
        assert grid[2].date == date(2024, 5, 1)

    def test_leap_february(self):
        grid = generate_grid(2024, 1)
        assert sum(d.is_current_month for d in grid) == 29
        grid = generate_grid(2023, 1)
        assert sum(d.is_current_month for d in grid) == 28

    def test_january_pads_from_previous_december(self):
        # Jan 1, 2025 is a Wednesday
        grid = generate_grid(2025, 0)
        assert grid[0].date == date(2024, 12, 30)

    def test_december_pads_into_next_january(self):
        grid = generate_grid(2024, 11)
        assert grid[-1].date.year == 2025
        assert grid[-1].date.month == 1

    def test_month_index_rolls_over(self):
        assert generate_grid(2024, 12)[0].date == generate_grid(2025, 0)[0].date
        assert [d.date for d in generate_grid(2024, -1)] == [d.date for d in generate_grid(2023, 11)]

    def test_days_in_month(self):
        days = days_in_month(2024, 3)
        assert len(days) == 30
        assert days[0] == date(2024, 4, 1)
        assert days[-1] == date(2024, 4, 30)


# ========================================
# Date Key Tests
# ========================================

class TestFormatDate:

    def test_zero_padding(self):
        assert format_date(date(2024, 4, 5)) == "2024-04-05"
        assert format_date(date(2024, 12, 31)) == "2024-12-31"

    def test_datetime_uses_calendar_fields(self):
        assert format_date(datetime(2024, 7, 9, 23, 59)) == "2024-07-09"

    def test_short_year_padded(self):
        assert format_date(date(999, 1, 2)) == "0999-01-02"

    def test_string_order_matches_date_order(self):
        dates = [date(2024, 10, 1), date(2024, 9, 30), date(2023, 12, 31), date(2024, 1, 2)]
        assert sorted(format_date(d) for d in dates) == [format_date(d) for d in sorted(dates)]

    def test_calendar_day_date_str(self):
        assert generate_grid(2024, 3)[0].date_str == "2024-04-01"


class TestInRange:

    def test_single_day_range(self):
        assert in_range("2024-05-01", "2024-05-01", "2024-05-01")

    def test_inclusive_boundaries(self):
        assert in_range("2024-04-15", "2024-04-15", "2024-04-20")
        assert in_range("2024-04-20", "2024-04-15", "2024-04-20")
        assert in_range("2024-04-17", "2024-04-15", "2024-04-20")

    def test_one_day_outside(self):
        assert not in_range("2024-04-14", "2024-04-15", "2024-04-20")
        assert not in_range("2024-04-21", "2024-04-15", "2024-04-20")

    def test_across_month_boundary(self):
        assert in_range("2024-05-01", "2024-04-28", "2024-05-03")
        assert not in_range("2024-05-04", "2024-04-28", "2024-05-03")


# ========================================
# Month View Tests
# ========================================

def _collection():
    return ScheduleCollection({
        ScheduleType.SCIENCE: [
            FarmingTask(id='s1', start_date='2024-04-15', end_date='2024-04-20',
                        activity='播种准备', type=ScheduleType.SCIENCE),
        ],
        ScheduleType.CUSTOM: [
            FarmingTask(id='c1', start_date='2024-04-30', end_date='2024-05-02',
                        activity='巡田', type=ScheduleType.CUSTOM),
        ],
    })


class TestMonthViews:

    def test_days_carry_tasks(self):
        days = {d.date_str: d for d in build_month(2024, 3, _collection())}
        assert [t.id for t in days['2024-04-15'].tasks] == ['s1']
        assert days['2024-04-21'].tasks == []
        # Padding cells of the next month show tasks too
        assert [t.id for t in days['2024-05-02'].tasks] == ['c1']

    def test_hidden_layers_are_skipped(self):
        days = {d.date_str: d for d in build_month(2024, 3, _collection(), [ScheduleType.CUSTOM])}
        assert days['2024-04-15'].tasks == []
        assert [t.id for t in days['2024-04-30'].tasks] == ['c1']

    def test_build_calendar_shows_april_to_november(self):
        months = build_calendar(2024, _collection())
        assert [m['month'] for m in months] == MONTHS_TO_DISPLAY
        assert months[0]['title'] == "2024年 4月"
        assert months[-1]['title'] == "2024年 11月"
        assert all(len(m['days']) == GRID_CELLS for m in months)

    def test_month_title_rolls_over(self):
        assert month_title(2024, 12) == "2025年 1月"


class TestGridLimits:

    def test_first_supported_month(self):
        # January 1 of year 1 is a Monday: no previous-month padding needed
        grid = generate_grid(1, 0)
        assert len(grid) == GRID_CELLS
        assert grid[0].date == date(1, 1, 1)
        assert grid[0].is_current_month

    def test_last_displayed_month(self):
        grid = generate_grid(9999, 10)
        assert len(grid) == GRID_CELLS
        assert grid[-1].date.month == 12
