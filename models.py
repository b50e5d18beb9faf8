"""
models.py — Python dataclasses for the farming schedule calendar.

Defines the four fixed schedule categories, the FarmingTask record,
the CalendarDay grid cell and the ScheduleCollection that owns the four
category sequences.

ScheduleCollection is a value: every mutating operation returns a new
collection and leaves the receiver untouched.
"""

from dataclasses import dataclass, field, replace as dc_replace
from datetime import date
from enum import Enum
from typing import Dict, Iterable, List, Optional, Tuple


class ScheduleType(str, Enum):
    """The four fixed schedule categories."""
    SCIENCE = 'science'
    RECLAMATION = 'reclamation'
    LOCAL = 'local'
    CUSTOM = 'custom'

    @classmethod
    def from_value(cls, value) -> Optional['ScheduleType']:
        """Return the member for a tag string, or None if unknown."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            return None

    @property
    def label(self) -> str:
        return SCHEDULE_LABELS[self]

    @property
    def file_code(self) -> str:
        """Positional file code: science → 01 ... custom → 04."""
        return f"{list(ScheduleType).index(self) + 1:02d}"

    @property
    def file_name(self) -> str:
        return f"{self.file_code}.txt"

    @property
    def is_editable(self) -> bool:
        return self is ScheduleType.CUSTOM


SCHEDULE_LABELS = {
    ScheduleType.SCIENCE: '理论科学排期',
    ScheduleType.RECLAMATION: '农垦用户排期',
    ScheduleType.LOCAL: '地方用户排期',
    ScheduleType.CUSTOM: '用户自定义排期',
}

ALL_TYPES: Tuple[ScheduleType, ...] = tuple(ScheduleType)

# Display truncation for grid cells
ACTIVITY_DISPLAY_LENGTH = 6


@dataclass
class FarmingTask:
    """One date-ranged farming activity."""
    id: str = ""
    start_date: str = ""
    end_date: str = ""
    activity: str = ""
    notes: str = ""
    type: ScheduleType = ScheduleType.CUSTOM

    @property
    def is_single_day(self) -> bool:
        return self.start_date == self.end_date

    @property
    def date_range_display(self) -> str:
        """`start` for a single day, `start ~ end` otherwise."""
        if self.is_single_day:
            return self.start_date
        return f"{self.start_date} ~ {self.end_date}"

    @property
    def short_activity(self) -> str:
        return self.activity[:ACTIVITY_DISPLAY_LENGTH]

    def to_dict(self) -> dict:
        """Serialize with the JSON API key names."""
        return {
            'id': self.id,
            'startDate': self.start_date,
            'endDate': self.end_date,
            'activity': self.activity,
            'notes': self.notes,
            'type': self.type.value,
        }


@dataclass
class CalendarDay:
    """A grid cell: a date plus whether it belongs to the rendered month."""
    date: date
    is_current_month: bool
    tasks: List[FarmingTask] = field(default_factory=list)

    @property
    def date_str(self) -> str:
        from calendar_engine import format_date
        return format_date(self.date)


class ScheduleCollection:
    """Ordered task sequences for the four categories.

    Order inside a category is insertion order (as parsed / added).
    """

    def __init__(self, schedules: Optional[Dict[ScheduleType, Iterable[FarmingTask]]] = None):
        data = {t: () for t in ALL_TYPES}
        if schedules:
            for key, tasks in schedules.items():
                schedule_type = ScheduleType.from_value(key)
                if schedule_type is None:
                    continue
                data[schedule_type] = tuple(tasks)
        self._data: Dict[ScheduleType, Tuple[FarmingTask, ...]] = data

    @classmethod
    def empty(cls) -> 'ScheduleCollection':
        return cls()

    def get(self, schedule_type) -> List[FarmingTask]:
        return list(self._data[ScheduleType(schedule_type)])

    def replace(self, schedule_type, tasks: Iterable[FarmingTask]) -> 'ScheduleCollection':
        """Return a new collection with one category replaced wholesale."""
        data = dict(self._data)
        data[ScheduleType(schedule_type)] = tuple(tasks)
        return ScheduleCollection(data)

    def upsert_custom(self, task: FarmingTask) -> 'ScheduleCollection':
        """Insert or replace a custom task; the saved task goes to the end."""
        task = dc_replace(task, type=ScheduleType.CUSTOM)
        kept = [t for t in self._data[ScheduleType.CUSTOM] if t.id != task.id]
        kept.append(task)
        return self.replace(ScheduleType.CUSTOM, kept)

    def remove_custom(self, task_id: str) -> 'ScheduleCollection':
        kept = [t for t in self._data[ScheduleType.CUSTOM] if t.id != task_id]
        return self.replace(ScheduleType.CUSTOM, kept)

    def find_custom(self, task_id: str) -> Optional[FarmingTask]:
        for task in self._data[ScheduleType.CUSTOM]:
            if task.id == task_id:
                return task
        return None

    def tasks_on(self, date_str: str, visible_types: Iterable[ScheduleType] = ALL_TYPES) -> List[FarmingTask]:
        """All tasks of the visible categories whose range contains the date."""
        from calendar_engine import in_range
        visible = set(visible_types)
        result = []
        for schedule_type in ALL_TYPES:
            if schedule_type not in visible:
                continue
            result.extend(
                t for t in self._data[schedule_type]
                if in_range(date_str, t.start_date, t.end_date)
            )
        return result

    def sorted_tasks(self, schedule_type) -> List[FarmingTask]:
        """Category list view order: start date ascending, string comparison."""
        return sorted(self._data[ScheduleType(schedule_type)], key=lambda t: t.start_date)

    def counts(self) -> Dict[ScheduleType, int]:
        return {t: len(self._data[t]) for t in ALL_TYPES}

    def __eq__(self, other):
        if not isinstance(other, ScheduleCollection):
            return NotImplemented
        return self._data == other._data

    def __repr__(self):
        counts = ', '.join(f"{t.value}={len(v)}" for t, v in self._data.items())
        return f"ScheduleCollection({counts})"
