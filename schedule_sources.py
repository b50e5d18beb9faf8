"""
schedule_sources.py — Loading the bundled schedule text files and holding the live collection.

Each category maps to a text file in the schedule directory by position:
science → 01.txt, reclamation → 02.txt, local → 03.txt, custom → 04.txt.

At startup every file is parsed; a missing or unreadable file gives an
empty category and a warning. The persisted custom schedule, when one
exists, takes priority over 04.txt.

The live ScheduleCollection is kept in app.extensions and is replaced
(never mutated) on every change, only after the change is persisted.
"""

import logging
import os
import threading

from flask import current_app

import database
from models import ALL_TYPES, ScheduleCollection, ScheduleType
from schedule_codec import parse_schedule_text

logger = logging.getLogger(__name__)

EXTENSION_KEY = 'schedules'

_write_lock = threading.Lock()

DEFAULT_SCIENCE_SCHEDULE = """2024-04-15|2024-04-20|播种准备|进行选种与包衣处理
2024-05-01|2024-05-05|正式播种|土壤温度达到10度开始
2024-06-10|2024-06-12|苗期除草|封锁化学除草
2024-07-20|2024-07-22|盛花期追肥|每亩补充尿素5kg
2024-09-25|2024-09-30|成熟收获|含水量降至15%左右开始
"""


def source_path(schedule_dir, schedule_type):
    return os.path.join(schedule_dir, ScheduleType(schedule_type).file_name)


def ensure_default_sources(schedule_dir):
    """Write the bundled science schedule as 01.txt if it is missing."""
    os.makedirs(schedule_dir, exist_ok=True)
    path = source_path(schedule_dir, ScheduleType.SCIENCE)
    if not os.path.exists(path):
        with open(path, 'w', encoding='utf-8') as f:
            f.write(DEFAULT_SCIENCE_SCHEDULE)
        logger.info("Wrote default science schedule to %s", path)


def read_source(schedule_dir, schedule_type, strict=False):
    """Parse one category's text file. Returns [] if it cannot be read."""
    path = source_path(schedule_dir, schedule_type)
    try:
        with open(path, 'r', encoding='utf-8-sig') as f:
            content = f.read()
    except FileNotFoundError:
        logger.info("No schedule file %s, %s starts empty", path, ScheduleType(schedule_type).value)
        return []
    except (OSError, UnicodeDecodeError) as e:
        logger.warning("Failed to read %s: %s", path, e)
        return []
    return parse_schedule_text(content, schedule_type, strict=strict)


def load_bundled_schedules(schedule_dir, strict=False):
    """Parse all four text sources into a new collection."""
    return ScheduleCollection({
        schedule_type: read_source(schedule_dir, schedule_type, strict=strict)
        for schedule_type in ALL_TYPES
    })


def load_schedules(schedule_dir, strict=False):
    """Startup load: text sources, then the persisted custom schedule on top."""
    collection = load_bundled_schedules(schedule_dir, strict=strict)
    if database.has_custom_state():
        collection = collection.replace(ScheduleType.CUSTOM, database.get_custom_tasks())
    return collection


def get_schedules():
    """The live collection of the current app."""
    return current_app.extensions[EXTENSION_KEY]


def update_schedules(change, persist_custom=False):
    """Apply change(collection) and swap in the result.

    Runs under a lock so concurrent edits do not overwrite each other.
    With persist_custom, the custom schedule is saved first and the live
    collection is left untouched when saving fails.

    Returns:
        The new collection, or None if persisting failed.
    """
    with _write_lock:
        updated = change(get_schedules())
        if persist_custom and not database.save_custom_tasks(updated.get(ScheduleType.CUSTOM)):
            return None
        current_app.extensions[EXTENSION_KEY] = updated
        return updated
