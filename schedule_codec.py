"""
schedule_codec.py — Pipe-delimited schedule text format.

Format, one task per line:

    startDate|endDate|activity|notes

`notes` is optional. An optional header line (containing HEADER_MARKER)
may appear anywhere and is skipped, as are blank lines. There is no
escaping for literal `|` or newlines inside a field.

Parsing is best-effort: lines with fewer than 3 fields are dropped
silently, date fields are passed through as opaque strings unless
strict parsing is requested.
"""

import logging
import re
import time
from datetime import date
from typing import Iterable, List

from models import FarmingTask, ScheduleType

logger = logging.getLogger(__name__)

TEMPLATE_HEADER = "开始日期(YYYY-MM-DD)|结束日期(YYYY-MM-DD)|农事活动|详细处理事项\n"
HEADER_MARKER = "开始日期"
FIELD_SEPARATOR = '|'
MIN_FIELDS = 3

CANONICAL_DATE_RE = re.compile(r'^\d{4}-\d{2}-\d{2}$')


class ScheduleFormatError(ValueError):
    """Raised when an uploaded schedule file cannot be read as text."""


def is_canonical_date(value: str) -> bool:
    """True for a real calendar date written as zero-padded YYYY-MM-DD."""
    if not value or not CANONICAL_DATE_RE.match(value):
        return False
    try:
        date.fromisoformat(value)
    except ValueError:
        return False
    return True


def parse_schedule_text(text: str, schedule_type, strict: bool = False) -> List[FarmingTask]:
    """
    Parse schedule text into tasks tagged with schedule_type.

    Args:
        text: Raw text, newline separated.
        schedule_type: ScheduleType member or its tag string.
        strict: Also drop lines whose dates are not canonical or whose
            start date is after the end date.

    Returns:
        Tasks in line order. Ids are `{type}-{line_index}-{timestamp_ms}`,
        unique within one call.
    """
    schedule_type = ScheduleType(schedule_type)
    stamp = int(time.time() * 1000)

    tasks = []
    dropped = 0
    for idx, line in enumerate(text.split('\n')):
        if line.strip() == "" or HEADER_MARKER in line:
            continue

        parts = line.split(FIELD_SEPARATOR)
        if len(parts) < MIN_FIELDS:
            dropped += 1
            continue

        start_date = parts[0].strip()
        end_date = parts[1].strip()
        if strict and not (is_canonical_date(start_date)
                           and is_canonical_date(end_date)
                           and start_date <= end_date):
            dropped += 1
            continue

        tasks.append(FarmingTask(
            id=f"{schedule_type.value}-{idx}-{stamp}",
            start_date=start_date,
            end_date=end_date,
            activity=parts[2].strip(),
            notes=parts[3].strip() if len(parts) > 3 else '',
            type=schedule_type,
        ))

    if dropped:
        logger.debug("Dropped %d unparsable line(s) from %s schedule", dropped, schedule_type.value)
    return tasks


def serialize_schedule(tasks: Iterable[FarmingTask]) -> str:
    """Header line followed by one `start|end|activity|notes` line per task."""
    lines = [
        FIELD_SEPARATOR.join((t.start_date, t.end_date, t.activity, t.notes or ''))
        for t in tasks
    ]
    return TEMPLATE_HEADER + '\n'.join(lines)


def decode_upload(raw: bytes) -> str:
    """Decode an uploaded schedule file (UTF-8, BOM tolerated)."""
    try:
        return raw.decode('utf-8-sig')
    except UnicodeDecodeError as e:
        raise ScheduleFormatError(f"文件不是 UTF-8 文本：{e.reason}") from e
