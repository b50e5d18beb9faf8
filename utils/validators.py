"""
utils/validators.py — Input validation for single-task create/edit.

Bulk parsing never goes through here: a parsed record with an empty
activity is accepted as-is. Only the custom task form is checked.
"""

import time
from typing import List, Optional

from models import FarmingTask, ScheduleType
from schedule_codec import is_canonical_date


def validate_task_form(start_date: str, end_date: str, activity: str) -> List[str]:
    """Return error messages for a custom task form (empty list when valid)."""
    errors = []
    if not activity:
        errors.append("请填写农事活动。")
    if not start_date or not end_date:
        errors.append("请填写开始日期和结束日期。")
        return errors

    if not is_canonical_date(start_date) or not is_canonical_date(end_date):
        errors.append("日期格式必须为 YYYY-MM-DD。")
    elif start_date > end_date:
        errors.append("结束日期不能早于开始日期。")
    return errors


def new_custom_task(start_date: str, end_date: str, activity: str, notes: str = '',
                    task_id: Optional[str] = None) -> FarmingTask:
    """Build a custom task; a fresh id is `custom-{timestamp_ms}`."""
    return FarmingTask(
        id=task_id or f"custom-{int(time.time() * 1000)}",
        start_date=start_date,
        end_date=end_date,
        activity=activity,
        notes=notes or '',
        type=ScheduleType.CUSTOM,
    )
