"""
routes/schedule.py — Custom task editing, import and export routes.

Provides:
- POST /schedule/custom/save — Create or edit a custom task
- POST /schedule/custom/delete — Delete a custom task
- POST /schedule/import/<category> — Replace a category with an uploaded .txt
- GET /schedule/export/<category> — Download the category as <code>.txt
- GET /schedule/export/<category>/excel — Download the category as .xlsx

Only the custom category is editable task by task. Any category can be
replaced wholesale by import; only custom imports are persisted.
"""

import logging

from flask import Blueprint, abort, current_app, flash, redirect, request, send_file, url_for, Response

from models import ScheduleType
from schedule_codec import ScheduleFormatError, decode_upload, parse_schedule_text
from schedule_sources import get_schedules, update_schedules
from utils.export import generate_excel, generate_text
from utils.validators import new_custom_task, validate_task_form

logger = logging.getLogger(__name__)

schedule_bp = Blueprint('schedule', __name__, url_prefix='/schedule')


def _category_or_404(category):
    schedule_type = ScheduleType.from_value(category)
    if schedule_type is None:
        abort(404)
    return schedule_type


def _back(**params):
    """Redirect to the calendar page, keeping the year being viewed."""
    params = {k: v for k, v in params.items() if v}
    year = request.form.get('year', type=int) or request.args.get('year', type=int)
    if year:
        params['year'] = year
    return redirect(url_for('main.index', **params))


@schedule_bp.route('/custom/save', methods=['POST'])
def custom_save():
    """Create a custom task, or replace the one with the submitted id."""
    task_id = request.form.get('id', '').strip() or None
    start_date = request.form.get('start_date', '').strip()
    end_date = request.form.get('end_date', '').strip()
    activity = request.form.get('activity', '').strip()
    notes = request.form.get('notes', '').strip()

    errors = validate_task_form(start_date, end_date, activity)
    if errors:
        for message in errors:
            flash(message, 'error')
        if task_id:
            return _back(edit=task_id)
        return _back(new=1, date=start_date or None)

    schedules = get_schedules()
    if task_id and schedules.find_custom(task_id) is None:
        flash("要编辑的任务不存在。", 'error')
        return _back()

    task = new_custom_task(start_date, end_date, activity, notes, task_id=task_id)
    if update_schedules(lambda s: s.upsert_custom(task), persist_custom=True) is not None:
        flash(f"已保存农事任务「{activity}」。", 'success')
    else:
        flash("保存失败，请重试。", 'error')
    return _back(date=start_date)


@schedule_bp.route('/custom/delete', methods=['POST'])
def custom_delete():
    """Delete a custom task by id."""
    task_id = request.form.get('id', '').strip()
    schedules = get_schedules()
    task = schedules.find_custom(task_id) if task_id else None
    if task is None:
        flash("任务不存在。", 'error')
        return _back()

    if update_schedules(lambda s: s.remove_custom(task_id), persist_custom=True) is not None:
        flash(f"已删除农事任务「{task.activity}」。", 'success')
    else:
        flash("删除失败，请重试。", 'error')
    return _back(date=request.form.get('date') or None)


@schedule_bp.route('/import/<category>', methods=['POST'])
def import_schedule(category):
    """Replace a category with the tasks of an uploaded text file."""
    schedule_type = _category_or_404(category)

    if 'file' not in request.files:
        flash("未选择文件。", 'error')
        return _back(category=schedule_type.value)

    file = request.files['file']
    if file.filename == '':
        flash("未选择文件。", 'error')
        return _back(category=schedule_type.value)

    try:
        content = decode_upload(file.read())
    except ScheduleFormatError as e:
        flash(str(e), 'error')
        return _back(category=schedule_type.value)

    tasks = parse_schedule_text(content, schedule_type, strict=current_app.config.get('STRICT_DATES', False))
    persist = schedule_type.is_editable
    if update_schedules(lambda s: s.replace(schedule_type, tasks), persist_custom=persist) is not None:
        logger.info("Imported %d task(s) into %s", len(tasks), schedule_type.value)
        flash(f"已导入 {len(tasks)} 条{schedule_type.label}。", 'success')
    else:
        flash("导入后保存失败，请重试。", 'error')
    return _back(category=schedule_type.value)


@schedule_bp.route('/export/<category>')
def export_text(category):
    """Download a category as pipe-delimited text."""
    schedule_type = _category_or_404(category)
    data, filename = generate_text(schedule_type, get_schedules().get(schedule_type))
    return Response(
        data,
        mimetype='text/plain',
        headers={'Content-Disposition': f'attachment; filename={filename}'},
    )


@schedule_bp.route('/export/<category>/excel')
def export_excel(category):
    """Download a category as an Excel workbook."""
    schedule_type = _category_or_404(category)
    buffer, filename = generate_excel(schedule_type, get_schedules().sorted_tasks(schedule_type))
    return send_file(
        buffer,
        as_attachment=True,
        download_name=filename,
        mimetype='application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'
    )
