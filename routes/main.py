"""
routes/main.py — Calendar page and task JSON API.

Provides:
- GET / — Eight month grids (April–November) for a year, plus a bottom panel:
    daily board (?date=YYYY-MM-DD, default today) or
    category list (?category=<tag>, sorted by start date)
- GET /api/tasks — JSON tasks for ?date= or ?category=
"""

from datetime import MAXYEAR, MINYEAR, date

from flask import Blueprint, render_template, request, jsonify

from calendar_engine import WEEKDAYS, build_calendar, format_date
from database import get_setting, get_visible_layers, save_visible_layers
from models import ALL_TYPES, ScheduleType
from schedule_codec import is_canonical_date
from schedule_sources import get_schedules

main_bp = Blueprint('main', __name__)


@main_bp.route('/')
def index():
    """Calendar page — month grids, category buttons, daily board or category list."""
    today = date.today()
    year = request.args.get('year', today.year, type=int)
    if not MINYEAR <= year <= MAXYEAR:
        year = today.year

    selected_date = request.args.get('date', '')
    if not is_canonical_date(selected_date):
        selected_date = format_date(today)

    active_category = ScheduleType.from_value(request.args.get('category'))
    visible_layers = get_visible_layers()

    # Opening a category always shows its layer
    if active_category and active_category not in visible_layers:
        visible_layers = [t for t in ALL_TYPES if t in visible_layers or t is active_category]
        save_visible_layers(visible_layers)

    schedules = get_schedules()
    if active_category:
        view_mode = 'category'
        tasks_to_display = schedules.sorted_tasks(active_category)
    else:
        view_mode = 'daily'
        tasks_to_display = schedules.tasks_on(selected_date, visible_layers)

    # Task editor: ?new=1 for a blank custom task, ?edit=<id> to edit one
    editing_task = None
    edit_id = request.args.get('edit')
    if edit_id:
        editing_task = schedules.find_custom(edit_id)
    show_editor = bool(editing_task) or request.args.get('new') == '1'

    months = build_calendar(year, schedules, visible_layers)

    return render_template(
        'index.html',
        year=year,
        min_year=MINYEAR,
        max_year=MAXYEAR,
        months=months,
        weekdays=WEEKDAYS,
        schedule_types=ALL_TYPES,
        visible_layers=visible_layers,
        counts=schedules.counts(),
        selected_date=selected_date,
        view_mode=view_mode,
        active_category=active_category,
        tasks_to_display=tasks_to_display,
        editing_task=editing_task,
        show_editor=show_editor,
        theme=get_setting('theme', 'light'),
        palette=get_setting('palette', 'green'),
    )


@main_bp.route('/api/tasks')
def api_tasks():
    """JSON API — tasks for a date (visible layers) or a whole category."""
    schedules = get_schedules()

    category = request.args.get('category')
    if category is not None:
        schedule_type = ScheduleType.from_value(category)
        if schedule_type is None:
            return jsonify({'error': f"未知排期类型：{category}"}), 404
        return jsonify([t.to_dict() for t in schedules.sorted_tasks(schedule_type)])

    selected_date = request.args.get('date', '')
    if not is_canonical_date(selected_date):
        selected_date = format_date(date.today())
    tasks = schedules.tasks_on(selected_date, get_visible_layers())
    return jsonify([t.to_dict() for t in tasks])
