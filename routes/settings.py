"""
routes/settings.py — Display preference routes.

Provides:
- POST /settings/theme — Switch light / dark theme
- POST /settings/palette — Switch green / orange palette
- POST /settings/layers/toggle — Show or hide one category layer

All preferences are persisted in the settings table.
"""

from flask import Blueprint, request, redirect, url_for, flash

from database import get_visible_layers, save_visible_layers, update_setting
from models import ALL_TYPES, ScheduleType

settings_bp = Blueprint('settings', __name__, url_prefix='/settings')

THEMES = ('light', 'dark')
PALETTES = ('green', 'orange')


def _redirect_back():
    """Return to the page the form was posted from (local paths only)."""
    target = request.form.get('next', '')
    if target.startswith('/') and not target.startswith('//'):
        return redirect(target)
    return redirect(url_for('main.index'))


@settings_bp.route('/theme', methods=['POST'])
def theme():
    """Switch the light / dark theme."""
    value = request.form.get('theme', '').strip()
    if value not in THEMES:
        flash("无效的主题。", 'error')
    else:
        update_setting('theme', value)
    return _redirect_back()


@settings_bp.route('/palette', methods=['POST'])
def palette():
    """Switch the accent palette."""
    value = request.form.get('palette', '').strip()
    if value not in PALETTES:
        flash("无效的配色。", 'error')
    else:
        update_setting('palette', value)
    return _redirect_back()


@settings_bp.route('/layers/toggle', methods=['POST'])
def layer_toggle():
    """Toggle one category layer's visibility on the calendar."""
    schedule_type = ScheduleType.from_value(request.form.get('category'))
    if schedule_type is None:
        flash("未知排期类型。", 'error')
        return _redirect_back()

    visible = set(get_visible_layers())
    visible ^= {schedule_type}
    save_visible_layers([t for t in ALL_TYPES if t in visible])
    return _redirect_back()
