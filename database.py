"""
database.py — SQLite schema creation and persisted state.

Stores the only persisted state of the application:
- custom_tasks: the user-editable `custom` schedule, in insertion order
- settings: UI preferences (theme, palette, visible layers)

The read-only categories (science, reclamation, local) are never stored
here; they are re-derived from their text sources on every load.
"""

import json
import logging
import os
import sqlite3

from flask import current_app, has_app_context

from models import ALL_TYPES, FarmingTask, ScheduleType

logger = logging.getLogger(__name__)

DEFAULT_DB_PATH = os.path.join(os.path.dirname(os.path.abspath(__file__)), 'data', 'schedule.db')

DEFAULT_SETTINGS = {
    'theme': 'light',
    'palette': 'green',
    'visible_layers': json.dumps([t.value for t in ALL_TYPES]),
}


def get_db_path() -> str:
    """Database path: app config DATABASE, then SCHEDULE_DB_PATH env, then default."""
    if has_app_context() and current_app.config.get('DATABASE'):
        return current_app.config['DATABASE']
    return os.environ.get('SCHEDULE_DB_PATH', DEFAULT_DB_PATH)


def get_db():
    """Get a database connection with WAL mode enabled."""
    db_path = get_db_path()
    os.makedirs(os.path.dirname(db_path) or '.', exist_ok=True)
    conn = sqlite3.connect(db_path)
    conn.execute("PRAGMA journal_mode=WAL")
    conn.row_factory = sqlite3.Row
    return conn


def init_db():
    """Create all tables if they don't exist and seed default settings."""
    conn = get_db()
    cursor = conn.cursor()

    cursor.execute("""
        CREATE TABLE IF NOT EXISTS settings (
            key TEXT PRIMARY KEY,
            value TEXT NOT NULL
        )
    """)

    cursor.execute("""
        CREATE TABLE IF NOT EXISTS custom_tasks (
            id TEXT PRIMARY KEY,
            position INTEGER NOT NULL,
            start_date TEXT NOT NULL,
            end_date TEXT NOT NULL,
            activity TEXT NOT NULL,
            notes TEXT NOT NULL DEFAULT ''
        )
    """)

    cursor.executemany(
        "INSERT OR IGNORE INTO settings (key, value) VALUES (?, ?)",
        list(DEFAULT_SETTINGS.items())
    )

    conn.commit()
    conn.close()


# ========================================
# Custom tasks
# ========================================

def get_custom_tasks():
    """Retrieve the persisted custom schedule in insertion order."""
    conn = get_db()
    rows = conn.execute("SELECT * FROM custom_tasks ORDER BY position").fetchall()
    conn.close()
    return [
        FarmingTask(
            id=row['id'],
            start_date=row['start_date'],
            end_date=row['end_date'],
            activity=row['activity'],
            notes=row['notes'],
            type=ScheduleType.CUSTOM,
        )
        for row in rows
    ]


def has_custom_state():
    """True once a custom schedule has been persisted."""
    return get_setting('custom_saved') == '1'


def save_custom_tasks(tasks):
    """Replace the stored custom schedule wholesale, keeping order.

    Returns:
        True on success, False on failure.
    """
    conn = get_db()
    try:
        conn.execute("DELETE FROM custom_tasks")
        conn.executemany(
            """INSERT INTO custom_tasks (id, position, start_date, end_date, activity, notes)
               VALUES (?, ?, ?, ?, ?, ?)""",
            [
                (t.id, pos, t.start_date, t.end_date, t.activity, t.notes or '')
                for pos, t in enumerate(tasks)
            ]
        )
        conn.execute(
            "INSERT OR REPLACE INTO settings (key, value) VALUES ('custom_saved', '1')"
        )
        conn.commit()
        return True
    except sqlite3.Error:
        conn.rollback()
        logger.exception("Failed to persist custom schedule")
        return False
    finally:
        conn.close()


# ========================================
# Settings
# ========================================

def get_setting(key, default=None):
    """Get a setting value by key."""
    conn = get_db()
    row = conn.execute("SELECT value FROM settings WHERE key = ?", (key,)).fetchone()
    conn.close()
    if row:
        return row['value']
    return default


def update_setting(key, value):
    """Insert or update a setting value."""
    conn = get_db()
    conn.execute(
        "INSERT OR REPLACE INTO settings (key, value) VALUES (?, ?)",
        (key, str(value))
    )
    conn.commit()
    conn.close()


def get_visible_layers():
    """Visible categories, in fixed category order."""
    raw = get_setting('visible_layers', DEFAULT_SETTINGS['visible_layers'])
    try:
        values = set(json.loads(raw))
    except (TypeError, ValueError):
        values = {t.value for t in ALL_TYPES}
    return [t for t in ALL_TYPES if t.value in values]


def save_visible_layers(layers):
    update_setting('visible_layers', json.dumps([ScheduleType(t).value for t in layers]))
