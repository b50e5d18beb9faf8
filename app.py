"""
app.py — Flask entry point for the soybean farming calendar.

Initializes the Flask app, registers all route blueprints, calls
init_db() on startup, loads the four schedule text sources (01.txt–04.txt)
and injects i18n strings into template context.

Run: python app.py → localhost:5000
"""

import os
import json
import logging
from flask import Flask
from flask_wtf.csrf import CSRFProtect

from database import init_db
from schedule_sources import EXTENSION_KEY, ensure_default_sources, load_schedules
from routes.main import main_bp
from routes.schedule import schedule_bp
from routes.settings import settings_bp

BASE_DIR = os.path.dirname(os.path.abspath(__file__))


def create_app(test_config=None):
    """Create and configure the Flask application."""
    app = Flask(__name__)
    app.config.from_mapping(
        SECRET_KEY='soybean-calendar-local-app-secret-key',
        DATABASE=os.environ.get('SCHEDULE_DB_PATH', os.path.join(BASE_DIR, 'data', 'schedule.db')),
        SCHEDULE_DIR=os.path.join(BASE_DIR, 'data', 'schedules'),
        # Drop lines with non-canonical dates when parsing
        STRICT_DATES=False,
        WTF_CSRF_CHECK_DEFAULT=True,
        TEMPLATES_AUTO_RELOAD=True,
    )

    if test_config:
        app.config.update(test_config)

    CSRFProtect(app)

    if not app.debug and not app.testing:
        logging.basicConfig(level=logging.INFO, format='%(asctime)s %(levelname)s %(name)s: %(message)s')

    # Initialize database, bundled sources and the live schedules
    with app.app_context():
        init_db()
        ensure_default_sources(app.config['SCHEDULE_DIR'])
        schedules = load_schedules(app.config['SCHEDULE_DIR'], strict=app.config['STRICT_DATES'])
        app.extensions[EXTENSION_KEY] = schedules
        app.logger.info("Loaded schedules: %s", schedules)

    # Register blueprints
    app.register_blueprint(main_bp)
    app.register_blueprint(schedule_bp)
    app.register_blueprint(settings_bp)

    # Load i18n strings
    i18n_path = os.path.join(BASE_DIR, 'i18n', 'zh.json')
    with open(i18n_path, 'r', encoding='utf-8') as f:
        i18n = json.load(f)

    @app.context_processor
    def inject_i18n():
        """Inject Chinese UI strings into all templates."""
        return {'i18n': i18n}

    return app


if __name__ == '__main__':
    app = create_app()
    # Debug mode: enabled by default for development (auto-reload on file changes)
    # Set FLASK_DEBUG=0 to disable for production
    debug = os.environ.get('FLASK_DEBUG', '1') != '0'
    app.run(host='localhost', port=5000, debug=debug)
