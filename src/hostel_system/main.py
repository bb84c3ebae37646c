from __future__ import annotations

import importlib
import logging
from datetime import timedelta
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from .attendance.controller import register as register_attendance
from .common.web import init_web
from .complaints.controller import register as register_complaints
from .container import Container, build_container
from .core.constants import DEFAULT_BULK_MARK_WORKERS, DEFAULT_SESSION_DAYS
from .database.bootstrap import apply_schema, apply_seed_sql, ensure_demo_users, list_tables
from .mess.controller import register as register_mess
from .notices.controller import register as register_notices
from .profiles.controller import register as register_profiles
from .rooms.controller import register as register_rooms
from .session.controller import register as register_session
from .settings import get_settings_module

DATABASE_DIR = Path(__file__).resolve().parents[2] / "database"


def create_app(container: Optional[Container] = None) -> Flask:
    """Build the Flask app.

    Pass ``container`` to run against pre-built services (tests use
    in-memory repositories); otherwise services are wired to MySQL and
    the schema/seed are applied according to the settings module.
    """

    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    db_config = getattr(settings, "DB_CONFIG")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    app.permanent_session_lifetime = timedelta(days=int(getattr(settings, "SESSION_DAYS", DEFAULT_SESSION_DAYS)))

    if app.config["DEBUG"]:
        app.logger.setLevel(logging.INFO)
        app.logger.info(
            "settings=%s db=%s@%s:%s/%s",
            settings_module,
            db_config.get("user"),
            db_config.get("host"),
            db_config.get("port", 3306),
            db_config.get("database"),
        )

    if container is None:
        if getattr(settings, "AUTO_INIT_DB", False):
            apply_schema(db_config, schema_path=DATABASE_DIR / "schema.sql")
            app.logger.info("schema ready (tables=%d)", len(list_tables(db_config)))
        if getattr(settings, "AUTO_SEED_DB", False):
            apply_seed_sql(db_config, seed_path=DATABASE_DIR / "seed.sql")
            ensure_demo_users(db_config)
            app.logger.info("demo seed ready")

        container = build_container(
            db_config=db_config,
            bulk_mark_workers=int(getattr(settings, "BULK_MARK_WORKERS", DEFAULT_BULK_MARK_WORKERS)),
        )

    init_web(app, container)
    register_session(app, container)
    register_profiles(app, container)
    register_attendance(app, container)
    register_rooms(app, container)
    register_complaints(app, container)
    register_mess(app, container)
    register_notices(app, container)

    return app
