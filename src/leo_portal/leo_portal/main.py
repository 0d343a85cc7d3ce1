from __future__ import annotations

import importlib
import logging
from pathlib import Path
from typing import Any, Dict, Optional

from dotenv import load_dotenv
from flask import Flask
from flask_mail import Mail

from config import get_settings_module, load_settings

from .container import Container, build_container
from .database.bootstrap import apply_schema, ensure_demo_users, list_tables
from .jobs.scheduler import build_scheduler
from .triggers.handlers import connect_handlers

from .ai.controller import register as register_assistant
from .attendance.controller import register as register_attendance
from .communication.controller import register as register_communication
from .documents.controller import register as register_documents
from .events.controller import register as register_events
from .finance.controller import register as register_finance
from .groups.controller import register as register_groups
from .points.controller import register as register_points
from .project_ideas.controller import register as register_project_ideas
from .reports.controller import register as register_reports
from .tasks.controller import register as register_tasks
from .users.controller import register as register_users

logger = logging.getLogger("leo_portal")

_PROJECT_ROOT = Path(__file__).resolve().parents[3]

_FLASK_KEYS = (
    "DEBUG",
    "TESTING",
    "MAX_CONTENT_LENGTH",
    "MAIL_SERVER",
    "MAIL_PORT",
    "MAIL_USE_TLS",
    "MAIL_USE_SSL",
    "MAIL_USERNAME",
    "MAIL_PASSWORD",
    "MAIL_DEFAULT_SENDER",
    "PORTAL_BASE_URL",
    "SCHEDULER_TIMEZONE",
)


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def _prepare_database(settings: Dict[str, Any]) -> None:
    db_config = settings["DB_CONFIG"]
    if settings.get("AUTO_INIT_DB"):
        apply_schema(db_config, schema_path=_PROJECT_ROOT / "database" / "schema.sql")
        logger.info("Schema ready (tables=%d)", len(list_tables(db_config)))
    if settings.get("AUTO_SEED_DB"):
        ensure_demo_users(db_config)
        logger.info("Demo accounts ready")


def create_app(*, container: Optional[Container] = None, overrides: Optional[Dict[str, Any]] = None) -> Flask:
    """Application factory.

    Tests pass a ``container`` wired to in-memory repositories; otherwise the
    MySQL-backed container is built from the settings module picked by APP_ENV.
    """
    load_dotenv(override=False)
    app = Flask(__name__, template_folder="../../../templates", static_folder="../../../static")

    settings_module = get_settings_module()
    settings = load_settings(importlib.import_module(settings_module))
    settings.update(overrides or {})

    _configure_logging(settings.get("LOG_LEVEL", "INFO"))
    app.secret_key = settings["SECRET_KEY"]
    for key in _FLASK_KEYS:
        if key in settings:
            app.config[key] = settings[key]

    db_config = settings["DB_CONFIG"]
    logger.info(
        "settings=%s db=%s@%s:%s/%s",
        settings_module,
        db_config.get("user"),
        db_config.get("host"),
        db_config.get("port", 3306),
        db_config.get("database"),
    )

    mail = Mail(app)

    if container is None:
        _prepare_database(settings)
        container = build_container(db_config=db_config, settings=settings, mail=mail)

    register_users(app, container)
    register_events(app, container)
    register_attendance(app, container)
    register_points(app, container)
    register_finance(app, container)
    register_project_ideas(app, container)
    register_tasks(app, container)
    register_documents(app, container)
    register_groups(app, container)
    register_communication(app, container)
    register_reports(app, container)
    register_assistant(app, container)

    app.extensions["leo_portal"] = {
        "container": container,
        "handlers": connect_handlers(container),
    }

    if settings.get("ENABLE_SCHEDULER") and not settings.get("TESTING"):
        scheduler = build_scheduler(app, container)
        scheduler.start()
        app.extensions["leo_portal"]["scheduler"] = scheduler
        logger.info("Background scheduler started (%s)", app.config.get("SCHEDULER_TIMEZONE"))

    return app
