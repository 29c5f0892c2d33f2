from __future__ import annotations

import importlib
import logging
import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask, jsonify

from config import get_settings_module

from .checkins.controller import register as register_checkins
from .container import Container, EngineSettings, build_container
from .core.exceptions import DomainError
from .database.bootstrap import apply_schema, apply_seed_sql, list_tables
from .excuses.controller import register as register_excuses
from .reports.controller import register as register_reports
from .sessions.controller import register as register_sessions

logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).resolve().parents[3] / "database" / "schema.sql"
SEED_PATH = SCHEMA_PATH.with_name("seed.sql")


def setup_logging(app: Flask, level_name: str = "INFO") -> None:
    """Configure package loggers; add a file handler outside debug/testing."""
    level = getattr(logging, str(level_name).upper(), logging.INFO)
    package_logger = logging.getLogger("campus_attendance")
    package_logger.setLevel(level)

    if not package_logger.handlers:
        stream = logging.StreamHandler()
        stream.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
        package_logger.addHandler(stream)

    has_file_handler = any(isinstance(h, logging.FileHandler) for h in package_logger.handlers)
    if not app.debug and not app.testing and not has_file_handler:
        os.makedirs("logs", exist_ok=True)
        file_handler = logging.FileHandler("logs/attendance.log")
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]")
        )
        file_handler.setLevel(level)
        package_logger.addHandler(file_handler)


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(error: DomainError):
        if error.http_status >= 500:
            logger.error("Domain error: %s", error)
        else:
            logger.info("Rejected request (%s): %s", error.kind, error)
        return jsonify({"success": False, "error": error.kind, "message": str(error)}), error.http_status


def create_app(container: Optional[Container] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    setup_logging(app, getattr(settings, "LOG_LEVEL", "INFO"))
    engine_settings = EngineSettings.from_settings(settings)
    logger.info("Starting with settings=%s (%s)", settings_module, engine_settings)

    if container is None:
        db_config = getattr(settings, "DB_CONFIG")
        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            apply_schema(db_config, schema_path=SCHEMA_PATH)
            logger.info("Schema ready (tables=%d)", len(list_tables(db_config)))
        if bool(getattr(settings, "AUTO_SEED_DB", False)):
            apply_seed_sql(db_config, seed_path=SEED_PATH)
        container = build_container(db_config=db_config, settings=engine_settings)

    register_error_handlers(app)
    register_sessions(app, container)
    register_checkins(app, container)
    register_excuses(app, container)
    register_reports(app, container)

    return app
