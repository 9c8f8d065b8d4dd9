from __future__ import annotations

import importlib
import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException

from config import get_settings_module

from .attendance.controller import register as register_attendance
from .common.http import error_response
from .container import Container, Policy, build_container
from .core.exceptions import DomainError
from .database.bootstrap import apply_schema, apply_seed_sql, list_tables
from .qr_sessions.controller import register as register_qr_sessions
from .schedules.controller import register as register_schedules

logger = logging.getLogger(__name__)

REPO_ROOT = Path(__file__).resolve().parents[2]


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def _register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(err: DomainError):
        if err.status_code >= 500:
            logger.error("request failed: %s", err)
        return error_response(err)

    @app.errorhandler(HTTPException)
    def handle_http_error(err: HTTPException):
        return jsonify({"ok": False, "error": err.name.lower().replace(" ", "_"), "message": err.description}), err.code

    @app.errorhandler(Exception)
    def handle_unexpected(err: Exception):
        logger.exception("unhandled error")
        return jsonify({"ok": False, "error": "server_error", "message": "Internal server error"}), 500


def create_app(container: Optional[Container] = None, *, settings_module: Optional[str] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = settings_module or get_settings_module()
    settings = importlib.import_module(settings_module)
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["SECRET_KEY"] = app.secret_key
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    app.config["JWT_ALGORITHM"] = getattr(settings, "JWT_ALGORITHM", "HS256")
    app.config["TOKEN_TTL_MINUTES"] = int(getattr(settings, "TOKEN_TTL_MINUTES", 60))
    db_config = getattr(settings, "DB_CONFIG")

    if container is None:
        if app.config["DEBUG"]:
            logger.info(
                "settings=%s db=%s@%s:%s/%s",
                settings_module,
                db_config.get("user"),
                db_config.get("host"),
                db_config.get("port", 3306),
                db_config.get("database"),
            )

        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            apply_schema(db_config, schema_path=REPO_ROOT / "database" / "schema.sql")
            logger.info("schema ready (tables=%d)", len(list_tables(db_config)))
        if bool(getattr(settings, "AUTO_SEED_DB", False)):
            apply_seed_sql(db_config, seed_path=REPO_ROOT / "database" / "seed.sql")
            logger.info("demo seed ready")

        policy = Policy(
            grace_minutes=int(getattr(settings, "LATE_GRACE_MINUTES", Policy.grace_minutes)),
            rotating_default_minutes=float(getattr(settings, "ROTATING_DEFAULT_MINUTES", Policy.rotating_default_minutes)),
            static_default_hours=float(getattr(settings, "STATIC_DEFAULT_HOURS", Policy.static_default_hours)),
        )
        container = build_container(db_config=db_config, policy=policy)

    app.extensions["workline"] = container

    _register_error_handlers(app)

    @app.route("/health", methods=["GET"], endpoint="health")
    def health():
        return jsonify({"status": "ok"})

    register_qr_sessions(app, container)
    register_attendance(app, container)
    register_schedules(app, container)

    return app
