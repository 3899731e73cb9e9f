from __future__ import annotations

import importlib
import logging
from typing import Optional

from dotenv import load_dotenv
from flask import Flask, jsonify
from pymongo.errors import PyMongoError
from werkzeug.exceptions import HTTPException

from config import get_settings_module

from .core.exceptions import DomainError, InternalError
from .database.bootstrap import ensure_indexes, list_collections

from .container import Container, build_container
from .attendance.controller import register as register_attendance
from .common.web import install_session_renewal
from .settings.controller import register as register_settings
from .subjects.controller import register as register_subjects
from .tasks.controller import register as register_tasks
from .users.controller import register as register_users

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(exc: DomainError):
        return jsonify(exc.to_payload()), exc.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(exc: HTTPException):
        return jsonify({"success": False, "error": exc.description or exc.name}), exc.code

    @app.errorhandler(Exception)
    def handle_unexpected(exc: Exception):
        logger.exception("unhandled error: %s", exc)
        err = InternalError("Internal server error")
        return jsonify(err.to_payload()), err.status_code


def register_health(app: Flask, container: Container) -> None:
    @app.route("/health", methods=["GET"], endpoint="health")
    def health():
        if container.conn is None:
            return jsonify({"status": "ok", "database": "not configured"}), 200
        try:
            container.conn.ping()
        except PyMongoError as exc:
            logger.error("database ping failed: %s", exc)
            return jsonify({"status": "error", "database": "disconnected"}), 503
        return jsonify({"status": "ok", "database": "connected"}), 200


def init_database(container: Container) -> None:
    db = container.conn.db
    ensure_indexes(db)
    result = container.subject_service.initialize_attendance_dates()
    logger.info(
        "database ready (collections=%s, legacy subjects: %s found, %s updated)",
        len(list_collections(db)),
        result["foundSubjects"],
        result["updatedSubjects"],
    )


def create_app(container: Optional[Container] = None) -> Flask:
    """Build the Flask app.

    Without a container the settings module picked by ``APP_ENV`` is used to
    wire MongoDB-backed repositories. Tests pass a container built on fakes.
    """
    load_dotenv(override=False)
    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)

    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    app = Flask(__name__)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["COOKIE_SECURE"] = bool(getattr(settings, "COOKIE_SECURE", False))

    if container is None:
        container = build_container(settings)
        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            init_database(container)

    logger.info("campus-schedule starting (settings=%s)", settings_module)

    register_error_handlers(app)
    register_health(app, container)
    register_users(app, container)
    register_subjects(app, container)
    register_attendance(app, container)
    register_settings(app, container)
    register_tasks(app, container)
    install_session_renewal(app, session_max_age=container.tokens.session_max_age)

    return app
