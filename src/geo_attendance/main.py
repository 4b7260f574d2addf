from __future__ import annotations

import importlib
from typing import Optional

import structlog
from dotenv import load_dotenv
from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException

from .attendance.controller import register as register_attendance
from .attendance.policy import TimeClassificationConfig
from .container import Container, build_container
from .core.exceptions import AuthenticationError, AuthorizationError, DomainError, NotFoundError
from .database.bootstrap import apply_schema, list_tables
from .locations.controller import register as register_locations
from .logging import register_request_id, setup_logging
from .settings import get_settings_module

log = structlog.get_logger(__name__)


def _status_for(error: DomainError) -> int:
    if isinstance(error, AuthenticationError):
        return 401
    if isinstance(error, AuthorizationError):
        return 403
    if isinstance(error, NotFoundError):
        return 404
    return 400


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def _domain_error(error: DomainError):
        status = _status_for(error)
        log.info("request.rejected", code=error.code, status=status, error=error.message)
        return jsonify({"success": False, "error": error.message, "code": error.code}), status

    @app.errorhandler(Exception)
    def _unexpected(error: Exception):
        if isinstance(error, HTTPException):
            return error
        log.exception("request.failed")
        return jsonify({"success": False, "error": "Internal server error", "code": "internal_error"}), 500


def create_app(container: Optional[Container] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    setup_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    if container is None:
        policy = TimeClassificationConfig.from_settings(settings)
        container = build_container(
            db_config=getattr(settings, "DB_CONFIG"),
            policy=policy,
            notification_store=getattr(settings, "NOTIFICATION_STORE", "mysql"),
        )

        if bool(getattr(settings, "AUTO_INIT_DB", False)) and container.conn is not None:
            apply_schema(container.conn)
            log.info("app.schema_ready", tables=len(list_tables(container.conn)))

    log.info(
        "app.started",
        settings=settings_module,
        skip_geofence=container.attendance_service.config.skip_geofence,
    )

    register_request_id(app)
    register_error_handlers(app)
    register_attendance(app, container)
    register_locations(app, container)

    return app
