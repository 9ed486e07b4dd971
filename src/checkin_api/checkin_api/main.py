from __future__ import annotations

import importlib
from typing import Optional

from dotenv import load_dotenv
from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException

from config import get_settings_module

from .attendance.controller import register as register_attendance
from .common.responses import error_response
from .container import Container, build_container
from .core.exceptions import DomainError, StoreError
from .database.bootstrap import apply_schema, list_tables
from .logging import setup_logging
from .organizations.controller import register as register_organizations
from .reports.controller import register as register_reports
from .users.controller import register as register_users


def create_app(container: Optional[Container] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    db_config = getattr(settings, "DB_CONFIG")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    logger = setup_logging(getattr(settings, "LOG_LEVEL", "INFO"))
    logger.info(
        "app_starting",
        settings=settings_module,
        db=f"{db_config.get('user')}@{db_config.get('host')}:{db_config.get('port', 3306)}/{db_config.get('database')}",
    )

    if container is None:
        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            apply_schema(db_config)
            logger.info("schema_ready", tables=len(list_tables(db_config)))

        container = build_container(
            db_config=db_config,
            jwt_secret=getattr(settings, "JWT_SECRET"),
            access_ttl_seconds=int(getattr(settings, "ACCESS_TOKEN_TTL_SECONDS")),
            refresh_ttl_seconds=int(getattr(settings, "REFRESH_TOKEN_TTL_SECONDS")),
            logger=logger,
        )

    @app.errorhandler(DomainError)
    def handle_domain_error(exc: DomainError):
        if isinstance(exc, StoreError):
            logger.error("store_error", error=exc.message)
        return error_response(exc)

    @app.errorhandler(Exception)
    def handle_unexpected(exc: Exception):
        if isinstance(exc, HTTPException) and (exc.code or 500) < 500:
            return jsonify({"message": exc.description}), exc.code
        logger.exception("unhandled_error")
        message = f"internal server error: {exc}" if app.config["DEBUG"] else "internal server error"
        return jsonify({"message": message}), 500

    register_users(app, container)
    register_organizations(app, container)
    register_attendance(app, container)
    register_reports(app, container)

    return app
