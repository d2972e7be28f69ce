from __future__ import annotations

import logging
from typing import Any

from flask import Flask, request
from werkzeug.exceptions import HTTPException

from plantmanager.blueprints.api import reminders_api
from plantmanager.config import load_config, setup_logging

__version__ = "1.0.0"


def create_app(config_overrides: dict[str, Any] | None = None, *, notifier=None) -> Flask:
    """Build the reminder API application.

    Args:
        config_overrides: ``AppConfig`` field values that win over the environment
        notifier: Notification collaborator handed to the reminder service
    """
    config = load_config(**(config_overrides or {}))
    setup_logging(debug=config.DEBUG, level=config.log_level, log_file=config.log_file)

    flask_app = Flask(__name__)
    flask_app.config.update(config.as_flask_config())
    flask_app.config["MAX_CONTENT_LENGTH"] = 64 * 1024

    from plantmanager.services.container import ServiceContainer

    container = ServiceContainer.build(config, notifier=notifier)
    flask_app.config["CONTAINER"] = container

    # Unhandled errors on /api/ routes get the JSON envelope instead of HTML.
    @flask_app.errorhandler(Exception)
    def _handle_unhandled(exc):
        if not request.path.startswith("/api/"):
            raise exc
        from plantmanager.domain.exceptions import PlantManagerError
        from plantmanager.utils.http import error_response, safe_error

        if isinstance(exc, HTTPException):
            status = int(exc.code or 500)
            if status >= 500:
                return safe_error(exc, status, context="http-exception")
            return error_response(exc.description or "Request failed", status)

        if isinstance(exc, PlantManagerError):
            status = exc.http_status
            if status >= 500:
                return safe_error(exc, status, context=type(exc).__name__)
            return error_response(str(exc) or "Request failed", status)

        return safe_error(exc, 500, context="unhandled")

    V1 = "/api/v1"
    flask_app.register_blueprint(reminders_api, url_prefix=f"{V1}/reminders")

    for bp_name in flask_app.blueprints:
        logging.info("Registered blueprint: %s", bp_name)

    return flask_app
