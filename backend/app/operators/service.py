"""Wiring between the Flask application and the HTTP POST operator host."""

from __future__ import annotations

import atexit
import threading

from flask import Flask, current_app

from ..utils.run_log import record_operator_event
from .client import build_http_client
from .http_post import RESULT_ATTRIBUTES, HttpPostOperator, HttpPostSettings
from .records import Attribute, StreamSchema
from .runtime import OperatorContext, OperatorHost

EXTENSION_KEY = "http_post"

_start_lock = threading.Lock()


def build_settings(config: dict) -> HttpPostSettings:
    """Translate Flask configuration values into operator settings."""

    return HttpPostSettings(
        url=config.get("HTTPPOST_URL", ""),
        content_type=config.get("HTTPPOST_CONTENT_TYPE", "text/plain"),
        log_http_post_actions=bool(config.get("HTTPPOST_LOG_ACTIONS", False)),
        trust_all_certificates=bool(config.get("HTTPPOST_TRUST_ALL_CERTIFICATES", False)),
        transport_error_policy=config.get("HTTPPOST_TRANSPORT_ERRORS", "skip"),
        timeout=config.get("HTTPPOST_TIMEOUT"),
    )


def build_output_schema(config: dict) -> StreamSchema:
    """Result attributes followed by any configured passthrough attributes."""

    extra = StreamSchema.from_spec(config.get("HTTPPOST_OUTPUT_SCHEMA") or "")
    attributes = [Attribute(name, attr_type) for name, attr_type in RESULT_ATTRIBUTES.items()]
    attributes.extend(attribute for attribute in extra if attribute.name not in RESULT_ATTRIBUTES)
    return StreamSchema(attributes)


def ensure_operator_started(app: Flask) -> OperatorHost:
    """Create and start the operator host owned by the given Flask app."""

    with _start_lock:
        host = app.extensions.get(EXTENSION_KEY)
        if host is not None:
            return host

        settings = build_settings(app.config)
        operator = HttpPostOperator(settings, client_factory=build_http_client)
        context = OperatorContext(name=app.config.get("OPERATOR_NAME", "HttpPost"))
        host = OperatorHost(operator, build_output_schema(app.config), context)
        host.start()
        app.extensions[EXTENSION_KEY] = host

    state = "ready" if operator.client is not None else "degraded"
    record_operator_event(app, f"{context.describe()} started ({state}) for {settings.url}")
    atexit.register(stop_operator, app)
    return host


def get_host(app: Flask | None = None) -> OperatorHost | None:
    app = app or current_app
    return app.extensions.get(EXTENSION_KEY)


def stop_operator(app: Flask) -> None:
    """Shut the operator down; safe to call more than once."""

    host = app.extensions.get(EXTENSION_KEY)
    if host is None or not host.running:
        return
    host.shutdown()
    record_operator_event(app, f"{host.context.describe()} shut down")
