"""Run log entries describing the operator lifecycle and each dispatch."""

from __future__ import annotations

import json
from typing import Any

from flask import Flask
from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db
from ..models.logs import RunLog


def record_operator_event(app: Flask, message: str) -> None:
    """Store a lifecycle message such as operator start or shutdown."""
    _store(app, "operator", message)


def record_dispatch(
    app: Flask,
    count: int | None,
    emitted: list[dict[str, Any]],
    error: str | None = None,
) -> None:
    """Store the outcome of one record delivered to the operator."""

    details: dict[str, Any] = {"count": count, "emitted": len(emitted)}
    if emitted:
        details["statusCode"] = emitted[0].get("statusCode")
        details["statusMessage"] = emitted[0].get("statusMessage")
    if error is not None:
        details["error"] = error
    _store(app, "dispatch", json.dumps(details))


def _store(app: Flask, source: str, message: str) -> None:
    # Log persistence never interrupts record processing.
    with app.app_context():
        try:
            db.session.add(RunLog(source=source, message=message))
            db.session.commit()
        except SQLAlchemyError:
            db.session.rollback()
            app.logger.exception("Failed to store %s run log entry", source)
