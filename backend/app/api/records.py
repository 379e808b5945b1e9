"""REST endpoints feeding records and punctuation into the operator."""

from __future__ import annotations

from http import HTTPStatus
from typing import Any

from flask import Blueprint, current_app, jsonify, request

from ..extensions import limiter
from ..operators.errors import DispatchError, RecordError
from ..operators.records import record_from_mapping
from ..operators.runtime import OperatorHost, Punctuation
from ..operators.service import get_host
from ..utils.run_log import record_dispatch

bp = Blueprint("records", __name__)


def _json_error(message: str, status: HTTPStatus = HTTPStatus.BAD_REQUEST):
    return jsonify({"error": message}), status


def _records_rate_limit() -> str:
    return current_app.config.get("RECORDS_RATE_LIMIT") or "2000 per second"


def _running_host() -> OperatorHost | None:
    host = get_host()
    if host is None or not host.running:
        return None
    return host


def _json_object() -> dict[str, Any] | None:
    payload = request.get_json(force=True, silent=True)
    if payload is None:
        return {}
    return payload if isinstance(payload, dict) else None


@bp.post("/records")
@limiter.limit(_records_rate_limit)
def post_record() -> tuple[object, int]:
    host = _running_host()
    if host is None:
        return _json_error("operator is not running", HTTPStatus.SERVICE_UNAVAILABLE)

    payload = _json_object()
    if payload is None:
        return _json_error("payload must be an object")

    fields = payload.get("record")
    if not isinstance(fields, dict) or not fields:
        return _json_error("record must be a non-empty object")

    try:
        record = record_from_mapping(fields)
    except RecordError as exc:
        return _json_error(str(exc))

    app = current_app._get_current_object()
    try:
        emitted = host.process(record)
    except DispatchError as exc:
        app.logger.error("Dispatch failed: %s", exc)
        record_dispatch(app, getattr(host.operator, "http_post_count", None), [], error=str(exc))
        return _json_error(str(exc), HTTPStatus.BAD_GATEWAY)

    results = [item.as_dict() for item in emitted]
    record_dispatch(app, getattr(host.operator, "http_post_count", None), results)
    return jsonify({"emitted": results}), HTTPStatus.OK


@bp.post("/punctuation")
def post_punctuation() -> tuple[object, int]:
    host = _running_host()
    if host is None:
        return _json_error("operator is not running", HTTPStatus.SERVICE_UNAVAILABLE)

    payload = _json_object()
    if payload is None:
        return _json_error("payload must be an object")

    mark_name = payload.get("mark")
    try:
        mark = Punctuation[mark_name]
    except (KeyError, TypeError):
        return _json_error("mark must be WINDOW_MARKER or FINAL_MARKER")

    forwarded = host.punctuate(mark)
    return jsonify({"forwarded": [item.value for item in forwarded]}), HTTPStatus.OK
