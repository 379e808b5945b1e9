"""API endpoint listing recent run log entries."""

from __future__ import annotations

import json
from http import HTTPStatus

from flask import Blueprint, jsonify, request

from ..models.logs import RUN_LOG_SOURCES, RunLog

bp = Blueprint("logs", __name__)

MAX_ENTRIES = 200


def _entry_to_dict(entry: RunLog) -> dict[str, object]:
    data: dict[str, object] = {
        "id": entry.id,
        "source": entry.source,
        "createdAt": entry.created_at.isoformat() + "Z",
    }
    if entry.source == "dispatch":
        try:
            data["details"] = json.loads(entry.message)
        except ValueError:
            data["message"] = entry.message
    else:
        data["message"] = entry.message
    return data


@bp.get("/logs")
def list_logs() -> tuple[object, int]:
    """Return the newest entries first, optionally filtered by source."""
    source = request.args.get("source")
    if source is not None and source not in RUN_LOG_SOURCES:
        return jsonify({"error": f"source must be one of {', '.join(RUN_LOG_SOURCES)}"}), HTTPStatus.BAD_REQUEST

    limit = request.args.get("limit", default=MAX_ENTRIES, type=int)
    limit = max(1, min(limit, MAX_ENTRIES))

    query = RunLog.query if source is None else RunLog.query.filter_by(source=source)
    entries = query.order_by(RunLog.id.desc()).limit(limit).all()
    return jsonify([_entry_to_dict(entry) for entry in entries]), HTTPStatus.OK
