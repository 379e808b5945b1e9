"""Health check endpoint."""

from flask import Blueprint, jsonify

from ..operators.service import get_host

bp = Blueprint("health", __name__)


@bp.get("/health")
def health() -> tuple[dict[str, str], int]:
    """Return the service health status and the dispatcher state."""
    host = get_host()
    if host is None or not host.running:
        dispatcher = "stopped"
    elif getattr(host.operator, "client", None) is None:
        dispatcher = "degraded"
    else:
        dispatcher = "ready"
    return jsonify({"status": "ok", "dispatcher": dispatcher}), 200
