"""WSGI entry point for the HTTP POST operator service."""

from __future__ import annotations

import logging
import os

from app import create_app

logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO"))

app = create_app()

if __name__ == "__main__":  # pragma: no cover - manual runtime entrypoint
    port_env = os.getenv("HTTPPOST_API_PORT") or os.getenv("PORT")
    port = int(port_env) if port_env else 9200
    app.run(host="0.0.0.0", port=port)
