from __future__ import annotations

import pathlib
import sys
import threading
from collections.abc import Iterator
from dataclasses import dataclass, field

import pytest
from flask import Flask, Response, request
from sqlalchemy.pool import StaticPool
from werkzeug.serving import make_server

ROOT = pathlib.Path(__file__).resolve().parents[2]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


def _load_dependencies():
    from app import Config, create_app
    from backend.app.extensions import db

    return Config, create_app, db


ConfigBase, create_app, db = _load_dependencies()


class TestConfig(ConfigBase):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite+pysqlite:///:memory:"
    SQLALCHEMY_ENGINE_OPTIONS = {
        "poolclass": StaticPool,
        "connect_args": {"check_same_thread": False},
    }
    ENABLE_OPERATOR = False
    CORS_ALLOWED_ORIGINS = "http://localhost"
    RATELIMIT_ENABLED = False
    HTTPPOST_URL = ""
    HTTPPOST_CONTENT_TYPE = "text/plain"
    HTTPPOST_LOG_ACTIONS = False
    HTTPPOST_TRUST_ALL_CERTIFICATES = False
    HTTPPOST_TRANSPORT_ERRORS = "skip"
    HTTPPOST_TIMEOUT = 5.0
    HTTPPOST_OUTPUT_SCHEMA = ""


@dataclass
class CapturedRequest:
    path: str
    body: bytes
    headers: dict[str, str]


@dataclass
class Endpoint:
    """Local web server that records every request it receives."""

    base_url: str
    requests: list[CapturedRequest] = field(default_factory=list)
    counter: int = 0
    release: threading.Event = field(default_factory=threading.Event)

    def url(self, path: str = "/echo") -> str:
        return f"{self.base_url}{path}"


def _build_endpoint_app(endpoint: Endpoint) -> Flask:
    app = Flask("test_endpoint")

    @app.before_request
    def _capture() -> None:
        endpoint.requests.append(
            CapturedRequest(
                path=request.path,
                body=request.get_data(),
                headers={key.lower(): value for key, value in request.headers.items()},
            )
        )

    @app.post("/echo")
    def echo():
        return Response(request.get_data(), status=200, mimetype="text/plain")

    @app.post("/created")
    def created():
        return Response("stored", status=201, mimetype="text/plain")

    @app.post("/empty")
    def empty():
        return Response(status=204)

    @app.post("/hang")
    def hang():
        endpoint.release.wait(timeout=15)
        return Response("released", status=200, mimetype="text/plain")

    @app.post("/counter")
    def counter():
        endpoint.counter += 1
        return Response(str(endpoint.counter), status=200, mimetype="text/plain")

    return app


def _serve(ssl_context=None) -> Iterator[Endpoint]:
    scheme = "https" if ssl_context else "http"
    endpoint = Endpoint(base_url="")
    server = make_server(
        "127.0.0.1",
        0,
        _build_endpoint_app(endpoint),
        threaded=True,
        ssl_context=ssl_context,
    )
    endpoint.base_url = f"{scheme}://127.0.0.1:{server.server_port}"
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    try:
        yield endpoint
    finally:
        endpoint.release.set()
        server.shutdown()
        thread.join(timeout=5)


@pytest.fixture()
def endpoint() -> Iterator[Endpoint]:
    yield from _serve()


@pytest.fixture()
def tls_endpoint() -> Iterator[Endpoint]:
    pytest.importorskip("cryptography")
    yield from _serve(ssl_context="adhoc")


@pytest.fixture()
def app_factory():
    """Build applications from config overrides and tear them down afterwards."""

    from backend.app.operators.service import stop_operator

    created: list[Flask] = []

    def factory(**overrides: object) -> Flask:
        config_class = type("OverrideConfig", (TestConfig,), dict(overrides))
        app = create_app(config_class)
        created.append(app)
        return app

    yield factory

    for app in created:
        stop_operator(app)
        with app.app_context():
            db.session.remove()
