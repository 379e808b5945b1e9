"""Application factory for the HTTP POST operator service."""
from __future__ import annotations

from flask import Flask

from .config import Config
from .extensions import cors, db, limiter


def create_app(config_class: type[Config] = Config) -> Flask:
    """Create and configure the Flask application instance."""
    app = Flask(__name__)
    app.config.from_object(config_class)

    db.init_app(app)

    if cors is not None:
        allowed_origins = [
            origin.strip()
            for origin in (app.config.get("CORS_ALLOWED_ORIGINS") or "").split(",")
            if origin.strip()
        ]
        cors.init_app(
            app,
            resources={r"/api/*": {"origins": allowed_origins}},
            allow_headers=["Content-Type"],
        )

    limiter.init_app(app)

    from .api.health import bp as health_bp
    from .api.logs import bp as logs_bp
    from .api.records import bp as records_bp

    app.register_blueprint(health_bp, url_prefix="/api")
    app.register_blueprint(logs_bp, url_prefix="/api")
    app.register_blueprint(records_bp, url_prefix="/api")

    with app.app_context():
        # Import models to ensure they are registered with SQLAlchemy before creating tables.
        from .models import logs  # noqa: F401

        db.create_all()

    if app.config.get("ENABLE_OPERATOR", True):
        from .operators.service import ensure_operator_started

        ensure_operator_started(app)

    return app
