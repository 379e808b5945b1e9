"""Configuration for the HTTP POST operator service."""

from __future__ import annotations

import os


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


def _env_float(name: str) -> float | None:
    value = os.getenv(name)
    return float(value) if value else None


class Config:
    """Base configuration for the Flask application."""

    SQLALCHEMY_DATABASE_URI: str = os.getenv("DATABASE_URL", "sqlite:///httppost.db")
    SQLALCHEMY_TRACK_MODIFICATIONS: bool = False
    JSONIFY_PRETTYPRINT_REGULAR: bool = False
    CORS_ALLOWED_ORIGINS: str = os.getenv("CORS_ALLOWED_ORIGINS", "http://localhost:5173")
    RECORDS_RATE_LIMIT: str = os.getenv("RECORDS_RATE_LIMIT", "2000 per second")

    ENABLE_OPERATOR: bool = _env_flag("ENABLE_OPERATOR", "true")
    OPERATOR_NAME: str = os.getenv("OPERATOR_NAME", "HttpPost")
    HTTPPOST_URL: str = os.getenv("HTTPPOST_URL", "")
    HTTPPOST_CONTENT_TYPE: str = os.getenv("HTTPPOST_CONTENT_TYPE", "text/plain")
    HTTPPOST_LOG_ACTIONS: bool = _env_flag("HTTPPOST_LOG_ACTIONS")
    HTTPPOST_TRUST_ALL_CERTIFICATES: bool = _env_flag("HTTPPOST_TRUST_ALL_CERTIFICATES")
    HTTPPOST_TRANSPORT_ERRORS: str = os.getenv("HTTPPOST_TRANSPORT_ERRORS", "skip")
    HTTPPOST_TIMEOUT: float | None = _env_float("HTTPPOST_TIMEOUT")
    # Extra passthrough attributes, e.g. "id:int,source:str".
    HTTPPOST_OUTPUT_SCHEMA: str = os.getenv("HTTPPOST_OUTPUT_SCHEMA", "")
