"""Database models for the HTTP POST operator service."""

from .logs import RunLog

__all__ = ["RunLog"]
