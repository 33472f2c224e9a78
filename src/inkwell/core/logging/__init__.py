"""Logging module with structured logging and request tracking."""

from inkwell.core.logging.config import configure_logging
from inkwell.core.logging.middleware import RequestLoggingMiddleware


__all__ = [
    "RequestLoggingMiddleware",
    "configure_logging",
]
