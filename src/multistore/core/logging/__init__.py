"""Logging module with structured logging and request tracking."""

from multistore.core.logging.middleware import RequestLoggingMiddleware


__all__ = [
    "RequestLoggingMiddleware",
]
