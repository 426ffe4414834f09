"""Observability module with OpenTelemetry tracing."""

from multistore.core.observability.tracing import (
    annotate_span,
    setup_tracing,
    shutdown_tracing,
)


__all__ = [
    "annotate_span",
    "setup_tracing",
    "shutdown_tracing",
]
