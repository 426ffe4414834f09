"""OpenTelemetry tracing.

Request, database and Redis spans are instrumented automatically. The
tenant resolver adds the resolved store to the request span, so traces
can be filtered by store the same way logs are.

Spans go to an OTLP collector when ``OTLP_ENDPOINT`` is set and to the
console in debug mode. Otherwise tracing stays off.
"""

from typing import TYPE_CHECKING

import structlog
from fastapi import FastAPI
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.redis import RedisInstrumentor
from opentelemetry.instrumentation.sqlalchemy import SQLAlchemyInstrumentor
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import SpanProcessor, TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter
from sqlalchemy.ext.asyncio import AsyncEngine

from multistore.config import Settings, settings
from multistore.core.logging.middleware import QUIET_PATH_PREFIXES


if TYPE_CHECKING:
    from multistore.core.tenancy.context import TenantResolution


log = structlog.get_logger()

TENANT_ID_ATTRIBUTE = "multistore.tenant.id"
TENANT_SLUG_ATTRIBUTE = "multistore.tenant.slug"
RESOLUTION_ATTRIBUTE = "multistore.tenant.resolution"


def _span_processor(config: Settings) -> SpanProcessor | None:
    if config.otlp_endpoint:
        exporter = OTLPSpanExporter(
            endpoint=config.otlp_endpoint,
            insecure=not config.otlp_endpoint.startswith("https"),
        )
        log.info("tracing_configured", exporter="otlp", endpoint=config.otlp_endpoint)
        return BatchSpanProcessor(exporter)
    if config.debug:
        log.info("tracing_configured", exporter="console")
        return BatchSpanProcessor(ConsoleSpanExporter())
    return None


def _excluded_urls() -> str:
    return ",".join(prefix.strip("/") + ".*" for prefix in QUIET_PATH_PREFIXES)


def setup_tracing(
    app: FastAPI,
    engine: AsyncEngine | None = None,
    config: Settings | None = None,
) -> bool:
    """Install a tracer provider and instrument the app.

    Returns:
        True if tracing was enabled
    """
    config = config or settings
    processor = _span_processor(config)
    if processor is None:
        log.info("tracing_disabled", reason="no OTLP_ENDPOINT configured")
        return False

    provider = TracerProvider(
        resource=Resource.create(
            {
                "service.name": config.platform_name,
                "deployment.environment": config.environment,
                "multistore.platform_root_domain": config.platform_root_domain,
            }
        )
    )
    provider.add_span_processor(processor)
    trace.set_tracer_provider(provider)

    FastAPIInstrumentor.instrument_app(app, excluded_urls=_excluded_urls())
    RedisInstrumentor().instrument()
    if engine is not None:
        SQLAlchemyInstrumentor().instrument(engine=engine.sync_engine)

    return True


def annotate_span(resolution: "TenantResolution") -> None:
    """Record the outcome of tenant resolution on the current span.

    A no-op when tracing is off. Unresolved requests only get the
    outcome, never the host or slug that failed to match.
    """
    span = trace.get_current_span()
    if not span.is_recording():
        return

    if resolution.context is None:
        span.set_attribute(RESOLUTION_ATTRIBUTE, resolution.status.value)
        return

    span.set_attributes(
        {
            RESOLUTION_ATTRIBUTE: resolution.method.value,
            TENANT_ID_ATTRIBUTE: str(resolution.context.tenant_id),
            TENANT_SLUG_ATTRIBUTE: resolution.context.slug,
        }
    )


def shutdown_tracing() -> None:
    """Flush pending spans. Call during application shutdown."""
    provider = trace.get_tracer_provider()
    if isinstance(provider, TracerProvider):
        provider.shutdown()
        log.info("tracing_shutdown_complete")
