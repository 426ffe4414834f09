"""FastAPI application factory."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI

from multistore.api import get_api_router
from multistore.config import settings
from multistore.core.auth import RequestIdMiddleware
from multistore.core.cache import close_redis_pool
from multistore.core.database import async_engine, async_session_factory
from multistore.core.errors import register_exception_handlers
from multistore.core.logging import RequestLoggingMiddleware
from multistore.core.observability import setup_tracing, shutdown_tracing
from multistore.core.tenancy.cors import DynamicCORSMiddleware, OriginPolicy


# Configure structlog
structlog.configure(
    processors=[
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        (
            structlog.processors.JSONRenderer()
            if settings.is_production
            else structlog.dev.ConsoleRenderer()
        ),
    ],
    wrapper_class=structlog.make_filtering_bound_logger(
        logging.getLevelName(settings.log_level.upper())
    ),
    context_class=dict,
    logger_factory=structlog.PrintLoggerFactory(),
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler.

    Handles startup and shutdown events.
    """
    # Startup
    logger.info(
        "application_startup",
        app_name=settings.app_name,
        environment=settings.environment,
        platform_domains=settings.platform_domains,
    )

    yield

    # Shutdown
    logger.info("application_shutdown")

    # Shutdown tracing (flush pending spans)
    shutdown_tracing()
    logger.info("tracing_shutdown")

    # Close Redis connection pool
    await close_redis_pool()
    logger.info("redis_pool_closed")

    await async_engine.dispose()
    logger.info("database_engine_disposed")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application instance.
    """
    app = FastAPI(
        title=settings.app_name,
        description="Multi-tenant storefront API: one deployment, many stores",
        version="0.1.0",
        debug=settings.debug,
        lifespan=lifespan,
        # Disable docs in production
        docs_url="/docs" if not settings.is_production else None,
        redoc_url="/redoc" if not settings.is_production else None,
        openapi_url="/openapi.json" if not settings.is_production else None,
    )

    # Origins are checked against the tenant directory per request
    app.state.origin_policy = OriginPolicy.from_session_factory(async_session_factory)

    app.add_middleware(DynamicCORSMiddleware)

    # Add request logging middleware
    app.add_middleware(RequestLoggingMiddleware)

    # Add request ID middleware (outermost, runs first)
    app.add_middleware(RequestIdMiddleware)

    # Register exception handlers for RFC 7807 error responses
    register_exception_handlers(app)

    # Include API router
    app.include_router(get_api_router())

    # Setup OpenTelemetry tracing
    setup_tracing(app, async_engine)

    return app
