"""Root API router.

Health probes and ``/info`` answer on any host without tenant resolution.
Everything under ``/api/v1`` is resolved to a store first.
"""

from collections.abc import Awaitable, Callable
from typing import Any

import structlog
from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from sqlalchemy import text

from multistore.api.dependencies import DBSession
from multistore.config import settings
from multistore.core.auth import get_routers as get_auth_routers
from multistore.core.cache import redis_client
from multistore.core.tenancy.dependencies import resolve_tenant
from multistore.modules import discover_modules


logger = structlog.get_logger()


class HealthResponse(BaseModel):
    status: str


class ReadinessResponse(BaseModel):
    status: str
    checks: dict[str, str]


async def _check(probe: Callable[[], Awaitable[Any]]) -> str:
    try:
        await probe()
    except Exception as exc:
        return f"{type(exc).__name__}: {exc}"
    return "ok"


async def _ping_redis() -> None:
    async with redis_client() as client:
        await client.ping()


health_router = APIRouter(tags=["health"])


@health_router.get("/health/live", response_model=HealthResponse, summary="Liveness probe")
async def liveness() -> HealthResponse:
    return HealthResponse(status="alive")


@health_router.get(
    "/health/ready",
    response_model=ReadinessResponse,
    summary="Readiness probe",
    description=(
        "Checks the database, which holds the tenant directory. Redis is "
        "checked only when handoff codes are enabled."
    ),
)
async def readiness(db: DBSession) -> JSONResponse:
    checks = {"database": await _check(lambda: db.execute(text("SELECT 1")))}
    if settings.handoff_mode == "code":
        checks["redis"] = await _check(_ping_redis)

    ready = all(result == "ok" for result in checks.values())
    if not ready:
        logger.warning("readiness_failed", checks=checks)

    return JSONResponse(
        status_code=status.HTTP_200_OK if ready else status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"status": "ready" if ready else "degraded", "checks": checks},
    )


@health_router.get("/info", summary="Platform info")
async def info() -> dict[str, Any]:
    """Platform hosts and handoff mode, for frontends and operators."""
    return {
        "app": settings.app_name,
        "environment": settings.environment,
        "platform_root_domain": settings.platform_root_domain,
        "platform_domains": settings.platform_domains,
        "handoff_mode": settings.handoff_mode,
    }


v1_router = APIRouter(prefix="/api/v1", dependencies=[Depends(resolve_tenant)])
for module_router in (*get_auth_routers(), *discover_modules()):
    v1_router.include_router(module_router)

api_router = APIRouter()
api_router.include_router(health_router)
api_router.include_router(v1_router)
