"""Request logging middleware.

One ``request_started`` and one ``request_completed`` event per request,
tagged with the store the request resolved to. Host and override headers
are left out; the resolver logs them once when a lookup misses.
"""

import time
from collections.abc import Iterable
from typing import Any

import structlog
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint


logger = structlog.get_logger()

QUIET_PATH_PREFIXES = ("/health/", "/docs", "/redoc", "/openapi.json")


def _elapsed_ms(start: float) -> float:
    return round((time.perf_counter() - start) * 1000, 2)


def _scope_fields(request: Request) -> dict[str, Any]:
    """Store, resolution, and user known at the end of a request."""
    fields: dict[str, Any] = {}

    resolution = getattr(request.state, "tenant_resolution", None)
    if resolution is not None:
        fields["tenant_resolution"] = (
            resolution.method.value if resolution.is_resolved else resolution.status.value
        )
        if resolution.override_rejected:
            fields["override_rejected"] = True

    for attr in ("tenant_id", "user_id"):
        value = getattr(request.state, attr, None)
        if value:
            fields[attr] = str(value)
    return fields


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs HTTP requests with their duration and tenant scope.

    Completion is logged at ``error`` for 5xx, ``warning`` for 4xx and
    ``info`` otherwise.
    """

    def __init__(self, app: Any, quiet_prefixes: Iterable[str] | None = None) -> None:
        super().__init__(app)
        self.quiet_prefixes = tuple(quiet_prefixes or QUIET_PATH_PREFIXES)

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        path = request.url.path
        if path.startswith(self.quiet_prefixes):
            return await call_next(request)

        fields: dict[str, Any] = {"method": request.method, "path": path}
        request_id = getattr(request.state, "request_id", None)
        if request_id:
            fields["request_id"] = request_id

        logger.info(
            "request_started",
            client_ip=request.client.host if request.client else None,
            **fields,
        )

        start = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception as exc:
            logger.exception(
                "request_failed",
                duration_ms=_elapsed_ms(start),
                error=str(exc),
                **fields,
            )
            raise

        fields.update(
            status_code=response.status_code,
            duration_ms=_elapsed_ms(start),
            **_scope_fields(request),
        )

        if response.status_code >= 500:
            logger.error("request_completed", **fields)
        elif response.status_code >= 400:
            logger.warning("request_completed", **fields)
        else:
            logger.info("request_completed", **fields)

        return response
