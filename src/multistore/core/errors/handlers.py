"""RFC 7807 Problem Details exception handlers.

Every error leaves the API as ``application/json`` problem details:

    {"type": ".../errors/tenant_inactive", "title": "Tenant Inactive",
     "status": 403, "detail": "...", "instance": "/api/v1/...",
     "trace_id": "...", "subdomain": "acme", "is_active": false}

See: https://tools.ietf.org/html/rfc7807
"""

from typing import TYPE_CHECKING, Any, cast

import structlog
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from multistore.config import settings
from multistore.core.errors.exceptions import AppException, TenantNotFoundError


if TYPE_CHECKING:
    from starlette.types import ExceptionHandler


logger = structlog.get_logger()

HTTP_422_UNPROCESSABLE = 422


class FieldError(BaseModel):
    """A single invalid field."""

    field: str
    message: str
    type: str | None = None


class ProblemDetail(BaseModel):
    """RFC 7807 problem details body.

    Attributes:
        type: URI of the error code documentation
        title: Short summary derived from the error code
        status: HTTP status code
        detail: Explanation of this occurrence
        instance: Request path, omitted where it would leak request data
        errors: Field-level errors of a validation failure
        trace_id: Request id for correlating with logs
    """

    type: str
    title: str
    status: int
    detail: str
    instance: str | None = None
    errors: list[FieldError] | None = None
    trace_id: str | None = None

    model_config = {"extra": "allow"}


def _problem(
    request: Request | None,
    error_code: str,
    status_code: int,
    detail: str,
    errors: list[FieldError] | None = None,
    extra: dict[str, Any] | None = None,
) -> JSONResponse:
    """Build a problem details response.

    Pass ``request=None`` for a body that does not depend on the request.
    """
    body: dict[str, Any] = ProblemDetail(
        type=f"{settings.api_docs_base_url}/errors/{error_code}",
        title=error_code.replace("_", " ").title(),
        status=status_code,
        detail=detail,
        instance=str(request.url.path) if request is not None else None,
        errors=errors,
        trace_id=getattr(request.state, "trace_id", None) if request is not None else None,
    ).model_dump(exclude_none=True)

    for key, value in (extra or {}).items():
        body.setdefault(key, value)

    return JSONResponse(status_code=status_code, content=body)


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Turn an ``AppException`` into problem details.

    Store lookups that miss get a body with nothing request-specific in
    it, so an unknown subdomain, an unregistered domain and a garbage
    Host header are indistinguishable. The request id still goes out in
    the ``X-Request-ID`` header.
    """
    log_data: dict[str, Any] = {
        "error_code": exc.error_code,
        "status_code": exc.status_code,
        "path": request.url.path,
    }
    if exc.details:
        log_data["details"] = exc.details
    tenant_id = getattr(request.state, "tenant_id", None)
    if tenant_id:
        log_data["tenant_id"] = str(tenant_id)

    log = logger.error if exc.status_code >= 500 else logger.warning
    log("app_exception", message=exc.message, **log_data)

    return _problem(
        None if isinstance(exc, TenantNotFoundError) else request,
        exc.error_code,
        exc.status_code,
        exc.message,
        extra=exc.details,
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Turn request validation failures into problem details with field errors."""
    errors = [
        FieldError(
            field=".".join(str(part) for part in error.get("loc", ()) if part != "body")
            or "unknown",
            message=error.get("msg", "Invalid value"),
            type=error.get("type"),
        )
        for error in exc.errors()
    ]

    logger.warning("validation_error", path=request.url.path, error_count=len(errors))

    return _problem(
        request,
        "validation_error",
        HTTP_422_UNPROCESSABLE,
        "Request validation failed",
        errors=errors,
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Log an unexpected exception and answer a bare 500."""
    logger.exception(
        "unhandled_exception",
        path=request.url.path,
        error_type=type(exc).__name__,
    )
    return _problem(
        request,
        "internal_error",
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "An unexpected error occurred",
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register the problem details handlers on an app."""
    app.add_exception_handler(AppException, cast("ExceptionHandler", app_exception_handler))
    app.add_exception_handler(
        RequestValidationError, cast("ExceptionHandler", validation_exception_handler)
    )
    app.add_exception_handler(Exception, generic_exception_handler)
