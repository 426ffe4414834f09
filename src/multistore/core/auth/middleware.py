"""Request id middleware."""

import re
import uuid

import structlog
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint


REQUEST_ID_HEADER = "X-Request-ID"

# Ids from upstream proxies are kept only if they look like ids
_REQUEST_ID_PATTERN = re.compile(r"[A-Za-z0-9._-]{8,128}")

# Bound during a request by this middleware and the tenant resolver
REQUEST_SCOPED_LOG_KEYS = ("request_id", "tenant_id", "tenant_resolution", "user_id")


def incoming_request_id(value: str | None) -> str:
    """The caller's request id when well-formed, else a fresh one."""
    if value and _REQUEST_ID_PATTERN.fullmatch(value):
        return value
    return str(uuid.uuid4())


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Tags each request with an id.

    The id is set on ``request.state`` (as ``request_id`` and, for the
    error handlers, ``trace_id``), bound to the structlog context and
    echoed in the ``X-Request-ID`` response header. Every key bound to
    the log context during the request is cleared on the way out.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        request_id = incoming_request_id(request.headers.get(REQUEST_ID_HEADER))
        request.state.request_id = request_id
        request.state.trace_id = request_id
        structlog.contextvars.bind_contextvars(request_id=request_id)

        try:
            response = await call_next(request)
        finally:
            structlog.contextvars.unbind_contextvars(*REQUEST_SCOPED_LOG_KEYS)

        response.headers[REQUEST_ID_HEADER] = request_id
        return response
