"""CORS with origins derived from the tenant directory.

Stores live on origins the platform does not know in advance (new
subdomains, freshly verified custom domains), so a static origin list
does not work. An origin is allowed when it is:

- a platform root domain (``www.`` included)
- the subdomain of an existing store
- the custom domain of an active store
- a ``localhost`` / IP origin while running in development
"""

from collections.abc import Callable
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from urllib.parse import urlsplit

import structlog
from fastapi import Request, Response
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import PlainTextResponse

from multistore.config import Settings, settings
from multistore.core.tenancy.hostnames import HostKind, classify
from multistore.core.tenancy.resolver import TenantDirectory


logger = structlog.get_logger()

DirectoryFactory = Callable[[], AbstractAsyncContextManager[TenantDirectory]]

ALLOWED_METHODS = ("GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS")
ALLOWED_HEADERS = ("Authorization", "Content-Type", "X-Request-ID")
PREFLIGHT_MAX_AGE = 600


class OriginPolicy:
    """Decides whether a browser origin may call the API."""

    def __init__(self, directory_factory: DirectoryFactory, config: Settings | None = None) -> None:
        self.directory_factory = directory_factory
        self.config = config or settings

    @classmethod
    def from_session_factory(
        cls,
        session_factory: async_sessionmaker[AsyncSession],
        config: Settings | None = None,
    ) -> "OriginPolicy":
        """Policy that opens a short-lived session per lookup."""
        from multistore.modules.tenants.repos import TenantRepository  # noqa: PLC0415

        @asynccontextmanager
        async def directory():  # type: ignore[no-untyped-def]
            async with session_factory() as session:
                yield TenantRepository(session)

        return cls(directory, config)

    async def is_allowed(self, origin: str) -> bool:
        """Check a value of the ``Origin`` header.

        Args:
            origin: ``scheme://host[:port]``

        Returns:
            True if the origin belongs to the platform or a known store
        """
        try:
            parts = urlsplit(origin)
        except ValueError:
            return False
        if parts.scheme not in ("http", "https") or not parts.hostname:
            return False

        classification = classify(parts.hostname, self.config.platform_domains)

        if classification.kind is HostKind.PLATFORM_ROOT:
            return True
        if classification.kind is HostKind.LOCAL_DEV:
            return self.config.is_development

        async with self.directory_factory() as directory:
            if classification.kind is HostKind.PLATFORM_SUBDOMAIN and classification.slug:
                return await directory.find_by_subdomain(classification.slug) is not None
            if classification.kind is HostKind.CANDIDATE_CUSTOM_DOMAIN:
                tenant = await directory.find_by_custom_domain(classification.host)
                return tenant is not None and tenant.is_active
        return False


class DynamicCORSMiddleware(BaseHTTPMiddleware):
    """CORS middleware backed by an ``OriginPolicy``.

    The policy is read from ``app.state.origin_policy`` on each request.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        origin = request.headers.get("origin")
        if not origin:
            return await call_next(request)

        policy: OriginPolicy = request.app.state.origin_policy
        allowed = await policy.is_allowed(origin)

        is_preflight = (
            request.method == "OPTIONS"
            and "access-control-request-method" in request.headers
        )
        if is_preflight:
            if not allowed:
                logger.info("cors_origin_rejected", origin=origin)
                return PlainTextResponse("Disallowed CORS origin", status_code=400)
            response: Response = PlainTextResponse("OK", status_code=200)
            response.headers["Access-Control-Allow-Methods"] = ", ".join(ALLOWED_METHODS)
            response.headers["Access-Control-Allow-Headers"] = ", ".join(
                (*ALLOWED_HEADERS, policy.config.tenant_slug_header)
            )
            response.headers["Access-Control-Max-Age"] = str(PREFLIGHT_MAX_AGE)
            self._allow(response, origin)
            return response

        response = await call_next(request)
        if allowed:
            self._allow(response, origin)
        return response

    @staticmethod
    def _allow(response: Response, origin: str) -> None:
        response.headers["Access-Control-Allow-Origin"] = origin
        response.headers["Access-Control-Allow-Credentials"] = "true"
        response.headers["Access-Control-Expose-Headers"] = "X-Request-ID"
        response.headers.append("Vary", "Origin")
