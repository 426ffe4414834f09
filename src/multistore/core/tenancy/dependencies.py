"""FastAPI dependencies for tenant resolution and route policies.

Resolution runs once per request as a router-level dependency so it
shares the request's database session. Routes then pick a policy:

- ``RequiredTenant``: a resolved store, else 404
- ``ActiveTenant``: a resolved and active store, else 404 / 403
- ``OptionalTenant``: ``None`` when nothing was addressed, 404 when a
  store was addressed but not found
- ``TenantDB``: a ``TenantSession`` bound to the resolved store
- ``TenantOwner``: the authenticated owner of the resolved store
"""

from typing import Annotated

import structlog
from fastapi import Depends, Request

from multistore.api.dependencies import DBSession
from multistore.config import settings
from multistore.core.auth.dependencies import CurrentUser
from multistore.core.database.tenant import TenantSession
from multistore.core.errors import ForbiddenError, TenantInactiveError, TenantNotFoundError
from multistore.core.observability import annotate_span
from multistore.core.tenancy.context import ResolutionStatus, TenantContext, TenantResolution
from multistore.core.tenancy.resolver import ResolutionRequest, TenantResolver
from multistore.core.tenancy.slugs import path_slug_candidate
from multistore.modules.tenants.repos import TenantRepository
from multistore.modules.users.models import User


def resolution_request(request: Request) -> ResolutionRequest:
    """Collect the resolution inputs from an HTTP request."""
    return ResolutionRequest(
        host=request.headers.get("host"),
        override_host=request.headers.get(settings.override_host_header),
        peer=request.client.host if request.client else None,
        path_slug=path_slug_candidate(request.url.path),
        header_slug=request.headers.get(settings.tenant_slug_header),
    )


async def resolve_tenant(request: Request, db: DBSession) -> TenantResolution:
    """Resolve the tenant of the current request.

    The result lives on ``request.state.tenant_resolution`` for the rest
    of the request and is never reused across requests.
    """
    resolver = TenantResolver.from_settings(TenantRepository(db))
    resolution = await resolver.resolve(resolution_request(request))

    request.state.tenant_resolution = resolution
    if resolution.context is not None:
        request.state.tenant_id = resolution.context.tenant_id
        structlog.contextvars.bind_contextvars(
            tenant_id=str(resolution.context.tenant_id),
            tenant_resolution=resolution.method.value,
        )
    else:
        structlog.contextvars.bind_contextvars(tenant_resolution=resolution.status.value)

    annotate_span(resolution)
    return resolution


Resolution = Annotated[TenantResolution, Depends(resolve_tenant)]


async def get_required_tenant(resolution: Resolution) -> TenantContext:
    """Require a resolved store.

    Raises:
        TenantNotFoundError: For every unresolved request, with one body
    """
    if resolution.context is None:
        raise TenantNotFoundError()
    return resolution.context


async def get_active_tenant(
    context: Annotated[TenantContext, Depends(get_required_tenant)],
) -> TenantContext:
    """Require a resolved store that is active.

    Raises:
        TenantInactiveError: If the store is deactivated
    """
    if not context.tenant.is_active:
        raise TenantInactiveError(
            details={"subdomain": context.slug, "is_active": False},
        )
    return context


async def get_optional_tenant(resolution: Resolution) -> TenantContext | None:
    """Resolved store, or None when the request addressed no store.

    Raises:
        TenantNotFoundError: If a store was addressed but not found
    """
    if resolution.status is ResolutionStatus.NOT_FOUND:
        raise TenantNotFoundError()
    return resolution.context


RequiredTenant = Annotated[TenantContext, Depends(get_required_tenant)]
ActiveTenant = Annotated[TenantContext, Depends(get_active_tenant)]
OptionalTenant = Annotated[TenantContext | None, Depends(get_optional_tenant)]


async def get_tenant_db(context: RequiredTenant, db: DBSession) -> TenantSession:
    """Session bound to the resolved store."""
    return TenantSession.for_context(db, context)


async def get_tenant_owner(context: RequiredTenant, user: CurrentUser) -> User:
    """Require the current user to own the resolved store.

    Platform admins pass for every store.

    Raises:
        ForbiddenError: If the user neither owns the store nor is an admin
    """
    if user.is_platform_admin or context.tenant.owner_id == user.id:
        return user
    raise ForbiddenError(
        "Access denied: not the store owner",
        error_code="not_store_owner",
    )


TenantDB = Annotated[TenantSession, Depends(get_tenant_db)]
TenantOwner = Annotated[User, Depends(get_tenant_owner)]
