"""Store API routes."""

from uuid import UUID

from multistore.core.auth.dependencies import CurrentUser, PlatformAdmin
from multistore.core.tenancy.context import ResolutionMethod
from multistore.core.tenancy.dependencies import RequiredTenant, TenantOwner
from multistore.core.tenancy.urls import dashboard_base_path, tenant_base_url
from multistore.modules.tenants import router
from multistore.modules.tenants.schemas import (
    CurrentTenantResponse,
    SubdomainUpdate,
    TenantResponse,
    TenantStatusUpdate,
)
from multistore.modules.tenants.services import TenantSvc


@router.get(
    "/current",
    response_model=CurrentTenantResponse,
    summary="Get the current store",
    description="Returns the store the request host, override header, or path resolved to.",
)
async def get_current_tenant(context: RequiredTenant) -> CurrentTenantResponse:
    """Get the resolved store."""
    path_slug = context.slug if context.method is ResolutionMethod.PATH else None
    return CurrentTenantResponse(
        tenant=TenantResponse.model_validate(context.tenant),
        resolved_by=context.method,
        base_url=tenant_base_url(context.tenant),
        dashboard_base_path=dashboard_base_path(path_slug),
    )


@router.get(
    "/mine",
    response_model=list[TenantResponse],
    summary="List my stores",
    description="Returns every store owned by the authenticated user, active or not.",
)
async def list_my_tenants(current_user: CurrentUser, service: TenantSvc) -> list[TenantResponse]:
    """List stores owned by the current user."""
    tenants = await service.list_owned(current_user.id)
    return [TenantResponse.model_validate(tenant) for tenant in tenants]


@router.patch(
    "/current/subdomain",
    response_model=TenantResponse,
    summary="Change the store subdomain",
)
async def update_subdomain(
    data: SubdomainUpdate,
    context: RequiredTenant,
    _owner: TenantOwner,
    service: TenantSvc,
) -> TenantResponse:
    """Rename the subdomain of the resolved store."""
    tenant = await service.update_subdomain(context.tenant, data.subdomain)
    return TenantResponse.model_validate(tenant)


@router.patch(
    "/{tenant_id}/status",
    response_model=TenantResponse,
    summary="Activate or deactivate a store",
    description="Platform admins only. Inactive stores still resolve but storefront routes return 403.",
)
async def set_tenant_status(
    tenant_id: UUID,
    data: TenantStatusUpdate,
    _admin: PlatformAdmin,
    service: TenantSvc,
) -> TenantResponse:
    """Set the active flag of a store."""
    tenant = await service.set_status(tenant_id, data.is_active)
    return TenantResponse.model_validate(tenant)
