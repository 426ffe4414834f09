"""Custom domain API routes.

All routes act on the store the request resolved to and require its
owner (or a platform admin).
"""

from fastapi import status

from multistore.core.tenancy.dependencies import RequiredTenant, TenantOwner
from multistore.modules.domains import router
from multistore.modules.domains.schemas import (
    ChallengeRequest,
    ChallengeResponse,
    DomainStatusResponse,
    VerifyRequest,
)
from multistore.modules.domains.services import DomainVerificationSvc
from multistore.modules.tenants.services import TenantSvc


@router.post(
    "/challenge",
    response_model=ChallengeResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Start custom domain verification",
    description="Issues a DNS challenge. Publish the returned record, then call /domains/verify.",
)
async def request_challenge(
    data: ChallengeRequest,
    context: RequiredTenant,
    _owner: TenantOwner,
    verifier: DomainVerificationSvc,
) -> ChallengeResponse:
    """Issue a verification challenge for the resolved store."""
    instructions = await verifier.request_challenge(context.tenant_id, data.domain, data.method)
    return ChallengeResponse(
        domain=instructions.domain,
        method=instructions.method,
        record_name=instructions.record_name,
        record_type=instructions.record_type,
        record_value=instructions.record_value,
        expires_at=instructions.expires_at,
    )


@router.post(
    "/verify",
    response_model=DomainStatusResponse,
    summary="Verify now",
    description=(
        "Checks DNS for the challenge record. Returns 409 while the record is not "
        "visible yet and 410 once the challenge has expired."
    ),
)
async def verify_domain(
    data: VerifyRequest,
    context: RequiredTenant,
    _owner: TenantOwner,
    verifier: DomainVerificationSvc,
    service: TenantSvc,
) -> DomainStatusResponse:
    """Check DNS and attach the domain to the resolved store."""
    tenant = await service.verify_custom_domain(context.tenant, data.domain, verifier)
    return DomainStatusResponse(custom_domain=tenant.custom_domain, status="verified")


@router.delete(
    "",
    response_model=DomainStatusResponse,
    summary="Remove the custom domain",
)
async def remove_domain(
    context: RequiredTenant,
    _owner: TenantOwner,
    service: TenantSvc,
) -> DomainStatusResponse:
    """Detach the custom domain of the resolved store."""
    await service.clear_custom_domain(context.tenant)
    return DomainStatusResponse(custom_domain=None, status="removed")
