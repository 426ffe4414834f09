"""Tenant service for business logic."""

from typing import Annotated
from uuid import UUID

import structlog
from fastapi import Depends

from multistore.core.errors import (
    NotFoundError,
    VerificationExpiredError,
    VerificationPendingError,
)
from multistore.core.tenancy.slugs import validate_slug
from multistore.modules.domains.services import (
    DomainVerificationService,
    VerificationOutcome,
)
from multistore.modules.tenants.models import Tenant
from multistore.modules.tenants.repos import TenantRepo


logger = structlog.get_logger()


class TenantService:
    """Service for store management operations."""

    def __init__(self, repo: TenantRepo) -> None:
        self.repo = repo

    async def create_store(self, name: str, subdomain: str, owner_id: UUID) -> Tenant:
        """Create a store for an owner.

        Raises:
            InvalidSlugError: If the subdomain breaks the naming policy
            ConflictError: If the subdomain is taken
        """
        slug = validate_slug(subdomain)
        tenant = await self.repo.create(
            Tenant(name=name, subdomain=slug, owner_id=owner_id, is_active=True)
        )
        logger.info("tenant_created", tenant_id=str(tenant.id), subdomain=slug)
        return tenant

    async def update_subdomain(self, tenant: Tenant, subdomain: str) -> Tenant:
        """Rename the subdomain of a store.

        Raises:
            InvalidSlugError: If the subdomain breaks the naming policy
            ConflictError: If the subdomain is taken
        """
        slug = validate_slug(subdomain)
        previous = tenant.subdomain
        tenant = await self.repo.update_subdomain(tenant, slug)
        logger.info(
            "tenant_subdomain_changed",
            tenant_id=str(tenant.id),
            previous=previous,
            subdomain=slug,
        )
        return tenant

    async def verify_custom_domain(
        self,
        tenant: Tenant,
        domain: str,
        verifier: DomainVerificationService,
    ) -> Tenant:
        """Check the DNS challenge for a domain and attach it on success.

        Raises:
            VerificationPendingError: If the record is not visible yet
            VerificationExpiredError: If the challenge expired
            DomainConflictError: If another store holds the domain
        """
        result = await verifier.check_challenge(tenant.id, domain)

        if result.outcome is VerificationOutcome.EXPIRED:
            raise VerificationExpiredError(details={"domain": result.challenge.domain})
        if result.outcome is VerificationOutcome.PENDING:
            raise VerificationPendingError(
                details={
                    "domain": result.challenge.domain,
                    "record_name": verifier.record_name(result.challenge.domain),
                }
            )

        tenant = await self.repo.activate_custom_domain(tenant, result.challenge.domain)
        logger.info(
            "custom_domain_activated",
            tenant_id=str(tenant.id),
            domain=tenant.custom_domain,
        )
        return tenant

    async def clear_custom_domain(self, tenant: Tenant) -> Tenant:
        """Detach the custom domain of a store."""
        previous = tenant.custom_domain
        tenant = await self.repo.clear_custom_domain(tenant)
        logger.info("custom_domain_removed", tenant_id=str(tenant.id), domain=previous)
        return tenant

    async def set_status(self, tenant_id: UUID, is_active: bool) -> Tenant:
        """Activate or deactivate a store.

        Raises:
            NotFoundError: If the store does not exist
        """
        tenant = await self.repo.get_by_id(tenant_id)
        if tenant is None:
            raise NotFoundError("Store not found", resource="tenant", resource_id=str(tenant_id))
        tenant = await self.repo.set_active(tenant, is_active)
        logger.info("tenant_status_changed", tenant_id=str(tenant.id), is_active=is_active)
        return tenant

    async def list_owned(self, owner_id: UUID) -> list[Tenant]:
        """Stores owned by a user."""
        return await self.repo.list_by_owner(owner_id)


# Type alias for dependency injection
TenantSvc = Annotated[TenantService, Depends(TenantService)]
