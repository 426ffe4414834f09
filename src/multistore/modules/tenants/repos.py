"""Tenant repository for database operations.

``TenantRepository`` is the tenant directory the resolver reads from.
Lookups never write and never cache.
"""

from typing import Annotated
from uuid import UUID

from fastapi import Depends
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from multistore.api.dependencies import DBSession
from multistore.core.errors import ConflictError, DomainConflictError
from multistore.core.tenancy.hostnames import WWW_PREFIX, normalize_host, strip_www
from multistore.modules.tenants.models import Tenant


def domain_key(domain: str) -> str:
    """Uniqueness key of a custom domain: lowercase, one ``www.`` removed."""
    return strip_www(normalize_host(domain))


class TenantRepository:
    """Repository for Tenant database operations.

    Tenants are platform-level rows, so nothing here is tenant-filtered.
    """

    def __init__(self, session: DBSession) -> None:
        self.session = session

    async def create(self, tenant: Tenant) -> Tenant:
        """Create a new tenant.

        Raises:
            ConflictError: If the subdomain is already taken
        """
        self.session.add(tenant)
        try:
            await self.session.flush()
        except IntegrityError as exc:
            raise ConflictError(
                "This subdomain is already taken",
                error_code="subdomain_taken",
                details={"subdomain": tenant.subdomain},
            ) from exc
        await self.session.refresh(tenant)
        return tenant

    async def get_by_id(self, tenant_id: UUID) -> Tenant | None:
        """Get a tenant by ID."""
        return await self.session.get(Tenant, tenant_id)

    async def find_by_subdomain(self, slug: str) -> Tenant | None:
        """Find a tenant by exact subdomain, case-insensitively.

        Args:
            slug: Store slug

        Returns:
            Tenant if found, None otherwise
        """
        value = slug.strip().lower()
        if not value:
            return None
        stmt = select(Tenant).where(func.lower(Tenant.subdomain) == value)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def find_by_custom_domain(self, host: str) -> Tenant | None:
        """Find a tenant whose custom domain serves a host.

        The stored domain matches when it equals the host, ``www.`` plus
        the host, or the host with one leading ``www.`` removed, compared
        case-insensitively.

        Args:
            host: Request hostname

        Returns:
            Tenant if found, None otherwise
        """
        value = normalize_host(host)
        if not value:
            return None
        candidates = {value, f"{WWW_PREFIX}{value}", strip_www(value)}
        stmt = (
            select(Tenant)
            .where(func.lower(Tenant.custom_domain).in_(candidates))
            .order_by(Tenant.created_at)
            .limit(1)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def find_by_domain_key(self, key: str) -> Tenant | None:
        """Find the tenant holding a custom domain uniqueness key."""
        stmt = select(Tenant).where(Tenant.custom_domain_key == key)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def subdomain_exists(self, slug: str) -> bool:
        """Check whether a subdomain is taken."""
        return await self.find_by_subdomain(slug) is not None

    async def list_by_owner(self, owner_id: UUID) -> list[Tenant]:
        """List the stores a user owns, oldest first."""
        stmt = (
            select(Tenant)
            .where(Tenant.owner_id == owner_id)
            .order_by(Tenant.created_at)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def activate_custom_domain(self, tenant: Tenant, domain: str) -> Tenant:
        """Attach a verified custom domain to a tenant.

        The pre-check gives a clean error for the common case; the unique
        constraints on ``custom_domain`` and ``custom_domain_key`` decide
        when two activations race.

        Args:
            tenant: Tenant to update
            domain: Verified domain

        Returns:
            The updated tenant

        Raises:
            DomainConflictError: If another tenant holds the domain
        """
        key = domain_key(domain)
        holder = await self.find_by_domain_key(key)
        if holder is not None and holder.id != tenant.id:
            raise DomainConflictError(details={"domain": domain})

        tenant.custom_domain = domain
        tenant.custom_domain_key = key
        try:
            await self.session.flush()
        except IntegrityError as exc:
            raise DomainConflictError(details={"domain": domain}) from exc
        return tenant

    async def clear_custom_domain(self, tenant: Tenant) -> Tenant:
        """Detach the custom domain of a tenant."""
        tenant.custom_domain = None
        tenant.custom_domain_key = None
        await self.session.flush()
        return tenant

    async def update_subdomain(self, tenant: Tenant, slug: str) -> Tenant:
        """Change the subdomain of a tenant.

        Raises:
            ConflictError: If the subdomain is already taken
        """
        holder = await self.find_by_subdomain(slug)
        if holder is not None and holder.id != tenant.id:
            raise ConflictError(
                "This subdomain is already taken",
                error_code="subdomain_taken",
                details={"subdomain": slug},
            )

        tenant.subdomain = slug
        try:
            await self.session.flush()
        except IntegrityError as exc:
            raise ConflictError(
                "This subdomain is already taken",
                error_code="subdomain_taken",
                details={"subdomain": slug},
            ) from exc
        return tenant

    async def set_active(self, tenant: Tenant, is_active: bool) -> Tenant:
        """Activate or deactivate a tenant."""
        tenant.is_active = is_active
        await self.session.flush()
        return tenant


# Type alias for dependency injection
TenantRepo = Annotated[TenantRepository, Depends(TenantRepository)]
