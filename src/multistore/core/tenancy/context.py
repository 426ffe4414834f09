"""Request-scoped tenant context.

A ``TenantResolution`` is produced once per request by the resolver and
stored on ``request.state``. It is never cached across requests and never
kept in a module-level variable, since one process serves many tenants
concurrently.
"""

from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING
from uuid import UUID


if TYPE_CHECKING:
    from multistore.modules.tenants.models import Tenant


class ResolutionMethod(StrEnum):
    """How the tenant of a request was determined."""

    CUSTOM_DOMAIN = "custom_domain"
    SUBDOMAIN = "subdomain"
    PATH = "path"
    NONE = "none"


class ResolutionStatus(StrEnum):
    """Outcome of resolving a request to a tenant.

    NONE means no tenant was addressed (platform root, bare localhost);
    NOT_FOUND means a slug or domain was addressed but nothing matched.
    """

    RESOLVED = "resolved"
    NOT_FOUND = "not_found"
    NONE = "none"


@dataclass(frozen=True)
class TenantContext:
    """The tenant a request belongs to.

    Every tenant-scoped data operation in the request is parameterized
    by ``tenant.id``.
    """

    tenant: "Tenant"
    method: ResolutionMethod

    @property
    def tenant_id(self) -> UUID:
        return self.tenant.id

    @property
    def slug(self) -> str:
        return self.tenant.subdomain


@dataclass(frozen=True)
class TenantResolution:
    """Typed result of the resolver.

    Attributes:
        status: Resolution outcome
        context: Tenant context when resolved
        override_rejected: The override host header was present but the
            request did not come from a trusted proxy
    """

    status: ResolutionStatus
    context: TenantContext | None = None
    override_rejected: bool = False

    @classmethod
    def resolved(
        cls,
        tenant: "Tenant",
        method: ResolutionMethod,
        override_rejected: bool = False,
    ) -> "TenantResolution":
        return cls(
            ResolutionStatus.RESOLVED,
            TenantContext(tenant=tenant, method=method),
            override_rejected,
        )

    @classmethod
    def not_found(cls, override_rejected: bool = False) -> "TenantResolution":
        return cls(ResolutionStatus.NOT_FOUND, None, override_rejected)

    @classmethod
    def none(cls, override_rejected: bool = False) -> "TenantResolution":
        return cls(ResolutionStatus.NONE, None, override_rejected)

    @property
    def method(self) -> ResolutionMethod:
        return self.context.method if self.context else ResolutionMethod.NONE

    @property
    def is_resolved(self) -> bool:
        return self.status is ResolutionStatus.RESOLVED
