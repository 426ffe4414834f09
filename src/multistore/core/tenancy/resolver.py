"""Tenant resolution.

Maps an incoming request to a tenant. Resolution order, first match wins:

1. Effective host: the override header when the peer is a trusted proxy,
   otherwise the Host header.
2. Classify the effective host.
3. A path slug candidate that names an existing store (method PATH).
4. A candidate custom domain found in the directory (CUSTOM_DOMAIN).
5. A platform subdomain or ``<slug>.localhost`` found in the directory
   (SUBDOMAIN).
6. Nothing addressed (NONE).

Resolution only reads. It never writes, caches, or retries.
"""

from collections.abc import Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

import structlog

from multistore.config import Settings, settings
from multistore.core.tenancy.context import ResolutionMethod, TenantResolution
from multistore.core.tenancy.hostnames import HostKind, classify, normalize_host
from multistore.core.tenancy.proxy import is_trusted_peer
from multistore.core.tenancy.slugs import SLUG_PATTERN, normalize_slug


if TYPE_CHECKING:
    from multistore.modules.tenants.models import Tenant


logger = structlog.get_logger()


class TenantDirectory(Protocol):
    """Lookup contract the resolver needs from the tenant store."""

    async def find_by_subdomain(self, slug: str) -> "Tenant | None": ...

    async def find_by_custom_domain(self, host: str) -> "Tenant | None": ...


@dataclass(frozen=True)
class ResolutionRequest:
    """The parts of an HTTP request that take part in resolution.

    Attributes:
        host: Raw Host header
        override_host: Raw override header (``X-Original-Host``)
        peer: Address of the direct peer
        path_slug: First URL path segment, when it looks like a slug
        header_slug: Explicit slug sent by a path-addressed dashboard
    """

    host: str | None
    override_host: str | None = None
    peer: str | None = None
    path_slug: str | None = None
    header_slug: str | None = None


class TenantResolver:
    """Resolves requests to tenants through a ``TenantDirectory``."""

    def __init__(
        self,
        directory: TenantDirectory,
        root_domains: Sequence[str],
        trusted_networks: Sequence[str],
    ) -> None:
        self.directory = directory
        self.root_domains = list(root_domains)
        self.trusted_networks = list(trusted_networks)

    @classmethod
    def from_settings(
        cls, directory: TenantDirectory, config: Settings | None = None
    ) -> "TenantResolver":
        """Build a resolver from application settings."""
        config = config or settings
        return cls(
            directory,
            root_domains=config.platform_domains,
            trusted_networks=config.trusted_proxy_networks,
        )

    def effective_host(self, request: ResolutionRequest) -> tuple[str, bool]:
        """Pick the host to resolve against.

        Returns:
            Tuple of (normalized host, override_rejected)
        """
        if request.override_host:
            if is_trusted_peer(request.peer, self.trusted_networks):
                return normalize_host(request.override_host), False

            logger.warning(
                "tenant_override_rejected",
                peer=request.peer,
                override_host=request.override_host,
            )
            return normalize_host(request.host), True

        return normalize_host(request.host), False

    async def _resolve_path(self, request: ResolutionRequest) -> "Tenant | None":
        for candidate in (request.header_slug, request.path_slug):
            if not candidate:
                continue
            slug = normalize_slug(candidate)
            if not SLUG_PATTERN.match(slug):
                continue
            tenant = await self.directory.find_by_subdomain(slug)
            if tenant is not None:
                return tenant
        return None

    async def resolve(self, request: ResolutionRequest) -> TenantResolution:
        """Resolve a request to a tenant.

        Inactive tenants still resolve; gating on ``is_active`` is the
        caller's decision.

        Args:
            request: Resolution inputs

        Returns:
            RESOLVED with a context, NOT_FOUND when a slug or domain was
            addressed but matched nothing, NONE when nothing was addressed
        """
        host, override_rejected = self.effective_host(request)
        classification = classify(host, self.root_domains)
        addressed = bool(request.header_slug)

        tenant = await self._resolve_path(request)
        if tenant is not None:
            return self._resolved(tenant, ResolutionMethod.PATH, override_rejected)

        if classification.kind is HostKind.CANDIDATE_CUSTOM_DOMAIN:
            addressed = True
            tenant = await self.directory.find_by_custom_domain(classification.host)
            if tenant is not None:
                return self._resolved(
                    tenant, ResolutionMethod.CUSTOM_DOMAIN, override_rejected
                )

        elif classification.slug and classification.kind in (
            HostKind.PLATFORM_SUBDOMAIN,
            HostKind.LOCAL_DEV,
        ):
            addressed = True
            tenant = await self.directory.find_by_subdomain(classification.slug)
            if tenant is not None:
                return self._resolved(tenant, ResolutionMethod.SUBDOMAIN, override_rejected)

        if addressed:
            logger.info("tenant_not_found", host=host, kind=classification.kind.value)
            return TenantResolution.not_found(override_rejected)

        return TenantResolution.none(override_rejected)

    def _resolved(
        self,
        tenant: "Tenant",
        method: ResolutionMethod,
        override_rejected: bool,
    ) -> TenantResolution:
        logger.debug(
            "tenant_resolved",
            tenant_id=str(tenant.id),
            method=method.value,
            is_active=tenant.is_active,
        )
        return TenantResolution.resolved(tenant, method, override_rejected)
