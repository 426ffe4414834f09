"""Custom domain verification.

An owner proves control of a domain by publishing a random token in DNS
at ``_<platform>-verify.<domain>``:

- TXT: the record value is the token
- CNAME: the record points at ``<token>.<verification_cname_target>``

Checks run only on demand (the "verify now" endpoint) or from the
background sweep. A failed lookup is never an error; the challenge just
stays pending until it expires.
"""

import re
import secrets
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from enum import StrEnum
from typing import Annotated
from urllib.parse import urlsplit
from uuid import UUID

import structlog
from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from multistore.config import Settings, settings
from multistore.core.constants import (
    MAX_DOMAIN_LENGTH,
    MAX_LABEL_LENGTH,
    VERIFICATION_TOKEN_BYTES,
)
from multistore.core.errors import DomainConflictError, InvalidDomainError, NotFoundError
from multistore.core.tenancy.hostnames import (
    LOCALHOST,
    is_ip_literal,
    is_platform_host,
    normalize_host,
)
from multistore.modules.domains.lookup import DnsLookup, DnsLookupError, DnsResolver
from multistore.modules.domains.models import ChallengeMethod, ChallengeStatus, DomainChallenge
from multistore.modules.domains.repos import DomainChallengeRepo, DomainChallengeRepository
from multistore.modules.tenants.repos import TenantRepo, TenantRepository, domain_key


logger = structlog.get_logger()

LABEL_PATTERN = re.compile(r"^[a-z0-9](?:[a-z0-9-]*[a-z0-9])?$")


class VerificationOutcome(StrEnum):
    """Result of checking a challenge against DNS."""

    VERIFIED = "verified"
    PENDING = "pending"
    EXPIRED = "expired"


@dataclass(frozen=True)
class ChallengeInstructions:
    """What the owner has to publish."""

    domain: str
    method: ChallengeMethod
    record_name: str
    record_type: str
    record_value: str
    expires_at: datetime


@dataclass(frozen=True)
class CheckResult:
    outcome: VerificationOutcome
    challenge: DomainChallenge


def ensure_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes read back from the database."""
    return value if value.tzinfo else value.replace(tzinfo=UTC)


def _invalid(message: str) -> InvalidDomainError:
    return InvalidDomainError(message, errors=[{"field": "domain", "message": message}])


def normalize_domain(raw: str, config: Settings | None = None) -> str:
    """Normalize and validate a custom domain entered by an owner.

    Accepts pasted URLs (``https://Shop.Example.com/path``) and keeps
    only the lowercase hostname.

    Raises:
        InvalidDomainError: If the value cannot be attached to a store
    """
    config = config or settings
    value = raw.strip()
    if "://" in value:
        value = urlsplit(value).netloc
    value = value.split("/", 1)[0]
    domain = normalize_host(value)

    if not domain or len(domain) > MAX_DOMAIN_LENGTH:
        raise _invalid("Enter a valid domain name")
    if is_ip_literal(domain):
        raise _invalid("IP addresses cannot be used as a store domain")

    labels = domain.split(".")
    if len(labels) < 2:
        raise _invalid("Domain must include a top-level domain")
    for label in labels:
        if len(label) > MAX_LABEL_LENGTH or not LABEL_PATTERN.match(label):
            raise _invalid("Enter a valid domain name")
    if labels[-1].isdigit():
        raise _invalid("Enter a valid domain name")

    if domain == LOCALHOST or domain.endswith(f".{LOCALHOST}"):
        raise _invalid("Local development hosts cannot be used as a store domain")
    if is_platform_host(domain, config.platform_domains):
        raise _invalid("Platform domains cannot be used as a custom domain")

    return domain


class DomainVerificationService:
    """Issues and checks domain ownership challenges."""

    def __init__(
        self,
        challenges: DomainChallengeRepo,
        tenants: TenantRepo,
        dns: DnsLookup | None = None,
        config: Settings | None = None,
    ) -> None:
        self.challenges = challenges
        self.tenants = tenants
        self.dns = dns or DnsResolver()
        self.config = config or settings

    @classmethod
    def for_session(
        cls, session: AsyncSession, dns: DnsLookup | None = None
    ) -> "DomainVerificationService":
        """Build the service outside of a request (background jobs)."""
        return cls(
            DomainChallengeRepository(session),
            TenantRepository(session),
            dns=dns,
        )

    def record_name(self, domain: str) -> str:
        """DNS name the challenge record is published at."""
        return f"{self.config.verification_record_prefix}.{domain}"

    def expected_value(self, challenge: DomainChallenge) -> str:
        """Record value that proves ownership."""
        if challenge.method is ChallengeMethod.CNAME:
            return f"{challenge.expected_token}.{self.config.verification_cname_target}"
        return challenge.expected_token

    def instructions(self, challenge: DomainChallenge) -> ChallengeInstructions:
        return ChallengeInstructions(
            domain=challenge.domain,
            method=challenge.method,
            record_name=self.record_name(challenge.domain),
            record_type=challenge.method.value,
            record_value=self.expected_value(challenge),
            expires_at=ensure_utc(challenge.expires_at),
        )

    async def request_challenge(
        self,
        tenant_id: UUID,
        domain: str,
        method: ChallengeMethod = ChallengeMethod.TXT,
    ) -> ChallengeInstructions:
        """Start verification of a domain for a tenant.

        Earlier pending challenges of the tenant are expired.

        Args:
            tenant_id: Tenant claiming the domain
            domain: Domain as entered by the owner
            method: Record type to publish

        Returns:
            Record name, type, and value to publish

        Raises:
            InvalidDomainError: If the domain is malformed or a platform host
            DomainConflictError: If another tenant already holds the domain
        """
        normalized = normalize_domain(domain, self.config)

        holder = await self.tenants.find_by_domain_key(domain_key(normalized))
        if holder is not None and holder.id != tenant_id:
            raise DomainConflictError(details={"domain": normalized})

        await self.challenges.supersede_pending(tenant_id)

        challenge = DomainChallenge(
            tenant_id=tenant_id,
            domain=normalized,
            method=method,
            expected_token=secrets.token_hex(VERIFICATION_TOKEN_BYTES),
            status=ChallengeStatus.PENDING,
            expires_at=datetime.now(UTC) + timedelta(hours=self.config.verification_ttl_hours),
        )
        challenge = await self.challenges.create(challenge)

        logger.info(
            "domain_challenge_issued",
            tenant_id=str(tenant_id),
            domain=normalized,
            method=method.value,
            challenge_id=str(challenge.id),
        )
        return self.instructions(challenge)

    async def check_challenge(self, tenant_id: UUID, domain: str) -> CheckResult:
        """Check the latest challenge of a tenant for a domain.

        Raises:
            InvalidDomainError: If the domain is malformed
            NotFoundError: If no challenge was requested for the domain
        """
        normalized = normalize_domain(domain, self.config)
        challenge = await self.challenges.latest_for_domain(tenant_id, normalized)
        if challenge is None:
            raise NotFoundError(
                "No verification challenge for this domain",
                error_code="challenge_not_found",
                details={"domain": normalized},
            )
        return await self.check(challenge)

    async def check(self, challenge: DomainChallenge) -> CheckResult:
        """Check one challenge against DNS and record the outcome on it."""
        if challenge.status is ChallengeStatus.VERIFIED:
            return CheckResult(VerificationOutcome.VERIFIED, challenge)

        if challenge.status is not ChallengeStatus.PENDING:
            return CheckResult(VerificationOutcome.EXPIRED, challenge)

        now = datetime.now(UTC)
        if ensure_utc(challenge.expires_at) <= now:
            challenge.status = ChallengeStatus.EXPIRED
            logger.info(
                "domain_verification_expired",
                tenant_id=str(challenge.tenant_id),
                domain=challenge.domain,
            )
            return CheckResult(VerificationOutcome.EXPIRED, challenge)

        challenge.last_checked_at = now
        try:
            found = await self._record_matches(challenge)
        except DnsLookupError as exc:
            logger.info(
                "domain_verification_pending",
                tenant_id=str(challenge.tenant_id),
                domain=challenge.domain,
                reason=str(exc),
            )
            return CheckResult(VerificationOutcome.PENDING, challenge)

        if not found:
            logger.info(
                "domain_verification_pending",
                tenant_id=str(challenge.tenant_id),
                domain=challenge.domain,
                reason="record_mismatch",
            )
            return CheckResult(VerificationOutcome.PENDING, challenge)

        challenge.status = ChallengeStatus.VERIFIED
        challenge.verified_at = now
        logger.info(
            "domain_verified",
            tenant_id=str(challenge.tenant_id),
            domain=challenge.domain,
            method=challenge.method.value,
        )
        return CheckResult(VerificationOutcome.VERIFIED, challenge)

    async def _record_matches(self, challenge: DomainChallenge) -> bool:
        name = self.record_name(challenge.domain)
        expected = self.expected_value(challenge)
        if challenge.method is ChallengeMethod.CNAME:
            target = await self.dns.cname_target(name)
            return target is not None and target == expected.lower()
        values = await self.dns.txt_records(name)
        return expected in values


def get_dns_lookup() -> DnsLookup:
    """DNS reader used by request handlers."""
    return DnsResolver()


def get_domain_verification_service(
    challenges: DomainChallengeRepo,
    tenants: TenantRepo,
    dns: Annotated[DnsLookup, Depends(get_dns_lookup)],
) -> DomainVerificationService:
    return DomainVerificationService(challenges, tenants, dns=dns)


# Type alias for dependency injection
DomainVerificationSvc = Annotated[
    DomainVerificationService, Depends(get_domain_verification_service)
]
