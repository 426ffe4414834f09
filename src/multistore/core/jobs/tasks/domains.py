"""Custom domain verification sweep.

Re-checks pending challenges so a domain gets attached once its DNS
record propagates, even if the owner never presses "verify now".
"""

from datetime import UTC, datetime, timedelta
from typing import Any

import structlog

from multistore.core.constants import CHALLENGE_RETENTION_DAYS
from multistore.core.errors import DomainConflictError
from multistore.modules.domains.models import ChallengeStatus
from multistore.modules.domains.services import DomainVerificationService, VerificationOutcome
from multistore.modules.tenants.repos import TenantRepository


log = structlog.get_logger()


async def sweep_domain_challenges(ctx: dict[str, Any]) -> dict[str, int]:
    """Check pending challenges, attach verified domains, prune old ones.

    A verified domain that another store took in the meantime marks the
    challenge FAILED. Challenges that ended more than
    ``CHALLENGE_RETENTION_DAYS`` ago are deleted.

    Args:
        ctx: Worker context containing the database session factory and,
            optionally, a ``dns`` lookup override

    Returns:
        Dict of counts by outcome
    """
    session_factory = ctx["db_session_factory"]
    counts = {"verified": 0, "pending": 0, "expired": 0, "failed": 0, "deleted": 0}

    async with session_factory() as session:
        service = DomainVerificationService.for_session(session, dns=ctx.get("dns"))
        tenants = TenantRepository(session)

        for challenge in await service.challenges.list_pending():
            result = await service.check(challenge)
            if result.outcome is VerificationOutcome.PENDING:
                counts["pending"] += 1
                continue
            if result.outcome is VerificationOutcome.EXPIRED:
                counts["expired"] += 1
                continue

            tenant = await tenants.get_by_id(challenge.tenant_id)
            if tenant is None:
                challenge.status = ChallengeStatus.FAILED
                counts["failed"] += 1
                continue

            try:
                async with session.begin_nested():
                    await tenants.activate_custom_domain(tenant, challenge.domain)
            except DomainConflictError:
                challenge.status = ChallengeStatus.FAILED
                counts["failed"] += 1
                log.warning(
                    "custom_domain_conflict",
                    tenant_id=str(challenge.tenant_id),
                    domain=challenge.domain,
                )
                continue

            counts["verified"] += 1
            log.info(
                "custom_domain_activated",
                tenant_id=str(challenge.tenant_id),
                domain=challenge.domain,
            )

        cutoff = datetime.now(UTC) - timedelta(days=CHALLENGE_RETENTION_DAYS)
        counts["deleted"] = await service.challenges.delete_expired_before(cutoff)

        await session.commit()

    log.info("sweep_domain_challenges_complete", **counts)
    return counts
