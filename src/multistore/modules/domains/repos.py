"""Domain challenge repository for database operations."""

from datetime import datetime
from typing import Annotated
from uuid import UUID

from fastapi import Depends
from sqlalchemy import delete, select, update

from multistore.api.dependencies import DBSession
from multistore.modules.domains.models import ChallengeStatus, DomainChallenge


class DomainChallengeRepository:
    """Repository for DomainChallenge database operations.

    Request-path methods take the tenant id explicitly; the sweep job
    uses the unscoped ``list_pending`` and ``delete_expired_before``.
    """

    def __init__(self, session: DBSession) -> None:
        self.session = session

    async def create(self, challenge: DomainChallenge) -> DomainChallenge:
        """Create a new challenge."""
        self.session.add(challenge)
        await self.session.flush()
        await self.session.refresh(challenge)
        return challenge

    async def latest_for_domain(self, tenant_id: UUID, domain: str) -> DomainChallenge | None:
        """Most recent live or finished challenge of a tenant for a domain.

        Expired challenges are included so a check after expiry reports
        EXPIRED instead of a missing challenge. FAILED ones are not: the
        owner is told to request a new challenge either way.
        """
        stmt = (
            select(DomainChallenge)
            .where(
                DomainChallenge.tenant_id == tenant_id,
                DomainChallenge.domain == domain,
                DomainChallenge.status.in_(
                    [ChallengeStatus.PENDING, ChallengeStatus.VERIFIED, ChallengeStatus.EXPIRED]
                ),
            )
            .order_by(DomainChallenge.created_at.desc(), DomainChallenge.expires_at.desc())
            .limit(1)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def supersede_pending(self, tenant_id: UUID) -> int:
        """Expire every pending challenge of a tenant.

        Matching rows are fetched by key, so loaded challenges are
        updated without comparing values in Python.

        Returns:
            Number of challenges expired
        """
        await self.session.flush()
        stmt = (
            update(DomainChallenge)
            .where(
                DomainChallenge.tenant_id == tenant_id,
                DomainChallenge.status == ChallengeStatus.PENDING,
            )
            .values(status=ChallengeStatus.EXPIRED)
            .execution_options(synchronize_session="fetch")
        )
        result = await self.session.execute(stmt)
        return result.rowcount

    async def list_pending(self, limit: int = 100) -> list[DomainChallenge]:
        """Pending challenges across all tenants, oldest first."""
        stmt = (
            select(DomainChallenge)
            .where(DomainChallenge.status == ChallengeStatus.PENDING)
            .order_by(DomainChallenge.created_at)
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def delete_expired_before(self, cutoff: datetime) -> int:
        """Delete finished challenges that expired before a cutoff.

        Returns:
            Number of challenges deleted
        """
        await self.session.flush()
        stmt = delete(DomainChallenge).where(
            DomainChallenge.status.in_(
                [ChallengeStatus.EXPIRED, ChallengeStatus.FAILED]
            ),
            DomainChallenge.expires_at < cutoff,
        ).execution_options(synchronize_session="fetch")
        result = await self.session.execute(stmt)
        return result.rowcount


# Type alias for dependency injection
DomainChallengeRepo = Annotated[DomainChallengeRepository, Depends(DomainChallengeRepository)]
