"""Domain verification database models."""

from datetime import datetime
from enum import StrEnum

from sqlalchemy import DateTime, Enum, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from multistore.core.constants import MAX_DOMAIN_LENGTH, MAX_TOKEN_LENGTH
from multistore.core.database.base import Base, TenantMixin, TimestampMixin, UUIDMixin


class ChallengeMethod(StrEnum):
    """DNS record type the owner publishes."""

    TXT = "TXT"
    CNAME = "CNAME"


class ChallengeStatus(StrEnum):
    """Lifecycle of a verification challenge."""

    PENDING = "pending"
    VERIFIED = "verified"
    EXPIRED = "expired"
    FAILED = "failed"


def _values(enum: type[StrEnum]) -> list[str]:
    return [member.value for member in enum]


class DomainChallenge(Base, UUIDMixin, TimestampMixin, TenantMixin):
    """Proof-of-ownership challenge for a custom domain.

    The owner publishes ``expected_token`` at
    ``_<platform>-verify.<domain>`` before ``expires_at``.
    """

    __tablename__ = "domain_challenges"
    __table_args__ = (
        Index("ix_domain_challenges_status_expires_at", "status", "expires_at"),
    )

    domain: Mapped[str] = mapped_column(
        String(MAX_DOMAIN_LENGTH),
        nullable=False,
        index=True,
    )
    method: Mapped[ChallengeMethod] = mapped_column(
        Enum(ChallengeMethod, name="challenge_method", values_callable=_values),
        default=ChallengeMethod.TXT,
        nullable=False,
    )
    expected_token: Mapped[str] = mapped_column(
        String(MAX_TOKEN_LENGTH),
        nullable=False,
    )
    status: Mapped[ChallengeStatus] = mapped_column(
        Enum(ChallengeStatus, name="challenge_status", values_callable=_values),
        default=ChallengeStatus.PENDING,
        nullable=False,
    )
    expires_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
    )
    verified_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    last_checked_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    def __repr__(self) -> str:
        return (
            f"<DomainChallenge(id={self.id}, domain={self.domain}, "
            f"method={self.method}, status={self.status})>"
        )
