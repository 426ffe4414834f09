"""Tenant database models."""

from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from multistore.core.constants import MAX_DOMAIN_LENGTH, MAX_NAME_LENGTH, MAX_SLUG_LENGTH
from multistore.core.database.base import Base, TimestampMixin, UUIDMixin


if TYPE_CHECKING:
    from multistore.modules.users.models import User


class Tenant(Base, UUIDMixin, TimestampMixin):
    """A store on the platform.

    All tenant-scoped data references this table via tenant_id.

    Attributes:
        name: Display name of the store
        subdomain: Store slug, used as ``<subdomain>.<root>`` and as the
            first path segment of path-addressed URLs
        custom_domain: Verified custom domain as the owner entered it
        custom_domain_key: Lowercase ``www.``-less form of custom_domain.
            Unique, so ``shop.com`` and ``www.shop.com`` can never belong
            to two stores.
        owner_id: User that owns the store
        is_active: Inactive stores still resolve but are gated per route
    """

    __tablename__ = "tenants"

    name: Mapped[str] = mapped_column(
        String(MAX_NAME_LENGTH),
        nullable=False,
    )
    subdomain: Mapped[str] = mapped_column(
        String(MAX_SLUG_LENGTH),
        nullable=False,
        unique=True,
        index=True,
    )
    custom_domain: Mapped[str | None] = mapped_column(
        String(MAX_DOMAIN_LENGTH),
        nullable=True,
        unique=True,
    )
    custom_domain_key: Mapped[str | None] = mapped_column(
        String(MAX_DOMAIN_LENGTH),
        nullable=True,
        unique=True,
        index=True,
    )
    owner_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    is_active: Mapped[bool] = mapped_column(
        default=True,
        nullable=False,
    )

    owner: Mapped["User"] = relationship(
        "User",
        back_populates="tenants",
        lazy="selectin",
    )

    def __repr__(self) -> str:
        return f"<Tenant(id={self.id}, subdomain={self.subdomain}, custom_domain={self.custom_domain})>"
