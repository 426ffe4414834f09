"""Catalog database models."""

from uuid import UUID

from sqlalchemy import ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from multistore.core.constants import MAX_NAME_LENGTH
from multistore.core.database.base import Base, TenantMixin, TimestampMixin, UUIDMixin


class Category(Base, UUIDMixin, TimestampMixin, TenantMixin):
    """Product category of a store."""

    __tablename__ = "categories"
    __table_args__ = (UniqueConstraint("tenant_id", "name", name="uq_categories_tenant_name"),)

    name: Mapped[str] = mapped_column(
        String(MAX_NAME_LENGTH),
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<Category(id={self.id}, name={self.name}, tenant_id={self.tenant_id})>"


class Product(Base, UUIDMixin, TimestampMixin, TenantMixin):
    """Product of a store.

    Attributes:
        name: Product name
        description: Optional long description
        category_id: Category of the same store
        is_published: Visible on the public storefront
    """

    __tablename__ = "products"

    name: Mapped[str] = mapped_column(
        String(MAX_NAME_LENGTH),
        nullable=False,
    )
    description: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
    )
    category_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("categories.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    is_published: Mapped[bool] = mapped_column(
        default=True,
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<Product(id={self.id}, name={self.name}, tenant_id={self.tenant_id})>"
