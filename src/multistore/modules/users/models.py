"""User database models."""

from enum import StrEnum
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, Enum, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from multistore.core.constants import MAX_EMAIL_LENGTH, MAX_NAME_LENGTH
from multistore.core.database.base import Base, TimestampMixin, UUIDMixin


if TYPE_CHECKING:
    from multistore.modules.tenants.models import Tenant


class Role(StrEnum):
    """Platform-level user role."""

    PLATFORM_ADMIN = "platform_admin"
    STORE_OWNER = "store_owner"


class User(Base, UUIDMixin, TimestampMixin):
    """User model representing an authenticated account.

    Users are platform-level: one account may own several stores.

    Attributes:
        email: Unique email address
        password_hash: Bcrypt-hashed password
        full_name: User's full name
        role: Platform role
        is_active: Whether the user can log in
    """

    __tablename__ = "users"

    email: Mapped[str] = mapped_column(
        String(MAX_EMAIL_LENGTH),
        nullable=False,
        unique=True,
        index=True,
    )
    password_hash: Mapped[str] = mapped_column(
        Text,
        nullable=False,
    )
    full_name: Mapped[str] = mapped_column(
        String(MAX_NAME_LENGTH),
        nullable=False,
    )
    role: Mapped[Role] = mapped_column(
        Enum(Role, name="user_role", values_callable=lambda e: [m.value for m in e]),
        default=Role.STORE_OWNER,
        nullable=False,
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        nullable=False,
    )

    tenants: Mapped[list["Tenant"]] = relationship(
        "Tenant",
        back_populates="owner",
        lazy="noload",
    )

    @property
    def is_platform_admin(self) -> bool:
        return self.role == Role.PLATFORM_ADMIN

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email}, role={self.role})>"
