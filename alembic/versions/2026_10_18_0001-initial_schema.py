"""initial_schema

Revision ID: 7c1e2f0a9b31
Revises:
Create Date: 2026-10-18 00:01:00.000000

This migration adds:
- users, tenants (subdomain, custom domain and its unique key)
- domain_challenges for custom domain verification
- categories and products as tenant-scoped catalog data
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op


# revision identifiers, used by Alembic.
revision: str = "7c1e2f0a9b31"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
    ]


def upgrade() -> None:
    """Upgrade database schema."""
    user_role = sa.Enum("platform_admin", "store_owner", name="user_role")
    challenge_method = sa.Enum("TXT", "CNAME", name="challenge_method")
    challenge_status = sa.Enum(
        "pending", "verified", "expired", "failed", name="challenge_status"
    )

    # Create users table
    op.create_table(
        "users",
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("password_hash", sa.Text(), nullable=False),
        sa.Column("full_name", sa.String(length=255), nullable=False),
        sa.Column("role", user_role, nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("id", sa.Uuid(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_users_id"), "users", ["id"], unique=False)
    op.create_index(op.f("ix_users_email"), "users", ["email"], unique=True)

    # Create tenants table
    op.create_table(
        "tenants",
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("subdomain", sa.String(length=50), nullable=False),
        sa.Column("custom_domain", sa.String(length=253), nullable=True),
        sa.Column("custom_domain_key", sa.String(length=253), nullable=True),
        sa.Column("owner_id", sa.Uuid(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("id", sa.Uuid(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["owner_id"], ["users.id"], ondelete="RESTRICT"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("custom_domain"),
    )
    op.create_index(op.f("ix_tenants_id"), "tenants", ["id"], unique=False)
    op.create_index(op.f("ix_tenants_subdomain"), "tenants", ["subdomain"], unique=True)
    op.create_index(
        op.f("ix_tenants_custom_domain_key"), "tenants", ["custom_domain_key"], unique=True
    )
    op.create_index(op.f("ix_tenants_owner_id"), "tenants", ["owner_id"], unique=False)

    # Create domain_challenges table
    op.create_table(
        "domain_challenges",
        sa.Column("domain", sa.String(length=253), nullable=False),
        sa.Column("method", challenge_method, nullable=False),
        sa.Column("expected_token", sa.String(length=128), nullable=False),
        sa.Column("status", challenge_status, nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("verified_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("last_checked_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("id", sa.Uuid(), nullable=False),
        *_timestamps(),
        sa.Column("tenant_id", sa.Uuid(), nullable=False),
        sa.ForeignKeyConstraint(["tenant_id"], ["tenants.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        op.f("ix_domain_challenges_id"), "domain_challenges", ["id"], unique=False
    )
    op.create_index(
        op.f("ix_domain_challenges_domain"), "domain_challenges", ["domain"], unique=False
    )
    op.create_index(
        op.f("ix_domain_challenges_tenant_id"),
        "domain_challenges",
        ["tenant_id"],
        unique=False,
    )
    # Sweep job scans pending challenges by expiry
    op.create_index(
        "ix_domain_challenges_status_expires_at",
        "domain_challenges",
        ["status", "expires_at"],
    )

    # Create categories table
    op.create_table(
        "categories",
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("id", sa.Uuid(), nullable=False),
        *_timestamps(),
        sa.Column("tenant_id", sa.Uuid(), nullable=False),
        sa.ForeignKeyConstraint(["tenant_id"], ["tenants.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("tenant_id", "name", name="uq_categories_tenant_name"),
    )
    op.create_index(op.f("ix_categories_id"), "categories", ["id"], unique=False)
    op.create_index(
        op.f("ix_categories_tenant_id"), "categories", ["tenant_id"], unique=False
    )

    # Create products table
    op.create_table(
        "products",
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("category_id", sa.Uuid(), nullable=True),
        sa.Column("is_published", sa.Boolean(), nullable=False),
        sa.Column("id", sa.Uuid(), nullable=False),
        *_timestamps(),
        sa.Column("tenant_id", sa.Uuid(), nullable=False),
        sa.ForeignKeyConstraint(["category_id"], ["categories.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["tenant_id"], ["tenants.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_products_id"), "products", ["id"], unique=False)
    op.create_index(
        op.f("ix_products_category_id"), "products", ["category_id"], unique=False
    )
    op.create_index(op.f("ix_products_tenant_id"), "products", ["tenant_id"], unique=False)


def downgrade() -> None:
    """Downgrade database schema."""
    op.drop_table("products")
    op.drop_table("categories")
    op.drop_index("ix_domain_challenges_status_expires_at", table_name="domain_challenges")
    op.drop_table("domain_challenges")
    op.drop_table("tenants")
    op.drop_table("users")

    sa.Enum(name="challenge_status").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="challenge_method").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="user_role").drop(op.get_bind(), checkfirst=True)
