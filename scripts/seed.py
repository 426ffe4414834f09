#!/usr/bin/env python
"""
Generate demo stores for development.

Each scenario is idempotent: stores that already exist are skipped.
"""

import argparse
import asyncio
import sys

from sqlalchemy import select

from multistore.core.auth import hash_password
from multistore.core.database import async_session_factory
from multistore.modules.tenants.models import Tenant
from multistore.modules.tenants.repos import domain_key
from multistore.modules.users.models import Role, User


DEMO_PASSWORD = "DemoPass123"

DEMO_STORES = [
    {"name": "Acme Outfitters", "subdomain": "acme", "custom_domain": None},
    {"name": "Globex Coffee", "subdomain": "globex", "custom_domain": "shop.globex.test"},
    {"name": "Initech Supplies", "subdomain": "initech", "custom_domain": None},
]


async def get_or_create_user(session, email: str, full_name: str, role: Role) -> User:  # type: ignore[no-untyped-def]
    """Fetch a user by email or create it with the demo password."""
    result = await session.execute(select(User).where(User.email == email))
    user = result.scalar_one_or_none()
    if user:
        print(f"User already exists: {email}")
        return user

    user = User(
        email=email,
        password_hash=hash_password(DEMO_PASSWORD),
        full_name=full_name,
        role=role,
    )
    session.add(user)
    await session.flush()
    print(f"Created user: {email} ({role.value})")
    return user


async def seed_default() -> None:
    """Create a platform admin."""
    async with async_session_factory() as session:
        await get_or_create_user(
            session, "admin@example.com", "Platform Admin", Role.PLATFORM_ADMIN
        )
        await session.commit()


async def seed_demo() -> None:
    """Create a store owner with several stores, one on a custom domain."""
    async with async_session_factory() as session:
        owner = await get_or_create_user(
            session, "owner@example.com", "Demo Owner", Role.STORE_OWNER
        )

        for data in DEMO_STORES:
            result = await session.execute(
                select(Tenant).where(Tenant.subdomain == data["subdomain"])
            )
            existing = result.scalar_one_or_none()

            if existing:
                print(f"Store already exists: {existing.name}")
                continue

            custom_domain = data["custom_domain"]
            tenant = Tenant(
                name=data["name"],
                subdomain=data["subdomain"],
                custom_domain=custom_domain,
                custom_domain_key=domain_key(custom_domain) if custom_domain else None,
                owner_id=owner.id,
                is_active=True,
            )
            session.add(tenant)
            print(f"Created store: {tenant.name} ({tenant.subdomain})")

        await session.commit()


async def main(scenario: str) -> None:
    """Run the seeding based on scenario."""
    if scenario == "default":
        await seed_default()
    elif scenario == "demo":
        await seed_default()
        await seed_demo()
    else:
        print(f"Unknown scenario: {scenario}")
        print("Available scenarios: default, demo")
        sys.exit(1)


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Seed database with demo stores")
    parser.add_argument(
        "--scenario",
        "-s",
        default="default",
        help="Seed scenario to run (default, demo)",
    )
    args = parser.parse_args()

    asyncio.run(main(args.scenario))
