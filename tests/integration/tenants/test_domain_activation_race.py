"""Concurrent custom domain activations on separate connections."""

import asyncio
from uuid import UUID

import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from multistore.core.database import Base
from multistore.core.errors import DomainConflictError
from multistore.modules.tenants.models import Tenant
from multistore.modules.tenants.repos import TenantRepository
from multistore.modules.users.models import User
from tests.factories import TenantFactory, UserFactory


pytestmark = pytest.mark.integration

DOMAIN = "shop.example.com"


@pytest.fixture
async def file_factory(tmp_path) -> async_sessionmaker[AsyncSession]:
    """Sessions on a database file, each with its own connection."""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'race.db'}",
        connect_args={"timeout": 10},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()


async def seed_stores(factory: async_sessionmaker[AsyncSession]) -> list[UUID]:
    async with factory() as session:
        owner = User(**UserFactory.build().model_dump(), password_hash="x")
        session.add(owner)
        await session.flush()
        stores = [
            Tenant(**TenantFactory.build(subdomain=slug).model_dump(), owner_id=owner.id)
            for slug in ("acme", "globex")
        ]
        session.add_all(stores)
        await session.commit()
        return [store.id for store in stores]


async def test_simultaneous_activations(file_factory):
    """Both stores pass the pre-check; exactly one gets the domain."""
    acme_id, globex_id = await seed_stores(file_factory)
    both_checked = asyncio.Barrier(2)

    async def activate(tenant_id: UUID) -> str:
        async with file_factory() as session:
            repo = TenantRepository(session)
            lookup = repo.find_by_domain_key

            async def lookup_in_step(key: str) -> Tenant | None:
                holder = await lookup(key)
                await both_checked.wait()
                return holder

            repo.find_by_domain_key = lookup_in_step
            tenant = await repo.get_by_id(tenant_id)
            try:
                await repo.activate_custom_domain(tenant, DOMAIN)
                await session.commit()
            except DomainConflictError:
                await session.rollback()
                return "conflict"
            return "activated"

    outcomes = await asyncio.gather(activate(acme_id), activate(globex_id))

    assert sorted(outcomes) == ["activated", "conflict"]
    async with file_factory() as session:
        holders = (
            await session.execute(select(Tenant.id).where(Tenant.custom_domain_key == DOMAIN))
        ).scalars().all()
    winner = acme_id if outcomes[0] == "activated" else globex_id
    assert holders == [winner]
