"""Pytest configuration and shared fixtures."""

from collections.abc import AsyncGenerator, Awaitable, Callable
from contextlib import asynccontextmanager
from typing import Any

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from multistore.config import settings
from multistore.core.auth import create_access_token, hash_password
from multistore.core.database import Base, get_db
from multistore.core.tenancy.cors import OriginPolicy
from multistore.main import create_app

# Import all models to ensure they're registered with Base.metadata
from multistore.modules.catalog.models import Category, Product  # noqa: F401
from multistore.modules.domains.models import DomainChallenge  # noqa: F401
from multistore.modules.tenants.models import Tenant
from multistore.modules.tenants.repos import TenantRepository, domain_key
from multistore.modules.users.models import Role, User
from tests.factories import TEST_PASSWORD, TenantFactory, UserFactory


# Each test gets its own in-memory database
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

ROOT = settings.platform_root_domain
UNTRUSTED_PEER = ("203.0.113.7", 40000)

# bcrypt is slow; hash the shared test password once
TEST_PASSWORD_HASH = hash_password(TEST_PASSWORD)


@pytest.fixture
async def engine():
    """Create test database engine."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
        echo=False,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(engine) -> async_sessionmaker[AsyncSession]:
    """Session factory bound to the test engine."""
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest.fixture
async def db(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Provide a database session for tests.

    Fixtures commit their rows so that a request that fails and rolls
    back only discards its own changes.
    """
    async with session_factory() as session:
        yield session


@pytest.fixture
async def app(db: AsyncSession):
    """Create test application instance."""
    application = create_app()

    # Override database dependency with the same commit/rollback contract
    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        try:
            yield db
            await db.commit()
        except Exception:
            await db.rollback()
            raise

    application.dependency_overrides[get_db] = override_get_db

    # CORS lookups go through the test session
    @asynccontextmanager
    async def directory():  # type: ignore[no-untyped-def]
        yield TenantRepository(db)

    application.state.origin_policy = OriginPolicy(directory)

    yield application

    application.dependency_overrides.clear()


@pytest.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """Provide async HTTP client for API testing.

    Requests come from 127.0.0.1, which is a trusted proxy address.
    Use absolute URLs to address a store host.
    """
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url=f"http://{ROOT}",
    ) as client:
        yield client


@pytest.fixture
async def untrusted_client(app) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client whose peer address is outside the trusted networks."""
    async with AsyncClient(
        transport=ASGITransport(app=app, client=UNTRUSTED_PEER),
        base_url=f"http://{ROOT}",
    ) as client:
        yield client


# ============================================================
# Store and User Fixtures
# ============================================================


@pytest.fixture
def make_user(db: AsyncSession) -> Callable[..., Awaitable[User]]:
    """Factory fixture that persists users."""

    async def _make(**overrides: Any) -> User:
        data = UserFactory.build(**overrides)
        user = User(**data.model_dump(), password_hash=TEST_PASSWORD_HASH)
        db.add(user)
        await db.commit()
        await db.refresh(user)
        return user

    return _make


@pytest.fixture
def make_tenant(db: AsyncSession) -> Callable[..., Awaitable[Tenant]]:
    """Factory fixture that persists stores for an owner."""

    async def _make(owner: User, **overrides: Any) -> Tenant:
        data = TenantFactory.build(**overrides)
        tenant = Tenant(
            **data.model_dump(),
            custom_domain_key=domain_key(data.custom_domain) if data.custom_domain else None,
            owner_id=owner.id,
        )
        db.add(tenant)
        await db.commit()
        await db.refresh(tenant)
        return tenant

    return _make


@pytest.fixture
async def owner(make_user) -> User:
    """A store owner."""
    return await make_user(email="owner@example.com", full_name="Store Owner")


@pytest.fixture
async def admin(make_user) -> User:
    """A platform admin."""
    return await make_user(
        email="admin@example.com",
        full_name="Platform Admin",
        role=Role.PLATFORM_ADMIN,
    )


@pytest.fixture
async def tenant(make_tenant, owner: User) -> Tenant:
    """An active store at acme.<root>."""
    return await make_tenant(owner, name="Acme", subdomain="acme")


@pytest.fixture
def owner_headers(owner: User) -> dict[str, str]:
    """Authorization headers for the store owner."""
    return {"Authorization": f"Bearer {create_access_token(owner.id)}"}


@pytest.fixture
def admin_headers(admin: User) -> dict[str, str]:
    """Authorization headers for the platform admin."""
    return {"Authorization": f"Bearer {create_access_token(admin.id)}"}


@pytest.fixture
def anyio_backend() -> str:
    """Specify the async backend for anyio."""
    return "asyncio"
