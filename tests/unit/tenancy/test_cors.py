"""Unit tests for the dynamic CORS origin policy."""

from contextlib import asynccontextmanager
from types import SimpleNamespace

import pytest

from multistore.config import Settings
from multistore.core.tenancy.cors import OriginPolicy


class FakeDirectory:
    def __init__(self, *tenants):
        self.tenants = tenants

    async def find_by_subdomain(self, slug):
        return next((t for t in self.tenants if t.subdomain == slug), None)

    async def find_by_custom_domain(self, host):
        return next((t for t in self.tenants if t.custom_domain == host), None)


def make_policy(*tenants, environment="development") -> OriginPolicy:
    directory = FakeDirectory(*tenants)

    @asynccontextmanager
    async def factory():
        yield directory

    config = Settings(platform_root_domain="shopu.ge", environment=environment)
    return OriginPolicy(factory, config)


ACME = SimpleNamespace(subdomain="acme", custom_domain="shop.acme.com", is_active=True)
CLOSED = SimpleNamespace(subdomain="closed", custom_domain="closed.com", is_active=False)


class TestOriginPolicy:
    """Tests for OriginPolicy.is_allowed."""

    @pytest.mark.parametrize("origin", ["https://shopu.ge", "https://www.shopu.ge"])
    async def test_platform_root_allowed(self, origin):
        """The platform itself may always call the API."""
        assert await make_policy().is_allowed(origin)

    async def test_existing_subdomain_allowed(self):
        """Subdomains of existing stores are allowed."""
        policy = make_policy(ACME)

        assert await policy.is_allowed("https://acme.shopu.ge")
        assert not await policy.is_allowed("https://nope.shopu.ge")

    async def test_active_custom_domain_allowed(self):
        """Custom domains are allowed while their store is active."""
        policy = make_policy(ACME, CLOSED)

        assert await policy.is_allowed("https://shop.acme.com")
        assert not await policy.is_allowed("https://closed.com")
        assert not await policy.is_allowed("https://evil.example.com")

    async def test_localhost_only_in_development(self):
        """Local origins are a development convenience."""
        assert await make_policy().is_allowed("http://localhost:5173")
        assert not await make_policy(environment="production-like").is_allowed(
            "http://localhost:5173"
        )

    @pytest.mark.parametrize("origin", ["null", "file:///tmp/x", "ftp://shopu.ge", ""])
    async def test_malformed_origins_rejected(self, origin):
        """Only http(s) origins with a host are considered."""
        assert not await make_policy(ACME).is_allowed(origin)
