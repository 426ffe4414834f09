"""Integration tests for the tenant directory."""

from unittest.mock import AsyncMock

import pytest

from multistore.core.errors import ConflictError, DomainConflictError
from multistore.modules.tenants.repos import TenantRepository, domain_key


pytestmark = pytest.mark.integration


@pytest.fixture
def repo(db) -> TenantRepository:
    return TenantRepository(db)


def test_domain_key():
    """Keys ignore case, port, trailing dot and one www."""
    assert domain_key("WWW.Shop.Example.com.") == "shop.example.com"
    assert domain_key("shop.example.com:443") == "shop.example.com"
    assert domain_key("www.www.example.com") == "www.example.com"


class TestLookups:
    """Directory lookups used by the resolver."""

    async def test_find_by_subdomain(self, repo, tenant):
        """Subdomain lookups are exact but case-insensitive."""
        assert (await repo.find_by_subdomain("acme")).id == tenant.id
        assert (await repo.find_by_subdomain(" ACME ")).id == tenant.id
        assert await repo.find_by_subdomain("acm") is None
        assert await repo.find_by_subdomain("") is None

    async def test_custom_domain_bare_matches_www_request(self, repo, make_tenant, owner):
        """A store on shop.com also answers www.shop.com."""
        store = await make_tenant(owner, custom_domain="shop.example.com")

        assert (await repo.find_by_custom_domain("www.shop.example.com")).id == store.id
        assert (await repo.find_by_custom_domain("Shop.Example.com")).id == store.id

    async def test_custom_domain_www_matches_bare_request(self, repo, make_tenant, owner):
        """A store on www.shop.com also answers shop.com."""
        store = await make_tenant(owner, custom_domain="www.shop.example.com")

        assert (await repo.find_by_custom_domain("shop.example.com")).id == store.id
        assert (await repo.find_by_custom_domain("WWW.SHOP.EXAMPLE.COM")).id == store.id

    async def test_custom_domain_no_suffix_matching(self, repo, make_tenant, owner):
        """Only the domain itself and its www form match."""
        await make_tenant(owner, custom_domain="example.com")

        assert await repo.find_by_custom_domain("shop.example.com") is None
        assert await repo.find_by_custom_domain("example.com.evil.test") is None
        assert await repo.find_by_custom_domain("") is None

    async def test_list_by_owner(self, repo, make_tenant, make_user, owner, tenant):
        """Owners only see their own stores."""
        second = await make_tenant(owner, subdomain="globex")
        other = await make_user(email="other@example.com")
        await make_tenant(other, subdomain="initech")

        stores = await repo.list_by_owner(owner.id)

        assert {store.id for store in stores} == {tenant.id, second.id}


class TestCustomDomainActivation:
    """Attaching verified domains."""

    async def test_activate(self, repo, db, tenant):
        """Activation stores the domain and its key."""
        await repo.activate_custom_domain(tenant, "Www.Shop.Example.com")
        await db.commit()

        assert tenant.custom_domain == "Www.Shop.Example.com"
        assert tenant.custom_domain_key == "shop.example.com"
        assert (await repo.find_by_custom_domain("shop.example.com")).id == tenant.id

    async def test_reactivate_own_domain(self, repo, make_tenant, owner):
        """Re-attaching a store's own domain is not a conflict."""
        store = await make_tenant(owner, custom_domain="shop.example.com")

        await repo.activate_custom_domain(store, "www.shop.example.com")

        assert store.custom_domain_key == "shop.example.com"

    async def test_www_variant_of_taken_domain(self, repo, make_tenant, owner, tenant):
        """shop.com and www.shop.com never belong to two stores."""
        await make_tenant(owner, subdomain="globex", custom_domain="shop.example.com")

        with pytest.raises(DomainConflictError):
            await repo.activate_custom_domain(tenant, "www.shop.example.com")

    async def test_race_is_decided_by_constraint(self, repo, make_tenant, owner, tenant):
        """When the pre-check misses a concurrent activation, the unique key wins."""
        await make_tenant(owner, subdomain="globex", custom_domain="shop.example.com")
        repo.find_by_domain_key = AsyncMock(return_value=None)

        with pytest.raises(DomainConflictError):
            await repo.activate_custom_domain(tenant, "shop.example.com")

    async def test_clear(self, repo, db, make_tenant, owner):
        """Clearing frees the domain for lookups."""
        store = await make_tenant(owner, custom_domain="shop.example.com")

        await repo.clear_custom_domain(store)
        await db.commit()

        assert store.custom_domain is None
        assert await repo.find_by_custom_domain("shop.example.com") is None


class TestSubdomainChanges:
    """Renaming stores."""

    async def test_update_subdomain(self, repo, db, tenant):
        """A free slug can be taken."""
        await repo.update_subdomain(tenant, "acme-shop")
        await db.commit()

        assert (await repo.find_by_subdomain("acme-shop")).id == tenant.id
        assert await repo.find_by_subdomain("acme") is None

    async def test_update_subdomain_taken(self, repo, make_tenant, owner, tenant):
        """Taken slugs conflict."""
        await make_tenant(owner, subdomain="globex")

        with pytest.raises(ConflictError) as exc_info:
            await repo.update_subdomain(tenant, "globex")

        assert exc_info.value.error_code == "subdomain_taken"

    async def test_set_active(self, repo, db, tenant):
        """Deactivated stores still resolve."""
        await repo.set_active(tenant, False)
        await db.commit()

        found = await repo.find_by_subdomain("acme")
        assert found is not None
        assert found.is_active is False
