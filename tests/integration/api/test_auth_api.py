"""Registration, login, and the cross-domain session handoff."""

from urllib.parse import unquote, urlsplit

import pytest

from multistore.config import settings
from multistore.core.auth import decode_token
from multistore.core.auth.handoff import (
    HandoffCodeStore,
    HandoffIssuer,
    get_handoff_codes,
    get_handoff_issuer,
)
from tests.factories import TEST_PASSWORD
from tests.fakes import FakeCache


pytestmark = pytest.mark.integration

ROOT = settings.platform_root_domain

REGISTRATION = {
    "email": "new@example.com",
    "password": "SecurePass123",
    "full_name": "New Owner",
    "store_name": "New Shop",
    "subdomain": "newshop",
}


def fragment_value(url: str, param: str) -> str:
    fragment = urlsplit(url).fragment
    name, _, value = fragment.partition("=")
    assert name == param
    return unquote(value)


class TestRegister:
    """Tests for POST /auth/register."""

    async def test_register_hands_off_to_store(self, client):
        response = await client.post("/api/v1/auth/register", json=REGISTRATION)

        assert response.status_code == 201
        data = response.json()
        assert data["store"]["subdomain"] == "newshop"
        assert data["handoff_url"] == (
            f"https://newshop.{ROOT}/dashboard#token={data['access_token']}"
        )

    async def test_token_is_not_bound_to_store(self, client):
        """One token works for every store the user owns."""
        response = await client.post("/api/v1/auth/register", json=REGISTRATION)

        token = fragment_value(response.json()["handoff_url"], "token")
        token_data = decode_token(token)
        assert token_data is not None
        assert str(token_data.user_id) == response.json()["user"]["id"]

    async def test_new_store_resolves(self, client):
        await client.post("/api/v1/auth/register", json=REGISTRATION)

        response = await client.get(f"http://newshop.{ROOT}/api/v1/tenants/current")

        assert response.status_code == 200
        assert response.json()["tenant"]["name"] == "New Shop"

    @pytest.mark.parametrize("subdomain", ["admin", "login", "api"])
    async def test_reserved_subdomain(self, client, subdomain):
        response = await client.post(
            "/api/v1/auth/register", json={**REGISTRATION, "subdomain": subdomain}
        )

        assert response.status_code == 422
        assert response.json()["type"].endswith("/subdomain_reserved")

    async def test_failed_store_creation_rolls_back_user(self, client):
        """A rejected subdomain leaves no half-registered account."""
        await client.post("/api/v1/auth/register", json={**REGISTRATION, "subdomain": "admin"})

        response = await client.post("/api/v1/auth/register", json=REGISTRATION)

        assert response.status_code == 201

    async def test_subdomain_taken(self, client, tenant):
        response = await client.post(
            "/api/v1/auth/register", json={**REGISTRATION, "subdomain": "acme"}
        )

        assert response.status_code == 409

    async def test_email_taken(self, client, owner):
        response = await client.post(
            "/api/v1/auth/register", json={**REGISTRATION, "email": owner.email}
        )

        assert response.status_code == 409


class TestLogin:
    """Tests for POST /auth/login."""

    async def test_login_hands_off_to_first_store(self, client, owner, tenant):
        response = await client.post(
            "/api/v1/auth/login", json={"email": owner.email, "password": TEST_PASSWORD}
        )

        assert response.status_code == 200
        data = response.json()
        assert data["handoff_url"].startswith(f"https://acme.{ROOT}/dashboard#token=")

    async def test_login_picks_requested_store(self, client, owner, tenant, make_tenant):
        await make_tenant(owner, subdomain="globex")

        response = await client.post(
            "/api/v1/auth/login",
            json={"email": owner.email, "password": TEST_PASSWORD, "subdomain": "globex"},
        )

        assert response.status_code == 200
        assert response.json()["store"]["subdomain"] == "globex"
        assert response.json()["handoff_url"].startswith(f"https://globex.{ROOT}/")

    async def test_login_to_custom_domain_store(self, client, owner, make_tenant):
        await make_tenant(owner, subdomain="globex", custom_domain="shop.example.com")

        response = await client.post(
            "/api/v1/auth/login", json={"email": owner.email, "password": TEST_PASSWORD}
        )

        assert response.json()["handoff_url"].startswith(
            "https://shop.example.com/dashboard#token="
        )

    async def test_login_to_foreign_store(self, client, owner, tenant, make_user, make_tenant):
        other = await make_user(email="other@example.com")
        await make_tenant(other, subdomain="globex")

        response = await client.post(
            "/api/v1/auth/login",
            json={"email": owner.email, "password": TEST_PASSWORD, "subdomain": "globex"},
        )

        assert response.status_code == 403

    async def test_admin_may_enter_any_store(self, client, admin, tenant):
        response = await client.post(
            "/api/v1/auth/login",
            json={"email": admin.email, "password": TEST_PASSWORD, "subdomain": "acme"},
        )

        assert response.status_code == 200
        assert response.json()["store"]["subdomain"] == "acme"

    async def test_login_without_store(self, client, make_user):
        user = await make_user(email="lonely@example.com")

        response = await client.post(
            "/api/v1/auth/login", json={"email": user.email, "password": TEST_PASSWORD}
        )

        assert response.status_code == 200
        assert response.json()["handoff_url"] is None

    async def test_wrong_password(self, client, owner):
        response = await client.post(
            "/api/v1/auth/login", json={"email": owner.email, "password": "wrong-pass-1"}
        )

        assert response.status_code == 401


class TestHandoffCodes:
    """Code mode: the fragment carries a one-time code instead of the token."""

    @pytest.fixture
    def codes(self, app) -> HandoffCodeStore:
        store = HandoffCodeStore(cache=FakeCache(), ttl_seconds=60)
        app.dependency_overrides[get_handoff_codes] = lambda: store
        app.dependency_overrides[get_handoff_issuer] = lambda: HandoffIssuer(
            mode="code", codes=store
        )
        return store

    async def test_code_redeems_once(self, client, codes, owner, tenant):
        login = await client.post(
            "/api/v1/auth/login", json={"email": owner.email, "password": TEST_PASSWORD}
        )
        handoff_url = login.json()["handoff_url"]
        assert "#code=" in handoff_url
        assert login.json()["access_token"] not in handoff_url
        code = fragment_value(handoff_url, "code")

        first = await client.post("/api/v1/auth/handoff/redeem", json={"code": code})
        second = await client.post("/api/v1/auth/handoff/redeem", json={"code": code})

        assert first.status_code == 200
        assert first.json()["access_token"] == login.json()["access_token"]
        assert first.json()["subdomain"] == "acme"
        assert second.status_code == 401

    async def test_unknown_code(self, client, codes):
        response = await client.post("/api/v1/auth/handoff/redeem", json={"code": "nope"})

        assert response.status_code == 401


class TestMe:
    """Tests for GET /auth/me."""

    async def test_me_lists_all_owned_stores(self, client, owner_headers, owner, tenant, make_tenant):
        await make_tenant(owner, subdomain="sleepy", is_active=False)

        response = await client.get("/api/v1/auth/me", headers=owner_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["user"]["email"] == owner.email
        assert sorted(store["subdomain"] for store in data["stores"]) == ["acme", "sleepy"]

    async def test_same_token_on_every_store(self, client, owner_headers, tenant, make_tenant, owner):
        """Authentication is per user; the store comes from the request."""
        await make_tenant(owner, subdomain="globex")

        for slug in ("acme", "globex"):
            response = await client.get(
                f"http://{slug}.{ROOT}/api/v1/catalog/categories", headers=owner_headers
            )
            assert response.status_code == 200

    async def test_missing_token(self, client):
        response = await client.get("/api/v1/auth/me")

        assert response.status_code == 401
