"""Custom domain verification over HTTP."""

from datetime import UTC, datetime, timedelta

import pytest
from sqlalchemy import select

from multistore.config import settings
from multistore.core.auth import create_access_token
from multistore.core.jobs.tasks.domains import sweep_domain_challenges
from multistore.modules.domains.models import ChallengeStatus, DomainChallenge
from multistore.modules.domains.services import get_dns_lookup
from tests.fakes import FakeDns


pytestmark = pytest.mark.integration

ROOT = settings.platform_root_domain
ACME = f"http://acme.{ROOT}/api/v1"


@pytest.fixture
def dns(app) -> FakeDns:
    fake = FakeDns()
    app.dependency_overrides[get_dns_lookup] = lambda: fake
    return fake


async def challenge(client, headers, domain="shop.example.com", **extra):
    response = await client.post(
        f"{ACME}/domains/challenge", json={"domain": domain, **extra}, headers=headers
    )
    assert response.status_code == 201, response.text
    return response.json()


class TestVerificationFlow:
    async def test_challenge_verify_and_serve(self, client, dns, tenant, owner_headers):
        issued = await challenge(client, owner_headers, "https://Shop.Example.com/")
        assert issued["domain"] == "shop.example.com"
        assert issued["record_name"] == "_shopu-verify.shop.example.com"
        assert issued["record_type"] == "TXT"

        pending = await client.post(
            f"{ACME}/domains/verify", json={"domain": "shop.example.com"}, headers=owner_headers
        )
        assert pending.status_code == 409
        assert pending.json()["record_name"] == issued["record_name"]

        dns.txt[issued["record_name"]] = [issued["record_value"]]
        verified = await client.post(
            f"{ACME}/domains/verify", json={"domain": "shop.example.com"}, headers=owner_headers
        )
        assert verified.status_code == 200
        assert verified.json() == {"custom_domain": "shop.example.com", "status": "verified"}

        served = await client.get("http://www.shop.example.com/api/v1/tenants/current")
        assert served.status_code == 200
        assert served.json()["tenant"]["id"] == str(tenant.id)
        assert served.json()["base_url"] == "https://shop.example.com"

    async def test_cname_method(self, client, dns, tenant, owner_headers):
        issued = await challenge(client, owner_headers, method="CNAME")
        dns.cname[issued["record_name"]] = issued["record_value"]

        response = await client.post(
            f"{ACME}/domains/verify", json={"domain": "shop.example.com"}, headers=owner_headers
        )

        assert response.status_code == 200

    async def test_remove(self, client, dns, make_tenant, owner, owner_headers):
        await make_tenant(owner, subdomain="acme", custom_domain="shop.example.com")

        response = await client.delete(f"{ACME}/domains", headers=owner_headers)

        assert response.status_code == 200
        assert response.json() == {"custom_domain": None, "status": "removed"}
        gone = await client.get("http://shop.example.com/api/v1/tenants/current")
        assert gone.status_code == 404


class TestRejections:
    @pytest.mark.parametrize(
        "domain",
        ["globex.shopu.ge", "shopu.ge", "localhost", "10.0.0.1", "shop", "bad_domain.com"],
    )
    async def test_invalid_domain(self, client, dns, tenant, owner_headers, domain):
        response = await client.post(
            f"{ACME}/domains/challenge", json={"domain": domain}, headers=owner_headers
        )

        assert response.status_code == 422

    async def test_domain_of_other_store(self, client, dns, tenant, make_tenant, owner, owner_headers):
        await make_tenant(owner, subdomain="globex", custom_domain="www.shop.example.com")

        response = await client.post(
            f"{ACME}/domains/challenge", json={"domain": "shop.example.com"}, headers=owner_headers
        )

        assert response.status_code == 409

    async def test_domain_taken_before_verify(
        self, client, dns, tenant, make_tenant, owner, owner_headers
    ):
        """The loser of a race gets a conflict and keeps no domain."""
        issued = await challenge(client, owner_headers)
        dns.txt[issued["record_name"]] = [issued["record_value"]]
        await make_tenant(owner, subdomain="globex", custom_domain="shop.example.com")

        response = await client.post(
            f"{ACME}/domains/verify", json={"domain": "shop.example.com"}, headers=owner_headers
        )

        assert response.status_code == 409
        assert response.json()["type"].endswith("/domain_conflict")

    async def test_verify_without_challenge(self, client, dns, tenant, owner_headers):
        response = await client.post(
            f"{ACME}/domains/verify", json={"domain": "shop.example.com"}, headers=owner_headers
        )

        assert response.status_code == 404

    async def test_non_owner(self, client, dns, tenant, make_user):
        stranger = await make_user(email="stranger@example.com")

        response = await client.post(
            f"{ACME}/domains/challenge",
            json={"domain": "shop.example.com"},
            headers={"Authorization": f"Bearer {create_access_token(stranger.id)}"},
        )

        assert response.status_code == 403


class TestExpiry:
    """A lapsed challenge reports expiry until a new one is requested."""

    async def verify(self, client, headers):
        return await client.post(
            f"{ACME}/domains/verify", json={"domain": "shop.example.com"}, headers=headers
        )

    async def lapse(self, db) -> DomainChallenge:
        stored = (await db.execute(select(DomainChallenge))).scalar_one()
        stored.expires_at = datetime.now(UTC) - timedelta(minutes=1)
        await db.commit()
        return stored

    async def test_recorded_expiry_is_gone(self, client, db, dns, tenant, owner_headers):
        issued = await challenge(client, owner_headers)
        stored = await self.lapse(db)
        stored.status = ChallengeStatus.EXPIRED
        await db.commit()
        dns.txt[issued["record_name"]] = [issued["record_value"]]

        response = await self.verify(client, owner_headers)

        assert response.status_code == 410
        assert response.json()["type"].endswith("/verification_expired")
        assert response.json()["domain"] == "shop.example.com"

    async def test_sweep_then_verify(
        self, client, db, dns, session_factory, tenant, owner_headers
    ):
        await challenge(client, owner_headers)
        await self.lapse(db)

        counts = await sweep_domain_challenges({"db_session_factory": session_factory, "dns": dns})
        db.expire_all()

        assert counts["expired"] == 1
        first = await self.verify(client, owner_headers)
        again = await self.verify(client, owner_headers)
        assert first.status_code == again.status_code == 410

    async def test_reissue_after_expiry(self, client, db, dns, tenant, owner_headers):
        await challenge(client, owner_headers)
        stored = await self.lapse(db)
        stored.status = ChallengeStatus.EXPIRED
        await db.commit()

        issued = await challenge(client, owner_headers)
        dns.txt[issued["record_name"]] = [issued["record_value"]]

        response = await self.verify(client, owner_headers)

        assert response.status_code == 200
        assert response.json()["status"] == "verified"
