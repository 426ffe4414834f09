"""Unit tests for the receiving side of the session handoff."""

from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest

from multistore.client.credentials import CredentialStore
from multistore.client.handoff import HandoffError, HandoffReceiver
from multistore.config import Settings
from multistore.core.auth.handoff import TOKEN_PARAM, build_handoff_url


ROOTS = ["shopu.ge"]


class FakeHistory:
    """Records history replacements."""

    def __init__(self):
        self.replaced: list[str] = []

    def replace_state(self, url: str) -> None:
        self.replaced.append(url)


@pytest.fixture
def credentials() -> CredentialStore:
    return CredentialStore({}, ROOTS)


@pytest.fixture
def history() -> FakeHistory:
    return FakeHistory()


class TestHandoffReceiver:
    """Tests for HandoffReceiver.consume."""

    async def test_round_trip_with_issuing_side(self, credentials, history):
        """A handoff URL lands the token in the store's slot and leaves no fragment."""
        token = "eyJhbGciOi.eyJzdWIiOi.sig+/="
        tenant = SimpleNamespace(subdomain="acme", custom_domain=None)
        url = build_handoff_url(
            tenant, TOKEN_PARAM, token, Settings(platform_root_domain="shopu.ge")
        )

        clean = await HandoffReceiver(credentials, history).consume(url)

        assert credentials.get("acme") == token
        assert clean == "https://acme.shopu.ge/dashboard"
        assert "#token=" not in clean
        assert history.replaced == [clean]

    async def test_path_addressed_dashboard(self, credentials, history):
        """Path-addressed stores key the token by the path slug."""
        clean = await HandoffReceiver(credentials, history).consume(
            "https://shopu.ge/acme/dashboard?tab=orders#token=abc"
        )

        assert clean == "https://shopu.ge/acme/dashboard?tab=orders"
        assert credentials.get("acme") == "abc"

    async def test_url_without_handoff_is_untouched(self, credentials, history):
        """Ordinary page loads do nothing."""
        url = "https://acme.shopu.ge/dashboard#section-2"

        assert await HandoffReceiver(credentials, history).consume(url) == url
        assert history.replaced == []
        assert credentials.slugs() == []

    async def test_code_is_redeemed(self, credentials, history):
        """In code mode the receiver exchanges the code for a token."""
        redeem = AsyncMock(return_value="jwt-token")

        clean = await HandoffReceiver(credentials, history, redeem=redeem).consume(
            "https://acme.shopu.ge/dashboard#code=one-time"
        )

        redeem.assert_awaited_once_with("one-time")
        assert credentials.get("acme") == "jwt-token"
        assert history.replaced == [clean]

    async def test_code_without_redeemer(self, credentials, history):
        """A code cannot be used without a redeemer, but is still stripped."""
        with pytest.raises(HandoffError):
            await HandoffReceiver(credentials, history).consume(
                "https://acme.shopu.ge/dashboard#code=one-time"
            )

        assert history.replaced == ["https://acme.shopu.ge/dashboard"]

    async def test_url_without_store(self, credentials, history):
        """A handoff to the bare platform has no slot to land in."""
        with pytest.raises(HandoffError):
            await HandoffReceiver(credentials, history).consume("https://shopu.ge/#token=abc")

        assert credentials.slugs() == []
        assert history.replaced == ["https://shopu.ge/"]
