"""Cross-domain session handoff, receiving side.

On page load the dashboard looks for ``#token=`` (or ``#code=``) in the
URL fragment, stores the token for the store being shown and removes the
fragment from the address bar with a history replacement, never a
navigation.
"""

from collections.abc import Awaitable, Callable
from typing import Protocol
from urllib.parse import parse_qs, urlsplit, urlunsplit

import structlog

from multistore.client.credentials import CredentialStore
from multistore.client.navigation import store_key_for_location
from multistore.core.auth.handoff import CODE_PARAM, TOKEN_PARAM


logger = structlog.get_logger()

Redeemer = Callable[[str], Awaitable[str]]


class History(Protocol):
    """The part of the browser history API the receiver needs."""

    def replace_state(self, url: str) -> None: ...


class HandoffError(Exception):
    """A handoff fragment could not be turned into a stored session."""


class HandoffReceiver:
    """Consumes handoff fragments.

    Args:
        credentials: Store the token is written to
        history: Used to rewrite the visible URL
        redeem: Exchanges a one-time code for a token (code mode only)
    """

    def __init__(
        self,
        credentials: CredentialStore,
        history: History,
        redeem: Redeemer | None = None,
    ) -> None:
        self.credentials = credentials
        self.history = history
        self.redeem = redeem

    async def consume(self, url: str) -> str:
        """Process a landing URL.

        The fragment is stripped before the token is stored, so it is
        gone from the address bar even when code redemption fails.

        Returns:
            The URL without its fragment, or ``url`` unchanged when it
            carries no handoff

        Raises:
            HandoffError: If the URL names no store, or a code arrives
                without a way to redeem it
        """
        parts = urlsplit(url)
        params = parse_qs(parts.fragment)
        token = params.get(TOKEN_PARAM, [None])[0]
        code = params.get(CODE_PARAM, [None])[0]
        if not token and not code:
            return url

        clean_url = urlunsplit(parts._replace(fragment=""))
        self.history.replace_state(clean_url)

        key = store_key_for_location(clean_url, self.credentials.root_domains)
        if key is None:
            raise HandoffError("Handoff URL does not address a store")

        if not token:
            if self.redeem is None:
                raise HandoffError("Handoff code received but no redeemer configured")
            token = await self.redeem(code)

        self.credentials.set(key, token)
        logger.info("handoff_consumed", store=key, mode=TOKEN_PARAM if code is None else CODE_PARAM)
        return clean_url
