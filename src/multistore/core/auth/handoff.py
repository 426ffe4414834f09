"""Cross-domain session handoff, issuing side.

Login happens on the platform root while the dashboard runs on the store
origin, and the two share no cookie domain. The API therefore returns a
``handoff_url`` that carries the credential in the URL fragment, which
browsers never send to servers:

- token mode: ``<dashboard>#token=<access token>``
- code mode: ``<dashboard>#code=<one-time code>``; the store origin
  redeems the code once via ``POST /api/v1/auth/handoff/redeem``.
"""

import secrets
from typing import TYPE_CHECKING, Annotated, Any, Literal
from urllib.parse import quote

import structlog
from fastapi import Depends

from multistore.config import Settings, settings
from multistore.core.auth.backend import token_preview
from multistore.core.cache import RedisCache
from multistore.core.constants import HANDOFF_CODE_BYTES
from multistore.core.tenancy.urls import dashboard_url


if TYPE_CHECKING:
    from multistore.modules.tenants.models import Tenant


logger = structlog.get_logger()

TOKEN_PARAM = "token"
CODE_PARAM = "code"


def build_handoff_url(
    tenant: "Tenant",
    param: str,
    value: str,
    config: Settings | None = None,
) -> str:
    """Dashboard URL of a store with a credential in the fragment.

    Example:
        build_handoff_url(acme, "token", "a b")
        -> "https://acme.shopu.ge/dashboard#token=a%20b"
    """
    return f"{dashboard_url(tenant, config)}#{param}={quote(value, safe='')}"


class HandoffCodeStore:
    """One-time exchange codes kept in Redis.

    A code maps to the access token and store slug it was issued for and
    is deleted on first read.
    """

    def __init__(self, cache: RedisCache | None = None, ttl_seconds: int | None = None) -> None:
        self.cache = cache or RedisCache(prefix="handoff:")
        self.ttl_seconds = ttl_seconds or settings.handoff_code_ttl_seconds

    async def issue(self, token: str, subdomain: str) -> str:
        """Store a token under a fresh code and return the code."""
        code = secrets.token_urlsafe(HANDOFF_CODE_BYTES)
        await self.cache.set_json(
            code,
            {"token": token, "subdomain": subdomain},
            ttl_seconds=self.ttl_seconds,
        )
        logger.info(
            "handoff_code_issued",
            subdomain=subdomain,
            code=token_preview(code),
            ttl_seconds=self.ttl_seconds,
        )
        return code

    async def redeem(self, code: str) -> dict[str, Any] | None:
        """Release the token behind a code, at most once.

        Returns:
            ``{"token", "subdomain"}`` or None if unknown, used, or expired
        """
        payload = await self.cache.get_json_and_delete(code)
        if payload is None:
            logger.warning("handoff_code_rejected", code=token_preview(code))
            return None
        logger.info("handoff_code_redeemed", subdomain=payload.get("subdomain"))
        return payload


class HandoffIssuer:
    """Builds handoff URLs in the configured mode."""

    def __init__(
        self,
        mode: Literal["token", "code"] | None = None,
        codes: HandoffCodeStore | None = None,
        config: Settings | None = None,
    ) -> None:
        self.config = config or settings
        self.mode = mode or self.config.handoff_mode
        self.codes = codes

    async def handoff_url(self, tenant: "Tenant", token: str) -> str:
        """Handoff URL that lands the session on a store's dashboard."""
        if self.mode == "code":
            codes = self.codes or HandoffCodeStore()
            code = await codes.issue(token, tenant.subdomain)
            return build_handoff_url(tenant, CODE_PARAM, code, self.config)
        return build_handoff_url(tenant, TOKEN_PARAM, token, self.config)


def get_handoff_codes() -> HandoffCodeStore:
    """Code store used by request handlers."""
    return HandoffCodeStore()


def get_handoff_issuer() -> HandoffIssuer:
    """Issuer in the configured mode, used by request handlers."""
    return HandoffIssuer()


HandoffCodes = Annotated[HandoffCodeStore, Depends(get_handoff_codes)]
Issuer = Annotated[HandoffIssuer, Depends(get_handoff_issuer)]
