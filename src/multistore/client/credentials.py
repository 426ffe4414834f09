"""Per-store session tokens on the client.

A browser can hold sessions for several stores at once (one tab per
dashboard), so tokens are keyed by store instead of living in a single
"current token" slot. The active token is always looked up from the
location being shown.
"""

import json
from collections.abc import MutableMapping, Sequence
from datetime import UTC, datetime
from typing import Any

import structlog

from multistore.client.navigation import store_key_for_location
from multistore.config import settings


logger = structlog.get_logger()

KEY_PREFIX = "token:"


class CredentialStore:
    """Session tokens keyed by store slug.

    Backed by any string mapping, typically the ``localStorage``
    equivalent of the client. Entries are JSON ``{token, issued_at}``.
    """

    def __init__(
        self,
        storage: MutableMapping[str, str] | None = None,
        root_domains: Sequence[str] | None = None,
    ) -> None:
        self.storage: MutableMapping[str, str] = {} if storage is None else storage
        self.root_domains = (
            list(root_domains) if root_domains is not None else settings.platform_domains
        )

    @staticmethod
    def _key(slug: str) -> str:
        return f"{KEY_PREFIX}{slug.strip().lower()}"

    def entry(self, slug: str) -> dict[str, Any] | None:
        """Stored entry for a store, or None if absent or unreadable."""
        raw = self.storage.get(self._key(slug))
        if raw is None:
            return None
        try:
            entry = json.loads(raw)
        except ValueError:
            logger.warning("credential_entry_unreadable", slug=slug)
            return None
        if not isinstance(entry, dict) or not isinstance(entry.get("token"), str):
            return None
        return entry

    def get(self, slug: str) -> str | None:
        """Token for a store."""
        entry = self.entry(slug)
        return entry["token"] if entry else None

    def set(self, slug: str, token: str, issued_at: datetime | None = None) -> None:
        """Store a token for a store, replacing any previous one."""
        issued_at = issued_at or datetime.now(UTC)
        self.storage[self._key(slug)] = json.dumps(
            {"token": token, "issued_at": issued_at.isoformat()}
        )

    def clear(self, slug: str) -> None:
        """Forget the token of one store. Other stores keep theirs."""
        self.storage.pop(self._key(slug), None)

    def slugs(self) -> list[str]:
        """Stores that currently hold a token."""
        return sorted(
            key[len(KEY_PREFIX) :] for key in self.storage if key.startswith(KEY_PREFIX)
        )

    def token_for_location(self, url: str) -> str | None:
        """Token of the store a URL points at."""
        key = store_key_for_location(url, self.root_domains)
        return self.get(key) if key else None
