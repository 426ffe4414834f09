"""Store-aware HTTP client for the dashboard."""

from typing import Any

import httpx

from multistore.client.credentials import CredentialStore
from multistore.client.navigation import resolve_location
from multistore.config import settings


class StoreApiClient:
    """Calls the API on behalf of the store currently shown.

    Every request re-derives the bearer token from ``location`` and, for
    path-addressed dashboards, names the store in the slug header since
    the API host alone does not identify it.
    """

    def __init__(
        self,
        http: httpx.AsyncClient,
        credentials: CredentialStore,
        location: str,
    ) -> None:
        self.http = http
        self.credentials = credentials
        self.location = location

    def navigate(self, location: str) -> None:
        """Switch to another page, and possibly another store."""
        self.location = location

    def headers(self) -> dict[str, str]:
        """Auth and store headers for the current location."""
        headers: dict[str, str] = {}
        store = resolve_location(self.location, self.credentials.root_domains)
        if store is None:
            return headers
        token = self.credentials.get(store.key)
        if token:
            headers["Authorization"] = f"Bearer {token}"
        if store.via_path:
            headers[settings.tenant_slug_header] = store.key
        return headers

    async def request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        headers = {**self.headers(), **kwargs.pop("headers", {})}
        return await self.http.request(method, url, headers=headers, **kwargs)

    async def get(self, url: str, **kwargs: Any) -> httpx.Response:
        return await self.request("GET", url, **kwargs)

    async def post(self, url: str, **kwargs: Any) -> httpx.Response:
        return await self.request("POST", url, **kwargs)

    async def redeem_handoff_code(self, code: str) -> str:
        """Exchange a one-time handoff code for an access token.

        Raises:
            httpx.HTTPStatusError: If the code is unknown, used, or expired
        """
        response = await self.http.post("/api/v1/auth/handoff/redeem", json={"code": code})
        response.raise_for_status()
        return response.json()["access_token"]
