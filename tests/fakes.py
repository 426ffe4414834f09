"""Test doubles shared across test modules."""

from typing import Any

from multistore.modules.domains.lookup import DnsLookupError


class FakeDns:
    """In-memory ``DnsLookup``.

    Names without a published record fail the way an NXDOMAIN does.
    """

    def __init__(self) -> None:
        self.txt: dict[str, list[str]] = {}
        self.cname: dict[str, str] = {}
        self.queries: list[tuple[str, str]] = []
        self.fail = False

    async def txt_records(self, name: str) -> list[str]:
        self.queries.append(("TXT", name))
        if self.fail or name not in self.txt:
            raise DnsLookupError(f"TXT lookup for {name} failed")
        return self.txt[name]

    async def cname_target(self, name: str) -> str | None:
        self.queries.append(("CNAME", name))
        if self.fail or name not in self.cname:
            raise DnsLookupError(f"CNAME lookup for {name} failed")
        return self.cname[name]


class FakeCache:
    """Dict-backed stand-in for RedisCache."""

    def __init__(self) -> None:
        self.data: dict[str, dict[str, Any]] = {}
        self.ttls: dict[str, int | None] = {}

    async def set_json(
        self, key: str, value: dict[str, Any], ttl_seconds: int | None = None
    ) -> None:
        self.data[key] = value
        self.ttls[key] = ttl_seconds

    async def get_json_and_delete(self, key: str) -> dict[str, Any] | None:
        return self.data.pop(key, None)
