"""DNS lookups for domain verification.

Every resolver failure (NXDOMAIN, empty answer, timeout, unreachable or
missing nameservers) surfaces as ``DnsLookupError``. Callers treat it as
"not visible yet", since freshly published records take time to
propagate.
"""

from typing import Protocol

import dns.asyncresolver
import dns.exception

from multistore.config import settings


class DnsLookupError(Exception):
    """The record could not be read."""


class DnsLookup(Protocol):
    """Record reads the verification service needs."""

    async def txt_records(self, name: str) -> list[str]: ...

    async def cname_target(self, name: str) -> str | None: ...


class DnsResolver:
    """``DnsLookup`` backed by dnspython's async resolver."""

    def __init__(
        self,
        timeout: float | None = None,
        nameservers: list[str] | None = None,
    ) -> None:
        self.timeout = timeout if timeout is not None else settings.dns_timeout_seconds
        self.nameservers = nameservers if nameservers is not None else settings.dns_nameservers

    def _resolver(self) -> dns.asyncresolver.Resolver:
        resolver = dns.asyncresolver.Resolver(configure=not self.nameservers)
        if self.nameservers:
            resolver.nameservers = list(self.nameservers)
        resolver.lifetime = self.timeout
        return resolver

    async def txt_records(self, name: str) -> list[str]:
        """Read all TXT values at a name.

        Multi-string TXT records are joined into one value.

        Raises:
            DnsLookupError: If the lookup fails
        """
        try:
            answer = await self._resolver().resolve(name, "TXT")
        except dns.exception.DNSException as exc:
            raise DnsLookupError(f"TXT lookup for {name} failed: {exc}") from exc
        return [
            b"".join(record.strings).decode("utf-8", errors="replace")
            for record in answer
        ]

    async def cname_target(self, name: str) -> str | None:
        """Read the CNAME target of a name, lowercase and without trailing dot.

        Raises:
            DnsLookupError: If the lookup fails
        """
        try:
            answer = await self._resolver().resolve(name, "CNAME")
        except dns.exception.DNSException as exc:
            raise DnsLookupError(f"CNAME lookup for {name} failed: {exc}") from exc
        for record in answer:
            return record.target.to_text().rstrip(".").lower()
        return None
