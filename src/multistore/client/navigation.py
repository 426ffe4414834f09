"""Which store a browser location belongs to.

Uses the same hostname classifier as the server, so the client and the
resolver never disagree about what a host means.
"""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from urllib.parse import urlsplit

from multistore.core.tenancy.hostnames import HostKind, classify, strip_www
from multistore.core.tenancy.slugs import path_slug_candidate


@dataclass(frozen=True)
class StoreLocation:
    """Store addressed by a URL.

    Attributes:
        key: Store slug, or the ``www.``-less host for custom domains,
            which serve exactly one store
        via_path: The slug came from the first path segment
            (``<root>/<slug>/...``), so API calls must name it explicitly
    """

    key: str
    via_path: bool = False


def resolve_location(
    url: str,
    root_domains: Sequence[str],
    reserved: Iterable[str] | None = None,
) -> StoreLocation | None:
    """Work out the store a URL points at.

    The path is only consulted on the platform root and bare dev hosts;
    a subdomain or custom domain already names its store.

    Examples:
        >>> resolve_location("https://acme.shopu.ge/dashboard", ["shopu.ge"])
        StoreLocation(key='acme', via_path=False)
        >>> resolve_location("https://shopu.ge/acme/dashboard", ["shopu.ge"])
        StoreLocation(key='acme', via_path=True)
    """
    parts = urlsplit(url)
    classification = classify(parts.netloc.rsplit("@", 1)[-1], root_domains)

    if classification.slug:
        return StoreLocation(classification.slug)

    if classification.kind in (HostKind.PLATFORM_ROOT, HostKind.LOCAL_DEV):
        slug = path_slug_candidate(parts.path, reserved)
        return StoreLocation(slug, via_path=True) if slug else None

    if classification.host:
        return StoreLocation(strip_www(classification.host))
    return None


def store_key_for_location(url: str, root_domains: Sequence[str]) -> str | None:
    """Credential key for a URL, or None when it addresses no store."""
    location = resolve_location(url, root_domains)
    return location.key if location else None
