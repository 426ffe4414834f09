"""Hostname classification.

The single place that decides what kind of address a hostname is:
the platform root, a ``<slug>.<root>`` store subdomain, a local
development host, or anything else (a candidate custom domain).
Both the server-side resolver and the client-side credential lookup
go through ``classify``.
"""

import ipaddress
from collections.abc import Sequence
from dataclasses import dataclass
from enum import StrEnum


LOCALHOST = "localhost"
WWW_PREFIX = "www."


class HostKind(StrEnum):
    """Addressing scheme a hostname belongs to."""

    LOCAL_DEV = "local_dev"
    PLATFORM_ROOT = "platform_root"
    PLATFORM_SUBDOMAIN = "platform_subdomain"
    CANDIDATE_CUSTOM_DOMAIN = "candidate_custom_domain"


@dataclass(frozen=True)
class HostClassification:
    """Result of classifying a hostname.

    Attributes:
        kind: Addressing scheme
        host: Normalized hostname (lowercase, no port, no trailing dot)
        slug: Candidate store slug for subdomain and ``*.localhost`` hosts
    """

    kind: HostKind
    host: str
    slug: str | None = None


def _strip_port(host: str) -> str:
    """Remove a port suffix, keeping bracketed or bare IPv6 literals intact."""
    if host.startswith("["):
        end = host.find("]")
        return host[1:end] if end != -1 else host[1:]
    if host.count(":") == 1:
        return host.split(":", 1)[0]
    return host


def normalize_host(raw: str | None) -> str:
    """Normalize a Host header value for matching.

    Strips whitespace, the port and a trailing dot, and lowercases.
    Never raises; garbage in yields a (possibly empty) string out.

    Examples:
        >>> normalize_host("Shop.Example.COM:8443")
        'shop.example.com'
        >>> normalize_host("[::1]:3000")
        '::1'
    """
    if not raw:
        return ""
    host = _strip_port(raw.strip().lower())
    return host.rstrip(".")


def strip_www(host: str) -> str:
    """Remove a single leading ``www.`` label."""
    return host[len(WWW_PREFIX) :] if host.startswith(WWW_PREFIX) else host


def is_ip_literal(host: str) -> bool:
    """Check whether a normalized host is an IPv4 or IPv6 address."""
    try:
        ipaddress.ip_address(host)
    except ValueError:
        return False
    return True


def _single_label(prefix: str) -> str | None:
    """Return the prefix if it is exactly one non-empty DNS label."""
    if prefix and "." not in prefix:
        return prefix
    return None


def classify(hostname: str | None, root_domains: Sequence[str]) -> HostClassification:
    """Classify a hostname against the platform root domains.

    Args:
        hostname: Raw hostname, optionally with a port
        root_domains: Platform root domains, lowercase

    Returns:
        The classification. Unknown, empty, or malformed input falls into
        ``CANDIDATE_CUSTOM_DOMAIN`` with no slug, so the directory lookup
        simply misses.
    """
    host = normalize_host(hostname)

    if not host:
        return HostClassification(HostKind.CANDIDATE_CUSTOM_DOMAIN, host)

    if host == LOCALHOST or is_ip_literal(host):
        return HostClassification(HostKind.LOCAL_DEV, host)

    if host.endswith(f".{LOCALHOST}"):
        prefix = host[: -len(LOCALHOST) - 1]
        return HostClassification(HostKind.LOCAL_DEV, host, _single_label(prefix))

    for root in root_domains:
        if host in (root, f"{WWW_PREFIX}{root}"):
            return HostClassification(HostKind.PLATFORM_ROOT, host)
        if host.endswith(f".{root}"):
            slug = _single_label(host[: -len(root) - 1])
            if slug:
                return HostClassification(HostKind.PLATFORM_SUBDOMAIN, host, slug)

    return HostClassification(HostKind.CANDIDATE_CUSTOM_DOMAIN, host)


def is_platform_host(host: str, root_domains: Sequence[str]) -> bool:
    """Check whether a host is a platform root or lives under one."""
    host = normalize_host(host)
    return any(host == root or host.endswith(f".{root}") for root in root_domains)
