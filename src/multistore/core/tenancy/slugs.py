"""Store slug policy.

A slug is used both as a DNS label (``<slug>.<root>``) and as the first
path segment of path-addressed dashboards (``<root>/<slug>/...``), so it
must be a valid lowercase label and must never collide with a reserved
top-level route such as ``login`` or ``admin``.
"""

import re
from collections.abc import Iterable

from multistore.config import settings
from multistore.core.constants import MAX_SLUG_LENGTH, MIN_SLUG_LENGTH
from multistore.core.errors import InvalidSlugError


SLUG_PATTERN = re.compile(r"^[a-z0-9](?:[a-z0-9-]*[a-z0-9])?$")


def normalize_slug(slug: str) -> str:
    """Lowercase and trim a slug."""
    return slug.strip().lower()


def is_reserved(slug: str, reserved: Iterable[str] | None = None) -> bool:
    """Check whether a slug shadows a reserved top-level route."""
    words = settings.reserved_slugs if reserved is None else reserved
    return normalize_slug(slug) in set(words)


def validate_slug(slug: str, reserved: Iterable[str] | None = None) -> str:
    """Validate a store slug against the naming policy.

    Args:
        slug: Requested slug
        reserved: Reserved words (defaults to ``settings.reserved_slugs``)

    Returns:
        The normalized slug

    Raises:
        InvalidSlugError: If the slug is malformed or reserved
    """
    value = normalize_slug(slug)

    if not MIN_SLUG_LENGTH <= len(value) <= MAX_SLUG_LENGTH:
        raise InvalidSlugError(
            f"Subdomain must be between {MIN_SLUG_LENGTH} and {MAX_SLUG_LENGTH} characters",
            errors=[{"field": "subdomain", "message": "invalid length"}],
        )

    if not SLUG_PATTERN.match(value):
        raise InvalidSlugError(
            "Subdomain may only contain lowercase letters, digits and inner hyphens",
            errors=[{"field": "subdomain", "message": "invalid characters"}],
        )

    if "--" in value:
        raise InvalidSlugError(
            "Subdomain may not contain consecutive hyphens",
            errors=[{"field": "subdomain", "message": "invalid characters"}],
        )

    if is_reserved(value, reserved):
        raise InvalidSlugError(
            "This subdomain is reserved",
            error_code="subdomain_reserved",
            errors=[{"field": "subdomain", "message": "reserved"}],
        )

    return value


def path_slug_candidate(path: str, reserved: Iterable[str] | None = None) -> str | None:
    """Extract the first path segment as a store slug candidate.

    Reserved segments (``api``, ``login``, ...) are never candidates.

    Examples:
        >>> path_slug_candidate("/acme/dashboard")
        'acme'
        >>> path_slug_candidate("/api/v1/tenants") is None
        True
    """
    segment = path.lstrip("/").split("/", 1)[0]
    value = normalize_slug(segment)
    if not value or is_reserved(value, reserved) or not SLUG_PATTERN.match(value):
        return None
    return value
