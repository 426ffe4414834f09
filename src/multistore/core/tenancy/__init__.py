"""Tenant resolution and request scoping.

Dependencies that touch the database live in
``multistore.core.tenancy.dependencies`` and are imported from there.
"""

from multistore.core.tenancy.context import (
    ResolutionMethod,
    ResolutionStatus,
    TenantContext,
    TenantResolution,
)
from multistore.core.tenancy.hostnames import HostClassification, HostKind, classify


__all__ = [
    "HostClassification",
    "HostKind",
    "ResolutionMethod",
    "ResolutionStatus",
    "TenantContext",
    "TenantResolution",
    "classify",
]
