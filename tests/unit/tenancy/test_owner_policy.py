"""Unit tests for the store owner policy."""

from types import SimpleNamespace
from typing import get_args, get_type_hints
from uuid import uuid4

import pytest

from multistore.core.errors import ForbiddenError
from multistore.core.tenancy.context import ResolutionMethod, TenantContext
from multistore.core.tenancy.dependencies import TenantOwner, get_tenant_owner
from multistore.modules.users.models import User


def _context(owner_id) -> TenantContext:
    tenant = SimpleNamespace(id=uuid4(), subdomain="acme", owner_id=owner_id)
    return TenantContext(tenant=tenant, method=ResolutionMethod.SUBDOMAIN)


def _user(is_platform_admin: bool = False) -> SimpleNamespace:
    return SimpleNamespace(id=uuid4(), is_platform_admin=is_platform_admin)


async def test_owner_passes():
    user = _user()

    assert await get_tenant_owner(_context(user.id), user) is user


async def test_admin_passes_for_any_store():
    admin = _user(is_platform_admin=True)

    assert await get_tenant_owner(_context(uuid4()), admin) is admin


async def test_stranger_is_refused():
    with pytest.raises(ForbiddenError) as exc_info:
        await get_tenant_owner(_context(uuid4()), _user())

    assert exc_info.value.error_code == "not_store_owner"


def test_policy_yields_a_user():
    assert get_type_hints(get_tenant_owner)["return"] is User
    assert get_args(TenantOwner)[0] is User
