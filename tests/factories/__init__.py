"""Test data factories."""

from tests.factories.tenant import TenantCreate, TenantFactory
from tests.factories.user import TEST_PASSWORD, UserCreate, UserFactory


__all__ = [
    "TEST_PASSWORD",
    "TenantCreate",
    "TenantFactory",
    "UserCreate",
    "UserFactory",
]
