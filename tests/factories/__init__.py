"""Test factories for generating test data."""

from tests.factories.rbac import InMemoryRBACRepository, PermissionFactory, grant
from tests.factories.tenant import TenantCreateFactory
from tests.factories.user import UserCreateFactory, identity_headers


__all__ = [
    "InMemoryRBACRepository",
    "PermissionFactory",
    "TenantCreateFactory",
    "UserCreateFactory",
    "grant",
    "identity_headers",
]
