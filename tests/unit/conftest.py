"""Fixtures for unit tests running the RBAC services over in-memory storage."""

from uuid import UUID

import pytest

from inkwell.core.permissions.checker import PermissionChecker
from inkwell.core.permissions.registry import PermissionRegistry
from inkwell.core.permissions.resolver import RoleResolver
from inkwell.core.permissions.roles import RoleStore
from tests.factories.rbac import InMemoryRBACRepository


@pytest.fixture
def repo() -> InMemoryRBACRepository:
    return InMemoryRBACRepository()


@pytest.fixture
def registry(repo: InMemoryRBACRepository) -> PermissionRegistry:
    return PermissionRegistry(repo)


@pytest.fixture
def store(repo: InMemoryRBACRepository) -> RoleStore:
    return RoleStore(repo)


@pytest.fixture
def resolver(repo: InMemoryRBACRepository) -> RoleResolver:
    return RoleResolver(repo)


@pytest.fixture
def checker(repo: InMemoryRBACRepository, resolver: RoleResolver) -> PermissionChecker:
    return PermissionChecker(repo, resolver)


@pytest.fixture
async def seeded(registry: PermissionRegistry, store: RoleStore) -> None:
    """Built-in permissions and system roles."""
    await registry.seed_built_ins()
    await store.seed_system_roles()


@pytest.fixture
def tenant_id(repo: InMemoryRBACRepository) -> UUID:
    return repo.add_tenant()
