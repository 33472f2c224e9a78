"""Dependency wiring for the RBAC services.

The core services only know the ``RBACRepository`` protocol; these
factories bind them to the request's SQLAlchemy repository.
"""

from typing import Annotated

from fastapi import Depends

from inkwell.core.permissions.checker import PermissionChecker
from inkwell.core.permissions.registry import PermissionRegistry
from inkwell.core.permissions.resolver import RoleResolver
from inkwell.core.permissions.roles import RoleStore
from inkwell.modules.rbac.repos import RBACRepo


def get_registry(repo: RBACRepo) -> PermissionRegistry:
    return PermissionRegistry(repo)


def get_role_store(repo: RBACRepo) -> RoleStore:
    return RoleStore(repo)


def get_resolver(repo: RBACRepo) -> RoleResolver:
    return RoleResolver(repo)


def get_checker(
    repo: RBACRepo,
    resolver: Annotated[RoleResolver, Depends(get_resolver)],
) -> PermissionChecker:
    return PermissionChecker(repo, resolver)


# Type aliases for dependency injection
Registry = Annotated[PermissionRegistry, Depends(get_registry)]
Roles = Annotated[RoleStore, Depends(get_role_store)]
Resolver = Annotated[RoleResolver, Depends(get_resolver)]
Checker = Annotated[PermissionChecker, Depends(get_checker)]
