"""Persistence contract consumed by the RBAC core.

The registry, role store, resolver and checker only talk to storage
through this protocol. ``inkwell.modules.rbac.repos`` provides the
SQLAlchemy implementation.
"""

from contextlib import AbstractAsyncContextManager
from typing import Protocol
from uuid import UUID

from inkwell.core.permissions.schemas import (
    PermissionDefinition,
    RoleDefinition,
    TenantInfo,
)


class RBACRepository(Protocol):
    """Storage operations for permissions, roles and tenant status.

    Fetch methods return ``None`` when the entity does not exist.
    """

    async def fetch_permission(self, code: str) -> PermissionDefinition | None: ...

    async def list_permissions(self) -> list[PermissionDefinition]: ...

    async def save_permission(
        self, permission: PermissionDefinition
    ) -> PermissionDefinition: ...

    async def remove_permission(self, code: str) -> None: ...

    async def fetch_role(self, role_id: UUID) -> RoleDefinition | None: ...

    async def fetch_role_by_name(
        self, name: str, tenant_id: UUID | None
    ) -> RoleDefinition | None: ...

    async def fetch_roles_by_tenant(self, tenant_id: UUID | None) -> list[RoleDefinition]:
        """Roles of a tenant, or the system roles when ``tenant_id`` is None."""
        ...

    async def list_roles(self) -> list[RoleDefinition]: ...

    async def fetch_dependent_roles(self, role_id: UUID) -> list[RoleDefinition]:
        """Roles listing ``role_id`` in their ``inherits_from``."""
        ...

    async def fetch_roles_granting(self, code: str) -> list[RoleDefinition]: ...

    async def save_role(self, role: RoleDefinition) -> RoleDefinition: ...

    async def remove_role(self, role_id: UUID) -> None: ...

    async def fetch_tenant(self, tenant_id: UUID) -> TenantInfo | None: ...

    def scope_lock(self, scope: str) -> AbstractAsyncContextManager[None]:
        """Serialize role and permission writes within one scope."""
        ...
