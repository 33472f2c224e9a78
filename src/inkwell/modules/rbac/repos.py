"""SQLAlchemy storage for permissions and roles."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Annotated
from uuid import UUID

from fastapi import Depends
from sqlalchemy import Select, select, text
from sqlalchemy.ext.asyncio import AsyncSession

from inkwell.api.dependencies import DBSession
from inkwell.core.permissions.models import Permission, Role, RoleGrant, RoleParent
from inkwell.core.permissions.schemas import (
    PermissionDefinition,
    RoleDefinition,
    TenantInfo,
)


class SQLAlchemyRBACRepository:
    """Repository for permission, role and tenant status lookups.

    Implements the ``RBACRepository`` protocol consumed by the RBAC core.
    Writes only flush; the surrounding request or command commits.
    """

    def __init__(self, session: DBSession) -> None:
        self.session: AsyncSession = session

    # ============================================================
    # Permissions
    # ============================================================

    async def fetch_permission(self, code: str) -> PermissionDefinition | None:
        permission = await self._get_permission(code)
        return PermissionDefinition.model_validate(permission) if permission else None

    async def list_permissions(self) -> list[PermissionDefinition]:
        result = await self.session.execute(select(Permission).order_by(Permission.code))
        return [PermissionDefinition.model_validate(p) for p in result.scalars().all()]

    async def save_permission(self, permission: PermissionDefinition) -> PermissionDefinition:
        """Insert or update a permission by code."""
        row = await self._get_permission(permission.code)
        if row is None:
            row = Permission(code=permission.code)
            self.session.add(row)

        row.display_name = permission.display_name
        row.description = permission.description
        row.resource_type = permission.resource_type.value
        row.category = permission.category
        row.is_system_level = permission.is_system_level
        row.is_built_in = permission.is_built_in
        row.is_active = permission.is_active
        row.parent_permission_id = permission.parent_permission_id
        row.required_permissions = list(permission.required_permissions)
        row.conflicting_permissions = list(permission.conflicting_permissions)
        row.created_by = permission.created_by

        await self.session.flush()
        return PermissionDefinition.model_validate(row)

    async def remove_permission(self, code: str) -> None:
        row = await self._get_permission(code)
        if row is not None:
            await self.session.delete(row)
            await self.session.flush()

    # ============================================================
    # Roles
    # ============================================================

    async def fetch_role(self, role_id: UUID) -> RoleDefinition | None:
        role = await self.session.get(Role, role_id)
        return RoleDefinition.model_validate(role) if role else None

    async def fetch_role_by_name(
        self, name: str, tenant_id: UUID | None
    ) -> RoleDefinition | None:
        stmt = select(Role).where(Role.name == name)
        if tenant_id is None:
            stmt = stmt.where(Role.tenant_id.is_(None))
        else:
            stmt = stmt.where(Role.tenant_id == tenant_id)
        result = await self.session.execute(stmt)
        role = result.scalar_one_or_none()
        return RoleDefinition.model_validate(role) if role else None

    async def fetch_roles_by_tenant(self, tenant_id: UUID | None) -> list[RoleDefinition]:
        stmt = select(Role).order_by(Role.name)
        if tenant_id is None:
            stmt = stmt.where(Role.tenant_id.is_(None))
        else:
            stmt = stmt.where(Role.tenant_id == tenant_id)
        return await self._roles(stmt)

    async def list_roles(self) -> list[RoleDefinition]:
        return await self._roles(select(Role).order_by(Role.tenant_id, Role.name))

    async def fetch_dependent_roles(self, role_id: UUID) -> list[RoleDefinition]:
        stmt = (
            select(Role)
            .join(RoleParent, RoleParent.role_id == Role.id)
            .where(RoleParent.parent_id == role_id)
            .order_by(Role.name)
        )
        return await self._roles(stmt)

    async def fetch_roles_granting(self, code: str) -> list[RoleDefinition]:
        granting = select(RoleGrant.role_id).where(RoleGrant.permission == code)
        stmt = select(Role).where(Role.id.in_(granting)).order_by(Role.name)
        return await self._roles(stmt)

    async def save_role(self, role: RoleDefinition) -> RoleDefinition:
        """Insert or update a role with its grants and parent links.

        Grants are replaced wholesale. Parent links are diffed so that
        kept links stay the same rows.
        """
        row = await self.session.get(Role, role.id)
        if row is None:
            row = Role(id=role.id, type=role.type.value, tenant_id=role.tenant_id)
            self.session.add(row)

        row.name = role.name
        row.display_name = role.display_name
        row.description = role.description
        row.is_active = role.is_active
        row.is_built_in = role.is_built_in
        row.created_by = role.created_by

        row.grants = [
            RoleGrant(
                role_id=role.id,
                position=position,
                permission=grant.permission,
                resource_type=grant.resource_type.value,
                resource_id=grant.resource_id,
                conditions=(
                    grant.conditions.model_dump(exclude_defaults=True)
                    if grant.is_conditional and grant.conditions
                    else None
                ),
            )
            for position, grant in enumerate(role.grants)
        ]

        existing = {link.parent_id: link for link in row.parent_links}
        links: list[RoleParent] = []
        for position, parent_id in enumerate(role.inherits_from):
            link = existing.get(parent_id) or RoleParent(role_id=role.id, parent_id=parent_id)
            link.position = position
            links.append(link)
        row.parent_links = links

        await self.session.flush()
        return RoleDefinition.model_validate(row)

    async def remove_role(self, role_id: UUID) -> None:
        row = await self.session.get(Role, role_id)
        if row is not None:
            await self.session.delete(row)
            await self.session.flush()

    # ============================================================
    # Tenants and locking
    # ============================================================

    async def fetch_tenant(self, tenant_id: UUID) -> TenantInfo | None:
        from inkwell.modules.tenants.models import Tenant  # noqa: PLC0415

        tenant = await self.session.get(Tenant, tenant_id)
        return TenantInfo.model_validate(tenant) if tenant else None

    @asynccontextmanager
    async def scope_lock(self, scope: str) -> AsyncIterator[None]:
        """Serialize writers of one scope until the transaction ends.

        PostgreSQL takes a transaction-scoped advisory lock keyed by the
        scope. SQLite serializes writers on its own.
        """
        if self.session.get_bind().dialect.name == "postgresql":
            await self.session.execute(
                text("SELECT pg_advisory_xact_lock(hashtext(:scope))"),
                {"scope": scope},
            )
        yield

    # ============================================================
    # Helpers
    # ============================================================

    async def _get_permission(self, code: str) -> Permission | None:
        result = await self.session.execute(select(Permission).where(Permission.code == code))
        return result.scalar_one_or_none()

    async def _roles(self, stmt: Select[tuple[Role]]) -> list[RoleDefinition]:
        result = await self.session.execute(stmt)
        return [RoleDefinition.model_validate(role) for role in result.scalars().all()]


# Type alias for dependency injection
RBACRepo = Annotated[SQLAlchemyRBACRepository, Depends(SQLAlchemyRBACRepository)]
