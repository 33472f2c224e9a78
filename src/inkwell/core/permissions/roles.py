"""Role store.

Creates, updates and deletes roles while enforcing the role invariants:
type/tenant pairing, per-scope name uniqueness, known permissions and
parents, and an acyclic inheritance graph. Every check runs before
anything is persisted, inside the scope lock of the role.
"""

from typing import Any
from uuid import UUID

import structlog
from pydantic import ValidationError as PydanticValidationError

from inkwell.core.errors import ConflictError, NotFoundError, ValidationError
from inkwell.core.permissions.catalog import build_system_roles, build_tenant_roles
from inkwell.core.permissions.enums import RoleType
from inkwell.core.permissions.graph import find_cycle
from inkwell.core.permissions.repository import RBACRepository
from inkwell.core.permissions.schemas import PermissionGrant, RoleDefinition


logger = structlog.get_logger()

UPDATABLE_FIELDS = frozenset(
    {"name", "display_name", "description", "grants", "inherits_from", "is_active"}
)


class RoleStore:
    """Service for managing role definitions."""

    def __init__(self, repo: RBACRepository) -> None:
        self.repo = repo

    async def get_role(self, role_id: UUID) -> RoleDefinition:
        """Get a role by id.

        Raises:
            NotFoundError: If the role does not exist
        """
        role = await self.repo.fetch_role(role_id)
        if role is None:
            raise NotFoundError("Role not found", resource="role", resource_id=role_id)
        return role

    async def list_roles(self, tenant_id: UUID | None = None) -> list[RoleDefinition]:
        """Roles of a tenant, or the system roles when no tenant is given."""
        roles = await self.repo.fetch_roles_by_tenant(tenant_id)
        return sorted(roles, key=lambda r: r.name)

    async def create_role(
        self,
        name: str,
        role_type: RoleType,
        *,
        display_name: str | None = None,
        description: str | None = None,
        tenant_id: UUID | None = None,
        grants: list[PermissionGrant] | None = None,
        inherits_from: list[UUID] | None = None,
        is_built_in: bool = False,
        created_by: str = "system",
        role_id: UUID | None = None,
    ) -> RoleDefinition:
        """Create a role.

        Args:
            name: Role name, unique within its scope
            role_type: System, tenant or custom
            display_name: Human label, defaults to the name
            description: Optional description
            tenant_id: Owning tenant, required unless the role is a system role
            grants: Permission grants held directly by the role
            inherits_from: Ordered parent role ids
            is_built_in: Whether the role is protected from deletion
            created_by: Who created the role
            role_id: Explicit id, used for built-in roles

        Returns:
            The stored role

        Raises:
            ValidationError: If any role invariant is violated
            NotFoundError: If the tenant does not exist
        """
        fields: dict[str, Any] = {
            "name": name,
            "display_name": display_name or name,
            "description": description,
            "type": role_type,
            "tenant_id": tenant_id,
            "grants": grants or [],
            "inherits_from": inherits_from or [],
            "is_built_in": is_built_in,
            "created_by": created_by,
        }
        if role_id is not None:
            fields["id"] = role_id
        try:
            role = RoleDefinition.model_validate(fields)
        except PydanticValidationError as e:
            raise ValidationError.from_pydantic(e, "Invalid role definition") from e

        async with self.repo.scope_lock(role.scope):
            if await self.repo.fetch_role(role.id):
                raise ValidationError(
                    "Role id already exists",
                    error_code="role_exists",
                    details={"role_id": str(role.id)},
                )
            await self._validate(role)
            saved = await self.repo.save_role(role)

        logger.info(
            "role_created",
            role_id=str(saved.id),
            name=saved.name,
            type=saved.type.value,
            tenant_id=str(saved.tenant_id) if saved.tenant_id else None,
        )
        return saved

    async def update_role(self, role_id: UUID, changes: dict[str, Any]) -> RoleDefinition:
        """Update a role.

        Type and tenant are fixed at creation. Built-in roles may not be
        renamed.

        Raises:
            NotFoundError: If the role does not exist
            ConflictError: If a built-in role would be renamed
            ValidationError: If the changes break a role invariant
        """
        unknown = set(changes) - UPDATABLE_FIELDS
        if unknown:
            raise ValidationError(
                "Fields cannot be updated",
                errors=[
                    {"field": field, "message": "Field is read-only"}
                    for field in sorted(unknown)
                ],
            )

        current = await self.get_role(role_id)
        async with self.repo.scope_lock(current.scope):
            # Re-read under the lock
            current = await self.get_role(role_id)
            try:
                updated = RoleDefinition.model_validate({**current.model_dump(), **changes})
            except PydanticValidationError as e:
                raise ValidationError.from_pydantic(e, "Invalid role definition") from e

            if current.is_built_in and updated.name != current.name:
                raise ConflictError(
                    "Built-in roles cannot be renamed",
                    error_code="role_built_in",
                    details={"role_id": str(role_id), "name": current.name},
                )

            await self._validate(updated)
            saved = await self.repo.save_role(updated)

        logger.info("role_updated", role_id=str(role_id), fields=sorted(changes))
        return saved

    async def delete_role(self, role_id: UUID) -> None:
        """Delete a role.

        Raises:
            NotFoundError: If the role does not exist
            ConflictError: If the role is built-in or other roles inherit from it
        """
        role = await self.get_role(role_id)
        async with self.repo.scope_lock(role.scope):
            role = await self.get_role(role_id)
            if role.is_built_in:
                raise ConflictError(
                    "Built-in roles cannot be deleted",
                    error_code="role_built_in",
                    details={"role_id": str(role_id), "name": role.name},
                )

            dependents = await self.repo.fetch_dependent_roles(role_id)
            if dependents:
                raise ConflictError(
                    "Role is still inherited by other roles",
                    error_code="role_in_use",
                    details={
                        "role_id": str(role_id),
                        "name": role.name,
                        "dependents": sorted(d.name for d in dependents),
                    },
                )

            await self.repo.remove_role(role_id)

        logger.info("role_deleted", role_id=str(role_id), name=role.name)

    async def seed_system_roles(self) -> list[RoleDefinition]:
        """Create the built-in system roles that do not exist yet."""
        created = [
            await self._create_built_in(role)
            for role in build_system_roles()
            if await self.repo.fetch_role(role.id) is None
        ]
        logger.info("system_roles_seeded", added=len(created))
        return created

    async def provision_tenant_roles(self, tenant_id: UUID) -> list[RoleDefinition]:
        """Create the built-in roles of a tenant that do not exist yet."""
        created = [
            await self._create_built_in(role)
            for role in build_tenant_roles(tenant_id)
            if await self.repo.fetch_role(role.id) is None
        ]
        logger.info("tenant_roles_provisioned", tenant_id=str(tenant_id), added=len(created))
        return created

    async def _create_built_in(self, role: RoleDefinition) -> RoleDefinition:
        return await self.create_role(
            role.name,
            role.type,
            display_name=role.display_name,
            description=role.description,
            tenant_id=role.tenant_id,
            grants=role.grants,
            inherits_from=role.inherits_from,
            is_built_in=True,
            role_id=role.id,
        )

    # ============================================================
    # Validation
    # ============================================================

    async def _validate(self, role: RoleDefinition) -> None:
        """Check every role invariant against the stored state."""
        self._validate_scope(role)

        if role.tenant_id is not None:
            tenant = await self.repo.fetch_tenant(role.tenant_id)
            if tenant is None:
                raise NotFoundError(
                    "Tenant not found",
                    resource="tenant",
                    resource_id=role.tenant_id,
                )

        existing = await self.repo.fetch_role_by_name(role.name, role.tenant_id)
        if existing is not None and existing.id != role.id:
            raise ValidationError(
                f"Role '{role.name}' already exists in this scope",
                error_code="role_name_taken",
                details={"name": role.name, "scope": role.scope},
            )

        await self._validate_grants(role)
        await self._validate_inheritance(role)

    @staticmethod
    def _validate_scope(role: RoleDefinition) -> None:
        if role.type == RoleType.SYSTEM and role.tenant_id is not None:
            raise ValidationError(
                "System roles cannot belong to a tenant",
                error_code="invalid_role_scope",
                details={"type": role.type.value, "tenant_id": str(role.tenant_id)},
            )
        if role.type != RoleType.SYSTEM and role.tenant_id is None:
            raise ValidationError(
                f"{role.type.value.capitalize()} roles require a tenant",
                error_code="invalid_role_scope",
                details={"type": role.type.value},
            )

    async def _validate_grants(self, role: RoleDefinition) -> None:
        errors: list[dict[str, Any]] = []
        seen: set[tuple[Any, ...]] = set()

        for index, grant in enumerate(role.grants):
            field = f"grants.{index}.permission"
            permission = await self.repo.fetch_permission(grant.permission)
            if permission is None:
                errors.append(
                    {"field": field, "message": f"Unknown permission '{grant.permission}'"}
                )
                continue
            if permission.is_system_level and role.type != RoleType.SYSTEM:
                errors.append(
                    {
                        "field": field,
                        "message": f"'{grant.permission}' is only grantable by system roles",
                    }
                )
            if grant.key in seen:
                errors.append({"field": field, "message": "Duplicate grant"})
            seen.add(grant.key)

        if errors:
            raise ValidationError(
                "Invalid role grants",
                errors=errors,
                details={"name": role.name},
            )

    async def _validate_inheritance(self, role: RoleDefinition) -> None:
        if role.id in role.inherits_from:
            raise ValidationError(
                "A role cannot inherit from itself",
                error_code="role_cycle",
                details={"name": role.name, "cycle": [role.name, role.name]},
            )
        if len(set(role.inherits_from)) != len(role.inherits_from):
            raise ValidationError(
                "Parent roles must be listed once",
                error_code="duplicate_parent_role",
                details={"name": role.name},
            )

        for parent_id in role.inherits_from:
            parent = await self.repo.fetch_role(parent_id)
            if parent is None:
                raise ValidationError(
                    "Parent role does not exist",
                    error_code="unknown_parent_role",
                    details={"name": role.name, "parent_id": str(parent_id)},
                )
            if parent.scope != role.scope:
                raise ValidationError(
                    "Roles can only inherit from roles in the same scope",
                    error_code="invalid_parent_scope",
                    details={
                        "name": role.name,
                        "parent": parent.name,
                        "scope": role.scope,
                        "parent_scope": parent.scope,
                    },
                )

        # The graph is the stored scope with this role's edges swapped in
        scope_roles = await self.repo.fetch_roles_by_tenant(role.tenant_id)
        names = {r.id: r.name for r in scope_roles}
        names[role.id] = role.name
        graph = {r.id: list(r.inherits_from) for r in scope_roles}
        graph[role.id] = list(role.inherits_from)

        cycle = find_cycle(graph, role.id)
        if cycle:
            chain = [names.get(node, str(node)) for node in cycle]
            raise ValidationError(
                f"Role inheritance cycle: {' -> '.join(chain)}",
                error_code="role_cycle",
                details={"name": role.name, "cycle": chain},
            )
