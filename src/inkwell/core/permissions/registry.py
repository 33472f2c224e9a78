"""Permission registry.

Catalog of permission codes with their metadata. Built-in permissions
are seeded at startup and immutable; custom permissions can be
registered, updated and deleted later.
"""

from typing import Any

import structlog
from pydantic import ValidationError as PydanticValidationError

from inkwell.core.constants import SYSTEM_SCOPE
from inkwell.core.errors import ConflictError, NotFoundError, ValidationError
from inkwell.core.permissions.catalog import BUILT_IN_PERMISSIONS
from inkwell.core.permissions.enums import ResourceType
from inkwell.core.permissions.graph import find_cycle
from inkwell.core.permissions.repository import RBACRepository
from inkwell.core.permissions.schemas import PermissionDefinition, normalize_code


logger = structlog.get_logger()

# Fields a custom permission may change after registration
UPDATABLE_FIELDS = frozenset(
    {
        "display_name",
        "description",
        "category",
        "is_active",
        "parent_permission_id",
        "required_permissions",
        "conflicting_permissions",
    }
)


class PermissionRegistry:
    """Service for registering and looking up permissions.

    All writes run under the ``system`` scope lock so that two writers
    cannot each add half of a prerequisite cycle.
    """

    def __init__(self, repo: RBACRepository) -> None:
        self.repo = repo

    async def register(self, permission: PermissionDefinition) -> PermissionDefinition:
        """Register a new permission.

        Args:
            permission: The permission to add

        Returns:
            The stored permission

        Raises:
            ValidationError: If the code exists, the permission references
                itself, its parent is unknown, or it closes a cycle
        """
        async with self.repo.scope_lock(SYSTEM_SCOPE):
            if await self.repo.fetch_permission(permission.code):
                raise ValidationError(
                    f"Permission '{permission.code}' already exists",
                    error_code="permission_exists",
                    details={"code": permission.code},
                )

            await self._validate(permission)
            saved = await self.repo.save_permission(permission)

        logger.info(
            "permission_registered",
            code=saved.code,
            resource_type=saved.resource_type.value,
            built_in=saved.is_built_in,
        )
        return saved

    async def lookup(self, code: str) -> PermissionDefinition:
        """Get a permission by code.

        Raises:
            NotFoundError: If no permission has this code
        """
        permission = await self.repo.fetch_permission(self._normalize(code))
        if permission is None:
            raise NotFoundError(
                "Permission not found",
                resource="permission",
                resource_id=code,
            )
        return permission

    async def list_all(self, include_inactive: bool = False) -> list[PermissionDefinition]:
        """All permissions ordered by code."""
        permissions = await self.repo.list_permissions()
        return sorted(
            (p for p in permissions if include_inactive or p.is_active),
            key=lambda p: p.code,
        )

    async def list_by_resource_type(
        self, resource_type: ResourceType | str
    ) -> list[PermissionDefinition]:
        """Active permissions for a resource type, ordered by code."""
        resource_type = ResourceType(resource_type)
        return [p for p in await self.list_all() if p.resource_type == resource_type]

    async def list_by_category(self, category: str) -> list[PermissionDefinition]:
        """Active permissions in a category, ordered by code."""
        category = category.strip().lower()
        return [p for p in await self.list_all() if p.category == category]

    async def update(self, code: str, changes: dict[str, Any]) -> PermissionDefinition:
        """Update a custom permission.

        Args:
            code: Code of the permission to update
            changes: Field values to change

        Returns:
            The updated permission

        Raises:
            NotFoundError: If the permission does not exist
            ConflictError: If the permission is built-in
            ValidationError: If the changes break an invariant
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

        async with self.repo.scope_lock(SYSTEM_SCOPE):
            current = await self.lookup(code)
            if current.is_built_in:
                raise ConflictError(
                    "Built-in permissions cannot be modified",
                    error_code="permission_built_in",
                    details={"code": current.code},
                )

            try:
                updated = PermissionDefinition.model_validate(
                    {**current.model_dump(), **changes}
                )
            except PydanticValidationError as e:
                raise ValidationError.from_pydantic(e, "Invalid permission definition") from e
            await self._validate(updated)
            saved = await self.repo.save_permission(updated)

        logger.info("permission_updated", code=saved.code, fields=sorted(changes))
        return saved

    async def delete(self, code: str) -> None:
        """Delete a custom permission.

        Raises:
            NotFoundError: If the permission does not exist
            ConflictError: If the permission is built-in, still granted by
                a role, or referenced by another permission
        """
        async with self.repo.scope_lock(SYSTEM_SCOPE):
            permission = await self.lookup(code)
            if permission.is_built_in:
                raise ConflictError(
                    "Built-in permissions cannot be deleted",
                    error_code="permission_built_in",
                    details={"code": permission.code},
                )

            granting = await self.repo.fetch_roles_granting(permission.code)
            if granting:
                raise ConflictError(
                    "Permission is still granted by roles",
                    error_code="permission_in_use",
                    details={
                        "code": permission.code,
                        "roles": sorted(str(role.id) for role in granting),
                    },
                )

            referencing = sorted(
                other.code
                for other in await self.repo.list_permissions()
                if other.code != permission.code
                and (
                    permission.code in other.required_permissions
                    or permission.code in other.conflicting_permissions
                    or other.parent_permission_id == permission.code
                )
            )
            if referencing:
                raise ConflictError(
                    "Permission is referenced by other permissions",
                    error_code="permission_referenced",
                    details={"code": permission.code, "referenced_by": referencing},
                )

            await self.repo.remove_permission(permission.code)

        logger.info("permission_deleted", code=permission.code)

    async def seed_built_ins(self) -> list[PermissionDefinition]:
        """Register every built-in permission that is not stored yet.

        Returns:
            The permissions that were added
        """
        added: list[PermissionDefinition] = []
        for permission in BUILT_IN_PERMISSIONS:
            if await self.repo.fetch_permission(permission.code) is None:
                added.append(await self.register(permission))

        logger.info("built_in_permissions_seeded", added=len(added))
        return added

    # ============================================================
    # Validation
    # ============================================================

    @staticmethod
    def _normalize(code: str) -> str:
        try:
            return normalize_code(code)
        except ValueError as e:
            raise ValidationError(
                str(e),
                error_code="invalid_permission_code",
                details={"code": code},
            ) from e

    async def _validate(self, permission: PermissionDefinition) -> None:
        code = permission.code
        errors: list[dict[str, Any]] = []

        if code in permission.required_permissions:
            errors.append(
                {"field": "required_permissions", "message": "A permission cannot require itself"}
            )
        if code in permission.conflicting_permissions:
            errors.append(
                {
                    "field": "conflicting_permissions",
                    "message": "A permission cannot conflict with itself",
                }
            )
        overlap = sorted(
            set(permission.required_permissions) & set(permission.conflicting_permissions)
        )
        if overlap:
            errors.append(
                {
                    "field": "conflicting_permissions",
                    "message": f"Permissions both required and conflicting: {', '.join(overlap)}",
                }
            )
        if permission.parent_permission_id == code:
            errors.append(
                {
                    "field": "parent_permission_id",
                    "message": "A permission cannot be its own parent",
                }
            )
        if errors:
            raise ValidationError(
                "Invalid permission definition",
                errors=errors,
                details={"code": code},
            )

        existing = {p.code: p for p in await self.repo.list_permissions()}
        existing[code] = permission

        parent = permission.parent_permission_id
        if parent is not None and parent not in existing:
            raise ValidationError(
                f"Parent permission '{parent}' does not exist",
                error_code="unknown_parent_permission",
                details={"code": code, "parent_permission_id": parent},
            )

        required_graph = {c: p.required_permissions for c, p in existing.items()}
        cycle = find_cycle(required_graph, code)
        if cycle:
            raise ValidationError(
                "Required permissions form a cycle",
                error_code="permission_cycle",
                details={"code": code, "cycle": cycle},
            )

        parent_graph = {
            c: [p.parent_permission_id] if p.parent_permission_id else []
            for c, p in existing.items()
        }
        cycle = find_cycle(parent_graph, code)
        if cycle:
            raise ValidationError(
                "Parent permissions form a cycle",
                error_code="permission_parent_cycle",
                details={"code": code, "cycle": cycle},
            )
