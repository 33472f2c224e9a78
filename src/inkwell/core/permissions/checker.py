"""Permission checking logic.

This module answers "is permission P granted on resource R" for a
user's role assignments within a tenant context.
"""

from uuid import UUID

import structlog

from inkwell.core.errors import IntegrityError
from inkwell.core.permissions.enums import Decision, ResourceType, RoleType
from inkwell.core.permissions.repository import RBACRepository
from inkwell.core.permissions.resolver import RoleResolver
from inkwell.core.permissions.schemas import (
    AuthorizationContext,
    EffectiveGrantSet,
    ResolvedGrant,
    RoleDefinition,
    UserAssignments,
)


logger = structlog.get_logger()

PermissionRequirement = tuple[str, ResourceType]


class PermissionChecker:
    """Service for checking user permissions.

    The system role is consulted first and only for system-level
    permissions. Otherwise the tenant role and the custom roles of the
    requested tenant are resolved and their grants matched against the
    resource and its context.
    """

    def __init__(self, repo: RBACRepository, resolver: RoleResolver | None = None) -> None:
        self.repo = repo
        self.resolver = resolver or RoleResolver(repo)

    async def authorize(
        self,
        assignments: UserAssignments,
        tenant_id: UUID | None,
        permission: str,
        resource_type: ResourceType,
        resource_id: str | None = None,
        context: AuthorizationContext | None = None,
    ) -> Decision:
        """Decide whether a permission is granted.

        Args:
            assignments: The user's role assignments
            tenant_id: Tenant the request targets, if any
            permission: Permission code to check
            resource_type: Type of the target resource
            resource_id: Specific resource, if any
            context: Facts about the resource for conditional grants

        Returns:
            GRANTED or DENIED

        Raises:
            IntegrityError: If an assignment points at a missing or mismatched role
            ConflictError: If a resolved role holds conflicting permissions
        """
        permission = permission.strip().lower()
        resource_type = ResourceType(resource_type)

        decision = Decision.DENIED
        if await self._system_grants(
            assignments, permission, resource_type, resource_id, context
        ):
            decision = Decision.GRANTED
        elif tenant_id is not None and await self._tenant_grants(
            assignments, tenant_id, permission, resource_type, resource_id, context
        ):
            decision = Decision.GRANTED

        logger.debug(
            "authorization_decided",
            user_id=str(assignments.user_id),
            tenant_id=str(tenant_id) if tenant_id else None,
            permission=permission,
            resource_type=resource_type.value,
            resource_id=resource_id,
            decision=decision.value,
        )
        return decision

    async def has_permission(
        self,
        assignments: UserAssignments,
        tenant_id: UUID | None,
        permission: str,
        resource_type: ResourceType,
        resource_id: str | None = None,
        context: AuthorizationContext | None = None,
    ) -> bool:
        decision = await self.authorize(
            assignments, tenant_id, permission, resource_type, resource_id, context
        )
        return decision == Decision.GRANTED

    async def has_any_permission(
        self,
        assignments: UserAssignments,
        tenant_id: UUID | None,
        permissions: list[PermissionRequirement],
    ) -> bool:
        """Check if the user holds at least one of the permissions."""
        for permission, resource_type in permissions:
            if await self.has_permission(assignments, tenant_id, permission, resource_type):
                return True
        return False

    async def has_all_permissions(
        self,
        assignments: UserAssignments,
        tenant_id: UUID | None,
        permissions: list[PermissionRequirement],
    ) -> bool:
        """Check if the user holds every one of the permissions."""
        for permission, resource_type in permissions:
            if not await self.has_permission(assignments, tenant_id, permission, resource_type):
                return False
        return True

    async def effective_permissions(
        self,
        assignments: UserAssignments,
        tenant_id: UUID | None,
    ) -> set[str]:
        """Codes the user holds unconditionally or conditionally in a tenant.

        Includes system-level codes of the system role.
        """
        codes: set[str] = set()

        system_set = await self._resolve_system_role(assignments)
        if system_set is not None:
            for resolved in system_set.grants:
                permission = await self.repo.fetch_permission(resolved.grant.permission)
                if permission is not None and permission.is_system_level:
                    codes.add(permission.code)

        if tenant_id is not None:
            for grant_set in await self._resolve_tenant_roles(assignments, tenant_id):
                codes |= grant_set.permissions()

        return codes

    # ============================================================
    # Resolution steps
    # ============================================================

    async def _resolve_system_role(
        self, assignments: UserAssignments
    ) -> EffectiveGrantSet | None:
        if assignments.system_role_id is None:
            return None

        role = await self._assigned_role(assignments, assignments.system_role_id)
        if role.type != RoleType.SYSTEM:
            raise IntegrityError(
                "Assigned system role is not a system role",
                details={"user_id": str(assignments.user_id), "role_id": str(role.id)},
            )
        return await self.resolver.resolve_role(role)

    async def _system_grants(
        self,
        assignments: UserAssignments,
        permission: str,
        resource_type: ResourceType,
        resource_id: str | None,
        context: AuthorizationContext | None,
    ) -> bool:
        effective = await self._resolve_system_role(assignments)
        if effective is None:
            return False

        definition = await self.repo.fetch_permission(permission)
        if definition is None or not definition.is_system_level:
            return False
        return any(
            self._grant_applies(resolved, assignments.user_id, resource_id, context)
            for resolved in effective.matching(permission, resource_type)
        )

    async def _resolve_tenant_roles(
        self, assignments: UserAssignments, tenant_id: UUID
    ) -> list[EffectiveGrantSet]:
        tenant = await self.repo.fetch_tenant(tenant_id)
        if tenant is None or not tenant.is_active:
            return []

        roles: list[RoleDefinition] = []
        tenant_role_id = assignments.tenant_roles.get(tenant_id)
        if tenant_role_id is not None:
            role = await self._assigned_role(assignments, tenant_role_id)
            if role.tenant_id != tenant_id:
                raise IntegrityError(
                    "Assigned tenant role belongs to another tenant",
                    details={
                        "user_id": str(assignments.user_id),
                        "role_id": str(role.id),
                        "tenant_id": str(tenant_id),
                    },
                )
            roles.append(role)

        for role_id in assignments.custom_role_ids:
            role = await self._assigned_role(assignments, role_id)
            if role.tenant_id == tenant_id:
                roles.append(role)

        return [await self.resolver.resolve_role(role) for role in roles]

    async def _tenant_grants(
        self,
        assignments: UserAssignments,
        tenant_id: UUID,
        permission: str,
        resource_type: ResourceType,
        resource_id: str | None,
        context: AuthorizationContext | None,
    ) -> bool:
        for effective in await self._resolve_tenant_roles(assignments, tenant_id):
            for resolved in effective.matching(permission, resource_type):
                if self._grant_applies(resolved, assignments.user_id, resource_id, context):
                    return True
        return False

    @staticmethod
    def _grant_applies(
        resolved: ResolvedGrant,
        user_id: UUID,
        resource_id: str | None,
        context: AuthorizationContext | None,
    ) -> bool:
        grant = resolved.grant
        if grant.resource_id is not None and grant.resource_id != resource_id:
            return False
        if grant.conditions is None:
            return True
        return grant.conditions.evaluate(user_id, context)

    async def _assigned_role(
        self, assignments: UserAssignments, role_id: UUID
    ) -> RoleDefinition:
        role = await self.repo.fetch_role(role_id)
        if role is None:
            raise IntegrityError(
                "Assigned role not found",
                details={"user_id": str(assignments.user_id), "role_id": str(role_id)},
            )
        return role
