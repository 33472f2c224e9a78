"""Role resolver.

Computes the effective grant set of a role: the union of its own grants
and every grant reachable through ``inherits_from``, filtered by
permission prerequisites and checked for conflicting permissions.

Resolution is read-only. Anything write-time validation should have
prevented (cycles, dangling references) is reported as an
``IntegrityError`` and never repaired.
"""

from collections import deque
from uuid import UUID

import structlog

from inkwell.core.errors import ConflictError, IntegrityError, NotFoundError
from inkwell.core.permissions.enums import RoleType
from inkwell.core.permissions.graph import find_cycle
from inkwell.core.permissions.repository import RBACRepository
from inkwell.core.permissions.schemas import (
    EffectiveGrantSet,
    GrantKey,
    PermissionDefinition,
    ResolvedGrant,
    RoleDefinition,
)


logger = structlog.get_logger()


class RoleResolver:
    """Resolves roles into effective grant sets."""

    def __init__(self, repo: RBACRepository) -> None:
        self.repo = repo

    async def resolve(self, role_id: UUID) -> EffectiveGrantSet:
        """Resolve a role by id.

        Raises:
            NotFoundError: If the role does not exist
            IntegrityError: If the stored inheritance graph is corrupt
            ConflictError: If the role ends up holding conflicting permissions
        """
        role = await self.repo.fetch_role(role_id)
        if role is None:
            raise NotFoundError("Role not found", resource="role", resource_id=role_id)
        return await self.resolve_role(role)

    async def resolve_role(self, role: RoleDefinition) -> EffectiveGrantSet:
        """Resolve an already loaded role."""
        empty = EffectiveGrantSet(role_id=role.id)
        if not role.is_active:
            return empty

        if role.type != RoleType.SYSTEM and role.tenant_id is not None:
            tenant = await self.repo.fetch_tenant(role.tenant_id)
            if tenant is None:
                raise IntegrityError(
                    "Role references a missing tenant",
                    details={"role_id": str(role.id), "tenant_id": str(role.tenant_id)},
                )
            if not tenant.is_active:
                logger.debug(
                    "role_resolved_inactive_tenant",
                    role_id=str(role.id),
                    tenant_id=str(role.tenant_id),
                )
                return empty

        roles, chains = await self._collect(role)
        grants = self._union(roles, chains)
        permissions = await self._load_permissions(grants)

        grants = [g for g in grants if permissions[g.grant.permission].is_active]
        grants = self._filter_prerequisites(grants, permissions)
        self._check_conflicts(role, grants, permissions)

        logger.debug(
            "role_resolved",
            role_id=str(role.id),
            roles=len(roles),
            grants=len(grants),
        )
        return EffectiveGrantSet(role_id=role.id, grants=grants)

    async def _collect(
        self, root: RoleDefinition
    ) -> tuple[list[RoleDefinition], dict[UUID, list[str]]]:
        """Breadth-first walk over the inheritance graph.

        Returns the roles in discovery order and, per role, the chain of
        role names from the root that first reached it.
        """
        visited: dict[UUID, RoleDefinition] = {root.id: root}
        chains: dict[UUID, list[str]] = {root.id: [root.name]}
        edges: dict[UUID, list[UUID]] = {}
        order: list[RoleDefinition] = [root]
        queue: deque[RoleDefinition] = deque([root])

        while queue:
            current = queue.popleft()
            edges[current.id] = list(current.inherits_from)

            for parent_id in current.inherits_from:
                if parent_id in visited:
                    continue
                parent = await self.repo.fetch_role(parent_id)
                if parent is None:
                    raise IntegrityError(
                        "Inherited role not found",
                        details={
                            "role_id": str(root.id),
                            "missing_role_id": str(parent_id),
                            "chain": chains[current.id],
                        },
                    )

                visited[parent_id] = parent
                chains[parent_id] = [*chains[current.id], parent.name]
                # Inactive parents contribute nothing, including their ancestors
                if not parent.is_active:
                    edges[parent_id] = []
                    continue
                order.append(parent)
                queue.append(parent)

        cycle = find_cycle(edges, root.id)
        if cycle:
            names = [visited[node].name for node in cycle]
            raise IntegrityError(
                f"Role inheritance cycle: {' -> '.join(names)}",
                details={"role_id": str(root.id), "cycle": names},
            )

        return order, chains

    @staticmethod
    def _union(
        roles: list[RoleDefinition], chains: dict[UUID, list[str]]
    ) -> list[ResolvedGrant]:
        """Union grants by key, first discovered wins.

        An unconditional grant replaces a conditional one with the same key
        since it is strictly broader. Of two conditional grants with the
        same key only the first is kept.
        """
        resolved: dict[GrantKey, ResolvedGrant] = {}
        for role in roles:
            for grant in role.grants:
                existing = resolved.get(grant.key)
                if existing is None or (
                    existing.grant.is_conditional and not grant.is_conditional
                ):
                    resolved[grant.key] = ResolvedGrant(
                        grant=grant,
                        source_role_id=role.id,
                        chain=chains[role.id],
                    )
        return list(resolved.values())

    async def _load_permissions(
        self, grants: list[ResolvedGrant]
    ) -> dict[str, PermissionDefinition]:
        permissions: dict[str, PermissionDefinition] = {}
        for resolved in grants:
            code = resolved.grant.permission
            if code in permissions:
                continue
            permission = await self.repo.fetch_permission(code)
            if permission is None:
                raise IntegrityError(
                    "Granted permission not found",
                    details={"permission": code, "chain": resolved.chain},
                )
            permissions[code] = permission
        return permissions

    @staticmethod
    def _filter_prerequisites(
        grants: list[ResolvedGrant],
        permissions: dict[str, PermissionDefinition],
    ) -> list[ResolvedGrant]:
        """Drop grants whose required permissions are not held, to a fixed point."""
        # Each productive pass removes at least one grant
        for _ in range(len(grants) + 1):
            held = {resolved.grant.permission for resolved in grants}
            kept = [
                resolved
                for resolved in grants
                if all(
                    code in held
                    for code in permissions[resolved.grant.permission].required_permissions
                )
            ]
            if len(kept) == len(grants):
                return kept
            grants = kept
        return grants

    @staticmethod
    def _check_conflicts(
        role: RoleDefinition,
        grants: list[ResolvedGrant],
        permissions: dict[str, PermissionDefinition],
    ) -> None:
        first_chain: dict[str, list[str]] = {}
        for resolved in grants:
            first_chain.setdefault(resolved.grant.permission, resolved.chain)

        held = sorted(first_chain)
        for index, code in enumerate(held):
            for other in held[index + 1 :]:
                if (
                    other in permissions[code].conflicting_permissions
                    or code in permissions[other].conflicting_permissions
                ):
                    raise ConflictError(
                        f"Role holds conflicting permissions '{code}' and '{other}'",
                        error_code="conflicting_permissions",
                        details={
                            "role_id": str(role.id),
                            "permissions": [code, other],
                            "chains": {code: first_chain[code], other: first_chain[other]},
                        },
                    )
