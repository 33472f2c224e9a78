"""Idempotent seeding of the built-in permission catalog and system roles."""

from dataclasses import dataclass

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from inkwell.core.permissions.registry import PermissionRegistry
from inkwell.core.permissions.roles import RoleStore
from inkwell.modules.rbac.repos import SQLAlchemyRBACRepository


logger = structlog.get_logger()


@dataclass
class SeedResult:
    """Counts of what a seeding run added."""

    permissions: int
    system_roles: int


async def seed_built_ins(session: AsyncSession) -> SeedResult:
    """Seed built-in permissions, then the system roles granting them.

    Safe to run on every startup; existing rows are left untouched.
    The caller commits.
    """
    repo = SQLAlchemyRBACRepository(session)
    permissions = await PermissionRegistry(repo).seed_built_ins()
    roles = await RoleStore(repo).seed_system_roles()

    result = SeedResult(permissions=len(permissions), system_roles=len(roles))
    logger.info(
        "built_ins_seeded",
        permissions=result.permissions,
        system_roles=result.system_roles,
    )
    return result
