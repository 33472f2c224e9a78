"""Permission system for role-based access control (RBAC)."""

from inkwell.core.permissions.checker import PermissionChecker
from inkwell.core.permissions.decorators import (
    require_all_permissions,
    require_any_permission,
    require_permission,
)
from inkwell.core.permissions.enums import (
    Decision,
    PermissionCode,
    ResourceType,
    RoleType,
    SystemRole,
    TenantRole,
)
from inkwell.core.permissions.models import Permission, Role, RoleGrant, RoleParent
from inkwell.core.permissions.registry import PermissionRegistry
from inkwell.core.permissions.repository import RBACRepository
from inkwell.core.permissions.resolver import RoleResolver
from inkwell.core.permissions.roles import RoleStore
from inkwell.core.permissions.schemas import (
    AuthorizationContext,
    EffectiveGrantSet,
    GrantConditions,
    PermissionDefinition,
    PermissionGrant,
    ResolvedGrant,
    RoleDefinition,
    TenantInfo,
    UserAssignments,
)


__all__ = [
    "AuthorizationContext",
    "Decision",
    "EffectiveGrantSet",
    "GrantConditions",
    # Models
    "Permission",
    # Services
    "PermissionChecker",
    "PermissionCode",
    "PermissionDefinition",
    "PermissionGrant",
    "PermissionRegistry",
    "RBACRepository",
    "ResolvedGrant",
    "ResourceType",
    "Role",
    "RoleDefinition",
    "RoleGrant",
    "RoleParent",
    "RoleResolver",
    "RoleStore",
    "RoleType",
    "SystemRole",
    "TenantInfo",
    "TenantRole",
    "UserAssignments",
    # Decorators
    "require_all_permissions",
    "require_any_permission",
    "require_permission",
]
