"""RBAC API routes.

Permission registry and system roles are administered with
``manage_system``. Tenant and custom roles are administered by tenant
user managers, or platform-wide by ``manage_tenants``.
"""

from uuid import UUID

from fastapi import Query, status
from pydantic import ValidationError as PydanticValidationError

from inkwell.core.context import CurrentTenantId, CurrentUser
from inkwell.core.errors import ForbiddenError, ValidationError
from inkwell.core.permissions.checker import PermissionChecker
from inkwell.core.permissions.decorators import require_any_permission, require_permission
from inkwell.core.permissions.enums import PermissionCode, ResourceType, RoleType
from inkwell.core.permissions.schemas import (
    PermissionDefinition,
    RoleDefinition,
    UserAssignments,
)
from inkwell.modules.rbac import router
from inkwell.modules.rbac.schemas import (
    AuthorizeRequest,
    AuthorizeResponse,
    EffectiveGrantsResponse,
    PermissionCreate,
    PermissionResponse,
    PermissionUpdate,
    RoleCreate,
    RoleListResponse,
    RoleResponse,
    RoleUpdate,
)
from inkwell.modules.rbac.services import Checker, Registry, Resolver, Roles


SYSTEM_ADMIN = [(PermissionCode.MANAGE_SYSTEM, ResourceType.SYSTEM)]
SYSTEM_READERS = [
    (PermissionCode.MANAGE_SYSTEM, ResourceType.SYSTEM),
    (PermissionCode.MANAGE_SYSTEM_USERS, ResourceType.USER),
]
TENANT_ROLE_ADMINS = [
    (PermissionCode.MANAGE_TENANT_USERS, ResourceType.USER),
    (PermissionCode.MANAGE_TENANTS, ResourceType.TENANT),
]


async def _ensure_can_manage(
    checker: PermissionChecker,
    user: UserAssignments,
    role: RoleDefinition,
    *,
    read_only: bool = False,
) -> None:
    """Route-level guard for endpoints addressing a role by id.

    The role's scope decides which permissions apply, so the check runs
    after the role is loaded.
    """
    if role.type == RoleType.SYSTEM:
        required = SYSTEM_READERS if read_only else SYSTEM_ADMIN
        allowed = await checker.has_any_permission(user, None, required)
    else:
        required = TENANT_ROLE_ADMINS
        allowed = await checker.has_any_permission(user, role.tenant_id, required)

    if not allowed:
        raise ForbiddenError(
            "Missing required permission",
            error_code="permission_denied",
            details={
                "required_permissions": [f"{code.value}:{rt.value}" for code, rt in required],
                "role_id": str(role.id),
            },
        )


# ============================================================
# Permission Registry Routes
# ============================================================


@router.post(
    "/permissions",
    response_model=PermissionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register permission",
    description="Register a custom permission. Requires manage_system.",
)
@require_permission(PermissionCode.MANAGE_SYSTEM, ResourceType.SYSTEM)
async def register_permission(
    data: PermissionCreate,
    registry: Registry,
    current_user: CurrentUser,
    checker: Checker,  # noqa: ARG001 - required for permission check
) -> PermissionResponse:
    """Register a custom permission."""
    try:
        definition = PermissionDefinition(
            **data.model_dump(),
            is_built_in=False,
            created_by=str(current_user.user_id),
        )
    except PydanticValidationError as e:
        raise ValidationError.from_pydantic(e, "Invalid permission definition") from e

    permission = await registry.register(definition)
    return PermissionResponse.model_validate(permission)


@router.get(
    "/permissions",
    response_model=list[PermissionResponse],
    summary="List permissions",
    description="List active permissions, optionally filtered by resource type or category.",
)
async def list_permissions(
    registry: Registry,
    current_user: CurrentUser,  # noqa: ARG001 - required for auth
    resource_type: ResourceType | None = Query(None, description="Filter by resource type"),
    category: str | None = Query(None, description="Filter by category"),
) -> list[PermissionResponse]:
    """List permissions."""
    if resource_type is not None:
        permissions = await registry.list_by_resource_type(resource_type)
        if category is not None:
            category = category.strip().lower()
            permissions = [p for p in permissions if p.category == category]
    elif category is not None:
        permissions = await registry.list_by_category(category)
    else:
        permissions = await registry.list_all()
    return [PermissionResponse.model_validate(p) for p in permissions]


@router.get(
    "/permissions/{code}",
    response_model=PermissionResponse,
    summary="Get permission",
)
async def get_permission(
    code: str,
    registry: Registry,
    current_user: CurrentUser,  # noqa: ARG001 - required for auth
) -> PermissionResponse:
    """Get a permission by code."""
    return PermissionResponse.model_validate(await registry.lookup(code))


@router.patch(
    "/permissions/{code}",
    response_model=PermissionResponse,
    summary="Update permission",
    description="Update a custom permission. Built-in permissions are immutable.",
)
@require_permission(PermissionCode.MANAGE_SYSTEM, ResourceType.SYSTEM)
async def update_permission(
    code: str,
    data: PermissionUpdate,
    registry: Registry,
    current_user: CurrentUser,  # noqa: ARG001 - required for auth
    checker: Checker,  # noqa: ARG001 - required for permission check
) -> PermissionResponse:
    """Update a custom permission."""
    permission = await registry.update(code, data.model_dump(exclude_unset=True))
    return PermissionResponse.model_validate(permission)


@router.delete(
    "/permissions/{code}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete permission",
    description="Delete a custom permission that no role grants and no permission references.",
)
@require_permission(PermissionCode.MANAGE_SYSTEM, ResourceType.SYSTEM)
async def delete_permission(
    code: str,
    registry: Registry,
    current_user: CurrentUser,  # noqa: ARG001 - required for auth
    checker: Checker,  # noqa: ARG001 - required for permission check
) -> None:
    """Delete a custom permission."""
    await registry.delete(code)


# ============================================================
# Role Routes
# ============================================================


@router.post(
    "/roles",
    response_model=RoleResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create system role",
)
@require_permission(PermissionCode.MANAGE_SYSTEM, ResourceType.SYSTEM)
async def create_system_role(
    data: RoleCreate,
    roles: Roles,
    current_user: CurrentUser,
    checker: Checker,  # noqa: ARG001 - required for permission check
) -> RoleResponse:
    """Create a system role."""
    role = await roles.create_role(
        data.name,
        RoleType.SYSTEM,
        display_name=data.display_name,
        description=data.description,
        grants=data.grants,
        inherits_from=data.inherits_from,
        created_by=str(current_user.user_id),
    )
    return RoleResponse.model_validate(role)


@router.get(
    "/roles",
    response_model=RoleListResponse,
    summary="List system roles",
)
@require_any_permission(SYSTEM_READERS)
async def list_system_roles(
    roles: Roles,
    current_user: CurrentUser,  # noqa: ARG001 - required for auth
    checker: Checker,  # noqa: ARG001 - required for permission check
) -> RoleListResponse:
    """List system roles."""
    items = await roles.list_roles()
    return RoleListResponse(
        items=[RoleResponse.model_validate(r) for r in items],
        total=len(items),
    )


@router.post(
    "/tenants/{tenant_id}/roles",
    response_model=RoleResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create tenant role",
    description="Create a tenant or custom role in a tenant.",
)
@require_any_permission(TENANT_ROLE_ADMINS)
async def create_tenant_role(
    tenant_id: UUID,
    data: RoleCreate,
    roles: Roles,
    current_user: CurrentUser,
    checker: Checker,  # noqa: ARG001 - required for permission check
) -> RoleResponse:
    """Create a tenant-scoped role."""
    role = await roles.create_role(
        data.name,
        data.type,
        display_name=data.display_name,
        description=data.description,
        tenant_id=tenant_id,
        grants=data.grants,
        inherits_from=data.inherits_from,
        created_by=str(current_user.user_id),
    )
    return RoleResponse.model_validate(role)


@router.get(
    "/tenants/{tenant_id}/roles",
    response_model=RoleListResponse,
    summary="List tenant roles",
)
@require_any_permission(TENANT_ROLE_ADMINS)
async def list_tenant_roles(
    tenant_id: UUID,
    roles: Roles,
    current_user: CurrentUser,  # noqa: ARG001 - required for auth
    checker: Checker,  # noqa: ARG001 - required for permission check
) -> RoleListResponse:
    """List the roles of a tenant."""
    items = await roles.list_roles(tenant_id)
    return RoleListResponse(
        items=[RoleResponse.model_validate(r) for r in items],
        total=len(items),
    )


@router.get(
    "/roles/{role_id}",
    response_model=RoleResponse,
    summary="Get role",
)
async def get_role(
    role_id: UUID,
    roles: Roles,
    current_user: CurrentUser,
    checker: Checker,
) -> RoleResponse:
    """Get a role by ID."""
    role = await roles.get_role(role_id)
    await _ensure_can_manage(checker, current_user, role, read_only=True)
    return RoleResponse.model_validate(role)


@router.patch(
    "/roles/{role_id}",
    response_model=RoleResponse,
    summary="Update role",
)
async def update_role(
    role_id: UUID,
    data: RoleUpdate,
    roles: Roles,
    current_user: CurrentUser,
    checker: Checker,
) -> RoleResponse:
    """Update a role."""
    role = await roles.get_role(role_id)
    await _ensure_can_manage(checker, current_user, role)
    updated = await roles.update_role(role_id, data.model_dump(exclude_unset=True))
    return RoleResponse.model_validate(updated)


@router.delete(
    "/roles/{role_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete role",
    description="Delete a role. Built-in roles and roles other roles inherit from are kept.",
)
async def delete_role(
    role_id: UUID,
    roles: Roles,
    current_user: CurrentUser,
    checker: Checker,
) -> None:
    """Delete a role."""
    role = await roles.get_role(role_id)
    await _ensure_can_manage(checker, current_user, role)
    await roles.delete_role(role_id)


@router.get(
    "/roles/{role_id}/effective",
    response_model=EffectiveGrantsResponse,
    summary="Resolve role",
    description="Effective grants of a role after inheritance, prerequisites and conflicts.",
)
async def get_effective_grants(
    role_id: UUID,
    roles: Roles,
    resolver: Resolver,
    current_user: CurrentUser,
    checker: Checker,
) -> EffectiveGrantsResponse:
    """Resolve a role into its effective grants."""
    role = await roles.get_role(role_id)
    await _ensure_can_manage(checker, current_user, role, read_only=True)
    effective = await resolver.resolve_role(role)
    return EffectiveGrantsResponse(
        role_id=effective.role_id,
        permissions=sorted(effective.permissions()),
        grants=effective.grants,
    )


# ============================================================
# Authorization Routes
# ============================================================


@router.post(
    "/authorize",
    response_model=AuthorizeResponse,
    summary="Check permission",
    description="Decide whether the caller holds a permission on a resource.",
)
async def authorize(
    data: AuthorizeRequest,
    current_user: CurrentUser,
    current_tenant_id: CurrentTenantId,
    checker: Checker,
) -> AuthorizeResponse:
    """Authorize the caller."""
    tenant_id = data.tenant_id or current_tenant_id
    decision = await checker.authorize(
        current_user,
        tenant_id,
        data.permission,
        data.resource_type,
        resource_id=data.resource_id,
        context=data.context,
    )
    return AuthorizeResponse(
        decision=decision,
        permission=data.permission.strip().lower(),
        resource_type=data.resource_type,
        resource_id=data.resource_id,
        tenant_id=tenant_id,
    )
