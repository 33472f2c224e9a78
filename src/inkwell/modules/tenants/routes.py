"""Tenant API routes."""

from uuid import UUID

from fastapi import status

from inkwell.core.context import CurrentUser
from inkwell.core.permissions.decorators import require_any_permission, require_permission
from inkwell.core.permissions.enums import PermissionCode, ResourceType
from inkwell.modules.rbac.services import Checker
from inkwell.modules.tenants import router
from inkwell.modules.tenants.schemas import TenantCreate, TenantResponse, TenantUpdate
from inkwell.modules.tenants.services import TenantSvc


TENANT_SETTINGS_MANAGERS = [
    (PermissionCode.MANAGE_TENANT_SETTINGS, ResourceType.TENANT),
    (PermissionCode.MANAGE_TENANTS, ResourceType.TENANT),
]


@router.post(
    "",
    response_model=TenantResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create tenant",
    description="Create a tenant and provision its built-in roles. Requires manage_tenants.",
)
@require_permission(PermissionCode.MANAGE_TENANTS, ResourceType.TENANT)
async def create_tenant(
    data: TenantCreate,
    service: TenantSvc,
    current_user: CurrentUser,  # noqa: ARG001 - required for auth
    checker: Checker,  # noqa: ARG001 - required for permission check
) -> TenantResponse:
    """Create a tenant."""
    tenant = await service.create_tenant(data)
    return TenantResponse.model_validate(tenant)


@router.get(
    "/{tenant_id}",
    response_model=TenantResponse,
    summary="Get tenant",
)
@require_any_permission(TENANT_SETTINGS_MANAGERS)
async def get_tenant(
    tenant_id: UUID,
    service: TenantSvc,
    current_user: CurrentUser,  # noqa: ARG001 - required for auth
    checker: Checker,  # noqa: ARG001 - required for permission check
) -> TenantResponse:
    """Get tenant by ID."""
    tenant = await service.get_tenant(tenant_id)
    return TenantResponse.model_validate(tenant)


@router.patch(
    "/{tenant_id}",
    response_model=TenantResponse,
    summary="Update tenant settings",
)
@require_any_permission(TENANT_SETTINGS_MANAGERS)
async def update_tenant(
    tenant_id: UUID,
    data: TenantUpdate,
    service: TenantSvc,
    current_user: CurrentUser,  # noqa: ARG001 - required for auth
    checker: Checker,  # noqa: ARG001 - required for permission check
) -> TenantResponse:
    """Update tenant settings."""
    tenant = await service.update_tenant(tenant_id, data)
    return TenantResponse.model_validate(tenant)


@router.post(
    "/{tenant_id}/deactivate",
    response_model=TenantResponse,
    summary="Deactivate tenant",
    description="Deactivate a tenant. Roles of an inactive tenant grant no permissions.",
)
@require_permission(PermissionCode.MANAGE_TENANTS, ResourceType.TENANT)
async def deactivate_tenant(
    tenant_id: UUID,
    service: TenantSvc,
    current_user: CurrentUser,  # noqa: ARG001 - required for auth
    checker: Checker,  # noqa: ARG001 - required for permission check
) -> TenantResponse:
    """Deactivate a tenant."""
    tenant = await service.deactivate_tenant(tenant_id)
    return TenantResponse.model_validate(tenant)


@router.post(
    "/{tenant_id}/activate",
    response_model=TenantResponse,
    summary="Activate tenant",
)
@require_permission(PermissionCode.MANAGE_TENANTS, ResourceType.TENANT)
async def activate_tenant(
    tenant_id: UUID,
    service: TenantSvc,
    current_user: CurrentUser,  # noqa: ARG001 - required for auth
    checker: Checker,  # noqa: ARG001 - required for permission check
) -> TenantResponse:
    """Activate a tenant."""
    tenant = await service.activate_tenant(tenant_id)
    return TenantResponse.model_validate(tenant)
