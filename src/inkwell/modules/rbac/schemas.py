"""Request and response schemas for the RBAC routes."""

from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from inkwell.core.constants import (
    MAX_CATEGORY_LENGTH,
    MAX_DESCRIPTION_LENGTH,
    MAX_DISPLAY_NAME_LENGTH,
    MAX_PERMISSION_CODE_LENGTH,
    MAX_ROLE_NAME_LENGTH,
)
from inkwell.core.permissions.enums import Decision, ResourceType, RoleType
from inkwell.core.permissions.schemas import (
    AuthorizationContext,
    PermissionDefinition,
    PermissionGrant,
    ResolvedGrant,
    RoleDefinition,
    normalize_code,
)


# ============================================================
# Permission Schemas
# ============================================================


class PermissionCreate(BaseModel):
    """Schema for registering a custom permission."""

    code: str = Field(..., min_length=1, max_length=MAX_PERMISSION_CODE_LENGTH)
    display_name: str = Field(..., min_length=1, max_length=MAX_DISPLAY_NAME_LENGTH)
    description: str | None = Field(None, max_length=MAX_DESCRIPTION_LENGTH)
    resource_type: ResourceType
    category: str = Field(..., min_length=1, max_length=MAX_CATEGORY_LENGTH)
    is_system_level: bool = False
    parent_permission_id: str | None = None
    required_permissions: list[str] = Field(default_factory=list)
    conflicting_permissions: list[str] = Field(default_factory=list)

    @field_validator("code")
    @classmethod
    def validate_code(cls, v: str) -> str:
        """Codes are stored lower-case."""
        return normalize_code(v)


class PermissionUpdate(BaseModel):
    """Schema for updating a custom permission. Omitted fields are kept."""

    display_name: str | None = Field(None, min_length=1, max_length=MAX_DISPLAY_NAME_LENGTH)
    description: str | None = Field(None, max_length=MAX_DESCRIPTION_LENGTH)
    category: str | None = Field(None, min_length=1, max_length=MAX_CATEGORY_LENGTH)
    is_active: bool | None = None
    parent_permission_id: str | None = None
    required_permissions: list[str] | None = None
    conflicting_permissions: list[str] | None = None


class PermissionResponse(PermissionDefinition):
    """Schema for permission response data."""


# ============================================================
# Role Schemas
# ============================================================


class RoleCreate(BaseModel):
    """Schema for creating a role.

    ``type`` only applies to tenant-scoped roles; system roles are
    created through the system route.
    """

    name: str = Field(..., min_length=1, max_length=MAX_ROLE_NAME_LENGTH)
    display_name: str | None = Field(None, min_length=1, max_length=MAX_DISPLAY_NAME_LENGTH)
    description: str | None = Field(None, max_length=MAX_DESCRIPTION_LENGTH)
    type: RoleType = RoleType.CUSTOM
    grants: list[PermissionGrant] = Field(default_factory=list)
    inherits_from: list[UUID] = Field(default_factory=list)


class RoleUpdate(BaseModel):
    """Schema for updating a role. Omitted fields are kept."""

    name: str | None = Field(None, min_length=1, max_length=MAX_ROLE_NAME_LENGTH)
    display_name: str | None = Field(None, min_length=1, max_length=MAX_DISPLAY_NAME_LENGTH)
    description: str | None = Field(None, max_length=MAX_DESCRIPTION_LENGTH)
    grants: list[PermissionGrant] | None = None
    inherits_from: list[UUID] | None = None
    is_active: bool | None = None


class RoleResponse(RoleDefinition):
    """Schema for role response data."""


class RoleListResponse(BaseModel):
    """Schema for listing roles."""

    items: list[RoleResponse]
    total: int


class EffectiveGrantsResponse(BaseModel):
    """Resolved grants of a role."""

    role_id: UUID
    permissions: list[str]
    grants: list[ResolvedGrant]


# ============================================================
# Authorization Schemas
# ============================================================


class AuthorizeRequest(BaseModel):
    """Schema for an authorization query on behalf of the caller.

    ``tenant_id`` falls back to the ``X-Tenant-ID`` header.
    """

    permission: str = Field(..., min_length=1, max_length=MAX_PERMISSION_CODE_LENGTH)
    resource_type: ResourceType
    resource_id: str | None = None
    tenant_id: UUID | None = None
    context: AuthorizationContext | None = None


class AuthorizeResponse(BaseModel):
    """Authorization decision."""

    decision: Decision
    permission: str
    resource_type: ResourceType
    resource_id: str | None = None
    tenant_id: UUID | None = None
