"""Domain schemas for the RBAC model.

These models are the currency between the persistence layer, the
permission registry, the role store, the resolver and the checker.
They carry no database state.
"""

import re
from typing import Any
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator

from inkwell.core.constants import (
    MAX_CATEGORY_LENGTH,
    MAX_DESCRIPTION_LENGTH,
    MAX_DISPLAY_NAME_LENGTH,
    MAX_PERMISSION_CODE_LENGTH,
    MAX_RESOURCE_ID_LENGTH,
    MAX_ROLE_NAME_LENGTH,
    SYSTEM_SCOPE,
)
from inkwell.core.permissions.enums import ResourceType, RoleType


PERMISSION_CODE_PATTERN = re.compile(r"^[a-z][a-z0-9_]*$")


def normalize_code(value: str) -> str:
    """Normalize a permission code to its stored lower-case form."""
    code = value.strip().lower()
    if not PERMISSION_CODE_PATTERN.match(code):
        raise ValueError(
            "Permission codes must start with a letter and contain only "
            "letters, digits and underscores"
        )
    return code


# ============================================================
# Permissions
# ============================================================


class PermissionDefinition(BaseModel):
    """An atomic capability that roles can grant."""

    model_config = ConfigDict(from_attributes=True)

    code: str = Field(..., min_length=1, max_length=MAX_PERMISSION_CODE_LENGTH)
    display_name: str = Field(..., min_length=1, max_length=MAX_DISPLAY_NAME_LENGTH)
    description: str | None = Field(None, max_length=MAX_DESCRIPTION_LENGTH)
    resource_type: ResourceType
    category: str = Field(..., min_length=1, max_length=MAX_CATEGORY_LENGTH)
    is_system_level: bool = False
    is_built_in: bool = False
    is_active: bool = True
    parent_permission_id: str | None = None
    required_permissions: list[str] = Field(default_factory=list)
    conflicting_permissions: list[str] = Field(default_factory=list)
    created_by: str | None = None

    @field_validator("code", "parent_permission_id")
    @classmethod
    def _normalize_code(cls, v: str | None) -> str | None:
        return normalize_code(v) if v is not None else None

    @field_validator("required_permissions", "conflicting_permissions")
    @classmethod
    def _normalize_codes(cls, v: list[str]) -> list[str]:
        # Keep first occurrence order, drop duplicates
        return list(dict.fromkeys(normalize_code(code) for code in v))

    @field_validator("category")
    @classmethod
    def _normalize_category(cls, v: str) -> str:
        return v.strip().lower()


# ============================================================
# Grants
# ============================================================


class AuthorizationContext(BaseModel):
    """Facts about the target resource used to evaluate grant conditions."""

    owner_id: str | None = None
    status: str | None = None
    attributes: dict[str, Any] = Field(default_factory=dict)


class GrantConditions(BaseModel):
    """Dynamic conditions attached to a grant.

    Attributes:
        owner_only: The resource owner must be the requesting user
        owner_id: The resource owner must be this specific id
        status: The resource status must be one of these values
        custom: Every key must equal the matching context attribute
    """

    model_config = ConfigDict(from_attributes=True)

    owner_only: bool = False
    owner_id: str | None = None
    status: list[str] | None = None
    custom: dict[str, Any] | None = None

    def is_empty(self) -> bool:
        return not (self.owner_only or self.owner_id or self.status or self.custom)

    def evaluate(self, user_id: UUID | None, context: AuthorizationContext | None) -> bool:
        """Check the conditions against a resource context.

        Missing context facts never satisfy a condition.
        """
        if self.is_empty():
            return True
        if context is None:
            return False

        if self.owner_only and (
            user_id is None or context.owner_id is None or context.owner_id != str(user_id)
        ):
            return False
        if self.owner_id and context.owner_id != self.owner_id:
            return False
        if self.status and context.status not in self.status:
            return False
        if self.custom:
            for key, expected in self.custom.items():
                if key not in context.attributes or context.attributes[key] != expected:
                    return False
        return True


GrantKey = tuple[str, ResourceType, str | None]


class PermissionGrant(BaseModel):
    """A permission granted by a role on a resource type.

    ``resource_id`` narrows the grant to one resource; ``None`` means
    every resource of the type within the role's scope.
    """

    model_config = ConfigDict(from_attributes=True)

    permission: str
    resource_type: ResourceType
    resource_id: str | None = Field(None, max_length=MAX_RESOURCE_ID_LENGTH)
    conditions: GrantConditions | None = None

    @field_validator("permission")
    @classmethod
    def _normalize_permission(cls, v: str) -> str:
        return normalize_code(v)

    @property
    def key(self) -> GrantKey:
        """Identity used to deduplicate grants."""
        return (self.permission, self.resource_type, self.resource_id)

    @property
    def is_conditional(self) -> bool:
        return self.conditions is not None and not self.conditions.is_empty()


# ============================================================
# Roles
# ============================================================


class RoleDefinition(BaseModel):
    """A named, reusable bundle of permission grants."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID = Field(default_factory=uuid4)
    name: str = Field(..., min_length=1, max_length=MAX_ROLE_NAME_LENGTH)
    display_name: str = Field(..., min_length=1, max_length=MAX_DISPLAY_NAME_LENGTH)
    description: str | None = Field(None, max_length=MAX_DESCRIPTION_LENGTH)
    type: RoleType
    tenant_id: UUID | None = None
    grants: list[PermissionGrant] = Field(default_factory=list)
    inherits_from: list[UUID] = Field(default_factory=list)
    is_active: bool = True
    is_built_in: bool = False
    created_by: str = "system"

    @field_validator("name")
    @classmethod
    def _normalize_name(cls, v: str) -> str:
        return v.strip().lower()

    @property
    def scope(self) -> str:
        """Mutation lock scope: ``system`` or the tenant id."""
        if self.type == RoleType.SYSTEM or self.tenant_id is None:
            return SYSTEM_SCOPE
        return str(self.tenant_id)


# ============================================================
# Tenants and assignments
# ============================================================


class TenantInfo(BaseModel):
    """The slice of a tenant the RBAC core needs."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    is_active: bool = True


class UserAssignments(BaseModel):
    """Role assignments of one user.

    Attributes:
        user_id: The user the assignments belong to
        system_role_id: Optional platform-wide role
        tenant_roles: Mapping of tenant id to that tenant's role id
        custom_role_ids: Custom roles, each scoped to its own tenant
    """

    user_id: UUID
    system_role_id: UUID | None = None
    tenant_roles: dict[UUID, UUID] = Field(default_factory=dict)
    custom_role_ids: list[UUID] = Field(default_factory=list)


# ============================================================
# Resolution results
# ============================================================


class ResolvedGrant(BaseModel):
    """A grant in an effective set, with the role chain that produced it."""

    grant: PermissionGrant
    source_role_id: UUID
    chain: list[str]


class EffectiveGrantSet(BaseModel):
    """Fully resolved, filtered and conflict-checked grants of a role."""

    role_id: UUID
    grants: list[ResolvedGrant] = Field(default_factory=list)

    def permissions(self) -> set[str]:
        """Codes of every permission held by the set."""
        return {resolved.grant.permission for resolved in self.grants}

    def matching(self, permission: str, resource_type: ResourceType) -> list[ResolvedGrant]:
        """Grants for a permission on a resource type."""
        return [
            resolved
            for resolved in self.grants
            if resolved.grant.permission == permission
            and resolved.grant.resource_type == resource_type
        ]
