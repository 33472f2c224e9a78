"""Built-in permission catalog and role mappings.

Built-in permissions are seeded once at startup and never edited. The
role mappings define the built-in system roles and the roles every new
tenant is provisioned with.
"""

from uuid import NAMESPACE_URL, UUID, uuid5

from inkwell.core.permissions.enums import (
    PermissionCode,
    ResourceType,
    RoleType,
    SystemRole,
    TenantRole,
)
from inkwell.core.permissions.schemas import (
    PermissionDefinition,
    PermissionGrant,
    RoleDefinition,
)


BUILT_IN_ROLE_NAMESPACE = uuid5(NAMESPACE_URL, "https://inkwell.dev/rbac/roles")


def _permission(
    code: PermissionCode,
    display_name: str,
    resource_type: ResourceType,
    category: str,
    *,
    system_level: bool = False,
    parent: PermissionCode | None = None,
    requires: tuple[PermissionCode, ...] = (),
    description: str | None = None,
) -> PermissionDefinition:
    return PermissionDefinition(
        code=code.value,
        display_name=display_name,
        description=description,
        resource_type=resource_type,
        category=category,
        is_system_level=system_level,
        is_built_in=True,
        parent_permission_id=parent.value if parent else None,
        required_permissions=[r.value for r in requires],
    )


# Parents are listed before their children so the catalog registers in order.
BUILT_IN_PERMISSIONS: list[PermissionDefinition] = [
    # System
    _permission(
        PermissionCode.MANAGE_SYSTEM,
        "Manage system",
        ResourceType.SYSTEM,
        "system",
        system_level=True,
        description="Full control over platform configuration",
    ),
    _permission(
        PermissionCode.MANAGE_TENANTS,
        "Manage tenants",
        ResourceType.TENANT,
        "system",
        system_level=True,
        parent=PermissionCode.MANAGE_SYSTEM,
    ),
    _permission(
        PermissionCode.VIEW_SYSTEM_ANALYTICS,
        "View system analytics",
        ResourceType.SYSTEM,
        "analytics",
        system_level=True,
    ),
    _permission(
        PermissionCode.MANAGE_SYSTEM_USERS,
        "Manage system users",
        ResourceType.USER,
        "user_management",
        system_level=True,
        parent=PermissionCode.MANAGE_SYSTEM,
    ),
    # Tenant management
    _permission(
        PermissionCode.MANAGE_TENANT_SETTINGS,
        "Manage tenant settings",
        ResourceType.TENANT,
        "tenant_management",
    ),
    _permission(
        PermissionCode.MANAGE_TENANT_USERS,
        "Manage tenant users",
        ResourceType.USER,
        "tenant_management",
        description="Assign roles and manage members within a tenant",
    ),
    _permission(
        PermissionCode.VIEW_TENANT_ANALYTICS,
        "View tenant analytics",
        ResourceType.TENANT,
        "analytics",
    ),
    _permission(
        PermissionCode.MANAGE_TENANT_BILLING,
        "Manage tenant billing",
        ResourceType.TENANT,
        "tenant_management",
    ),
    # Content
    _permission(
        PermissionCode.CREATE_STORY, "Create stories", ResourceType.STORY, "content"
    ),
    _permission(
        PermissionCode.EDIT_STORY, "Edit stories", ResourceType.STORY, "content"
    ),
    _permission(
        PermissionCode.DELETE_STORY,
        "Delete stories",
        ResourceType.STORY,
        "content",
        requires=(PermissionCode.EDIT_STORY,),
    ),
    _permission(
        PermissionCode.PUBLISH_STORY,
        "Publish stories",
        ResourceType.STORY,
        "content",
        requires=(PermissionCode.EDIT_STORY,),
    ),
    _permission(
        PermissionCode.MODERATE_CONTENT,
        "Moderate content",
        ResourceType.STORY,
        "content",
    ),
    _permission(
        PermissionCode.MANAGE_CATEGORIES,
        "Manage categories",
        ResourceType.CATEGORY,
        "content",
    ),
    # Chapters
    _permission(
        PermissionCode.CREATE_CHAPTER, "Create chapters", ResourceType.CHAPTER, "content"
    ),
    _permission(
        PermissionCode.EDIT_CHAPTER, "Edit chapters", ResourceType.CHAPTER, "content"
    ),
    _permission(
        PermissionCode.DELETE_CHAPTER,
        "Delete chapters",
        ResourceType.CHAPTER,
        "content",
        requires=(PermissionCode.EDIT_CHAPTER,),
    ),
    _permission(
        PermissionCode.PUBLISH_CHAPTER,
        "Publish chapters",
        ResourceType.CHAPTER,
        "content",
        requires=(PermissionCode.EDIT_CHAPTER,),
    ),
    # Translation
    _permission(
        PermissionCode.CREATE_TRANSLATION,
        "Create translations",
        ResourceType.STORY,
        "translation",
    ),
    _permission(
        PermissionCode.EDIT_TRANSLATION,
        "Edit translations",
        ResourceType.STORY,
        "translation",
        requires=(PermissionCode.CREATE_TRANSLATION,),
    ),
    _permission(
        PermissionCode.MANAGE_LANGUAGES,
        "Manage languages",
        ResourceType.TENANT,
        "translation",
    ),
    # Reader interactions
    _permission(PermissionCode.COMMENT, "Comment", ResourceType.COMMENT, "interaction"),
    _permission(
        PermissionCode.RATE_STORY, "Rate stories", ResourceType.STORY, "interaction"
    ),
    _permission(
        PermissionCode.BOOKMARK, "Bookmark stories", ResourceType.STORY, "interaction"
    ),
    _permission(
        PermissionCode.FOLLOW_AUTHOR, "Follow authors", ResourceType.USER, "interaction"
    ),
    # Moderation
    _permission(
        PermissionCode.MODERATE_COMMENTS,
        "Moderate comments",
        ResourceType.COMMENT,
        "moderation",
        parent=PermissionCode.MODERATE_CONTENT,
    ),
    _permission(
        PermissionCode.BAN_USERS,
        "Ban users",
        ResourceType.USER,
        "moderation",
        parent=PermissionCode.MODERATE_COMMENTS,
        requires=(PermissionCode.MODERATE_COMMENTS,),
    ),
    _permission(
        PermissionCode.DELETE_COMMENTS,
        "Delete comments",
        ResourceType.COMMENT,
        "moderation",
        parent=PermissionCode.MODERATE_COMMENTS,
        requires=(PermissionCode.MODERATE_COMMENTS,),
    ),
    # Analytics
    _permission(
        PermissionCode.VIEW_STORY_ANALYTICS,
        "View story analytics",
        ResourceType.STORY,
        "analytics",
    ),
    _permission(
        PermissionCode.VIEW_USER_ANALYTICS,
        "View user analytics",
        ResourceType.USER,
        "analytics",
    ),
    _permission(
        PermissionCode.EXPORT_DATA, "Export data", ResourceType.TENANT, "analytics"
    ),
]

BUILT_IN_PERMISSIONS_BY_CODE: dict[str, PermissionDefinition] = {
    p.code: p for p in BUILT_IN_PERMISSIONS
}


SYSTEM_ROLE_PERMISSIONS: dict[SystemRole, list[PermissionCode]] = {
    SystemRole.SUPER_ADMIN: [
        PermissionCode.MANAGE_SYSTEM,
        PermissionCode.MANAGE_TENANTS,
        PermissionCode.VIEW_SYSTEM_ANALYTICS,
        PermissionCode.MANAGE_SYSTEM_USERS,
    ],
    SystemRole.SYSTEM_ADMIN: [
        PermissionCode.MANAGE_TENANTS,
        PermissionCode.VIEW_SYSTEM_ANALYTICS,
        PermissionCode.MANAGE_SYSTEM_USERS,
    ],
    SystemRole.PLATFORM_MANAGER: [
        PermissionCode.VIEW_SYSTEM_ANALYTICS,
        PermissionCode.MANAGE_TENANTS,
    ],
    SystemRole.SUPPORT: [
        PermissionCode.VIEW_SYSTEM_ANALYTICS,
    ],
}

TENANT_ROLE_PERMISSIONS: dict[TenantRole, list[PermissionCode]] = {
    TenantRole.TENANT_OWNER: [
        PermissionCode.MANAGE_TENANT_SETTINGS,
        PermissionCode.MANAGE_TENANT_USERS,
        PermissionCode.VIEW_TENANT_ANALYTICS,
        PermissionCode.MANAGE_TENANT_BILLING,
        PermissionCode.CREATE_STORY,
        PermissionCode.EDIT_STORY,
        PermissionCode.DELETE_STORY,
        PermissionCode.PUBLISH_STORY,
        PermissionCode.MODERATE_CONTENT,
        PermissionCode.MANAGE_CATEGORIES,
        PermissionCode.CREATE_CHAPTER,
        PermissionCode.EDIT_CHAPTER,
        PermissionCode.DELETE_CHAPTER,
        PermissionCode.PUBLISH_CHAPTER,
        PermissionCode.MODERATE_COMMENTS,
        PermissionCode.BAN_USERS,
        PermissionCode.DELETE_COMMENTS,
        PermissionCode.VIEW_STORY_ANALYTICS,
        PermissionCode.VIEW_USER_ANALYTICS,
        PermissionCode.EXPORT_DATA,
    ],
    TenantRole.TENANT_ADMIN: [
        PermissionCode.MANAGE_TENANT_USERS,
        PermissionCode.VIEW_TENANT_ANALYTICS,
        PermissionCode.MODERATE_CONTENT,
        PermissionCode.MODERATE_COMMENTS,
        PermissionCode.BAN_USERS,
        PermissionCode.DELETE_COMMENTS,
        PermissionCode.VIEW_STORY_ANALYTICS,
        PermissionCode.VIEW_USER_ANALYTICS,
    ],
    TenantRole.EDITOR_IN_CHIEF: [
        PermissionCode.CREATE_STORY,
        PermissionCode.EDIT_STORY,
        PermissionCode.DELETE_STORY,
        PermissionCode.PUBLISH_STORY,
        PermissionCode.MODERATE_CONTENT,
        PermissionCode.MANAGE_CATEGORIES,
        PermissionCode.CREATE_CHAPTER,
        PermissionCode.EDIT_CHAPTER,
        PermissionCode.DELETE_CHAPTER,
        PermissionCode.PUBLISH_CHAPTER,
        PermissionCode.MODERATE_COMMENTS,
        PermissionCode.VIEW_STORY_ANALYTICS,
    ],
    TenantRole.EDITOR: [
        PermissionCode.EDIT_STORY,
        PermissionCode.MODERATE_CONTENT,
        PermissionCode.CREATE_CHAPTER,
        PermissionCode.EDIT_CHAPTER,
        PermissionCode.DELETE_CHAPTER,
        PermissionCode.MODERATE_COMMENTS,
    ],
    TenantRole.AUTHOR: [
        PermissionCode.CREATE_STORY,
        PermissionCode.EDIT_STORY,
        PermissionCode.CREATE_CHAPTER,
        PermissionCode.EDIT_CHAPTER,
        PermissionCode.PUBLISH_CHAPTER,
        PermissionCode.VIEW_STORY_ANALYTICS,
    ],
    TenantRole.MODERATOR: [
        PermissionCode.MODERATE_CONTENT,
        PermissionCode.MODERATE_COMMENTS,
        PermissionCode.DELETE_COMMENTS,
    ],
    TenantRole.TRANSLATOR: [
        PermissionCode.CREATE_TRANSLATION,
        PermissionCode.EDIT_TRANSLATION,
        PermissionCode.MANAGE_LANGUAGES,
    ],
    TenantRole.READER: [
        PermissionCode.COMMENT,
        PermissionCode.RATE_STORY,
        PermissionCode.BOOKMARK,
        PermissionCode.FOLLOW_AUTHOR,
    ],
}


def get_system_role_permissions(role: SystemRole) -> list[PermissionCode]:
    """Permissions granted by a built-in system role."""
    return list(SYSTEM_ROLE_PERMISSIONS.get(role, []))


def get_tenant_role_permissions(role: TenantRole) -> list[PermissionCode]:
    """Permissions granted by a built-in tenant role."""
    return list(TENANT_ROLE_PERMISSIONS.get(role, []))


def built_in_role_id(name: str, tenant_id: UUID | None = None) -> UUID:
    """Stable id of a built-in role so seeding stays idempotent."""
    scope = str(tenant_id) if tenant_id else "system"
    return uuid5(BUILT_IN_ROLE_NAMESPACE, f"{scope}:{name}")


def _grants_for(codes: list[PermissionCode]) -> list[PermissionGrant]:
    return [
        PermissionGrant(
            permission=code.value,
            resource_type=BUILT_IN_PERMISSIONS_BY_CODE[code.value].resource_type,
        )
        for code in codes
    ]


def _display_name(name: str) -> str:
    return name.replace("_", " ").title()


def build_system_roles() -> list[RoleDefinition]:
    """Definitions of the built-in system roles."""
    return [
        RoleDefinition(
            id=built_in_role_id(role.value),
            name=role.value,
            display_name=_display_name(role.value),
            type=RoleType.SYSTEM,
            grants=_grants_for(codes),
            is_built_in=True,
        )
        for role, codes in SYSTEM_ROLE_PERMISSIONS.items()
    ]


def build_tenant_roles(tenant_id: UUID) -> list[RoleDefinition]:
    """Definitions of the built-in roles for one tenant."""
    return [
        RoleDefinition(
            id=built_in_role_id(role.value, tenant_id),
            name=role.value,
            display_name=_display_name(role.value),
            type=RoleType.TENANT,
            tenant_id=tenant_id,
            grants=_grants_for(codes),
            is_built_in=True,
        )
        for role, codes in TENANT_ROLE_PERMISSIONS.items()
    ]
