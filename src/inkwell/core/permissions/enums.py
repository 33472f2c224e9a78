"""Enumerations for the RBAC model."""

from enum import Enum


class ResourceType(str, Enum):
    """Resource types a permission or grant applies to."""

    SYSTEM = "system"
    TENANT = "tenant"
    STORY = "story"
    CHAPTER = "chapter"
    USER = "user"
    COMMENT = "comment"
    CATEGORY = "category"


class RoleType(str, Enum):
    """Scope of a role.

    System roles are platform-wide; tenant and custom roles belong to
    exactly one tenant.
    """

    SYSTEM = "system"
    TENANT = "tenant"
    CUSTOM = "custom"


class SystemRole(str, Enum):
    """Names of the built-in system roles."""

    SUPER_ADMIN = "super_admin"
    SYSTEM_ADMIN = "system_admin"
    PLATFORM_MANAGER = "platform_manager"
    SUPPORT = "support"


class TenantRole(str, Enum):
    """Names of the built-in roles provisioned for every tenant."""

    TENANT_OWNER = "tenant_owner"
    TENANT_ADMIN = "tenant_admin"
    EDITOR_IN_CHIEF = "editor_in_chief"
    EDITOR = "editor"
    AUTHOR = "author"
    MODERATOR = "moderator"
    TRANSLATOR = "translator"
    READER = "reader"


class PermissionCode(str, Enum):
    """Codes of the built-in permissions."""

    # System
    MANAGE_SYSTEM = "manage_system"
    MANAGE_TENANTS = "manage_tenants"
    VIEW_SYSTEM_ANALYTICS = "view_system_analytics"
    MANAGE_SYSTEM_USERS = "manage_system_users"

    # Tenant management
    MANAGE_TENANT_SETTINGS = "manage_tenant_settings"
    MANAGE_TENANT_USERS = "manage_tenant_users"
    VIEW_TENANT_ANALYTICS = "view_tenant_analytics"
    MANAGE_TENANT_BILLING = "manage_tenant_billing"

    # Content
    CREATE_STORY = "create_story"
    EDIT_STORY = "edit_story"
    DELETE_STORY = "delete_story"
    PUBLISH_STORY = "publish_story"
    MODERATE_CONTENT = "moderate_content"
    MANAGE_CATEGORIES = "manage_categories"

    # Chapters
    CREATE_CHAPTER = "create_chapter"
    EDIT_CHAPTER = "edit_chapter"
    DELETE_CHAPTER = "delete_chapter"
    PUBLISH_CHAPTER = "publish_chapter"

    # Translation
    CREATE_TRANSLATION = "create_translation"
    EDIT_TRANSLATION = "edit_translation"
    MANAGE_LANGUAGES = "manage_languages"

    # Reader interactions
    COMMENT = "comment"
    RATE_STORY = "rate_story"
    BOOKMARK = "bookmark"
    FOLLOW_AUTHOR = "follow_author"

    # Moderation
    MODERATE_COMMENTS = "moderate_comments"
    BAN_USERS = "ban_users"
    DELETE_COMMENTS = "delete_comments"

    # Analytics
    VIEW_STORY_ANALYTICS = "view_story_analytics"
    VIEW_USER_ANALYTICS = "view_user_analytics"
    EXPORT_DATA = "export_data"


class Decision(str, Enum):
    """Outcome of an authorization check."""

    GRANTED = "granted"
    DENIED = "denied"
