"""Unit tests for permission checker.

These tests verify the PermissionChecker logic including:
- System-level permissions through the system role
- Tenant and custom roles within the requested tenant
- Resource-scoped and conditional grants
"""

from uuid import UUID, uuid4

import pytest

from inkwell.core.errors import IntegrityError
from inkwell.core.permissions.catalog import built_in_role_id
from inkwell.core.permissions.checker import PermissionChecker
from inkwell.core.permissions.enums import (
    Decision,
    PermissionCode,
    ResourceType,
    RoleType,
    SystemRole,
    TenantRole,
)
from inkwell.core.permissions.roles import RoleStore
from inkwell.core.permissions.schemas import (
    AuthorizationContext,
    GrantConditions,
    UserAssignments,
)
from tests.factories.rbac import InMemoryRBACRepository, grant


pytestmark = pytest.mark.unit


@pytest.fixture(autouse=True)
async def _catalog(seeded: None, store: RoleStore, tenant_id: UUID) -> None:
    """Built-in catalog, system roles and the tenant's built-in roles."""
    await store.provision_tenant_roles(tenant_id)


def _tenant_user(tenant_id: UUID, role: TenantRole, **fields) -> UserAssignments:
    return UserAssignments(
        user_id=uuid4(),
        tenant_roles={tenant_id: built_in_role_id(role.value, tenant_id)},
        **fields,
    )


class TestTenantRoles:
    """Tests for grants held through tenant roles."""

    async def test_reader_cannot_delete_comments(
        self, checker: PermissionChecker, tenant_id: UUID
    ) -> None:
        user = _tenant_user(tenant_id, TenantRole.READER)

        decision = await checker.authorize(
            user, tenant_id, PermissionCode.DELETE_COMMENTS.value, ResourceType.COMMENT
        )

        assert decision == Decision.DENIED

    async def test_reader_can_comment(self, checker: PermissionChecker, tenant_id: UUID) -> None:
        user = _tenant_user(tenant_id, TenantRole.READER)

        decision = await checker.authorize(user, tenant_id, "COMMENT", ResourceType.COMMENT)

        assert decision == Decision.GRANTED

    async def test_resource_type_must_match(
        self, checker: PermissionChecker, tenant_id: UUID
    ) -> None:
        user = _tenant_user(tenant_id, TenantRole.READER)

        assert not await checker.has_permission(user, tenant_id, "comment", ResourceType.STORY)

    async def test_moderator_can_delete_comments(
        self, checker: PermissionChecker, tenant_id: UUID
    ) -> None:
        user = _tenant_user(tenant_id, TenantRole.MODERATOR)

        assert await checker.has_permission(
            user, tenant_id, PermissionCode.DELETE_COMMENTS.value, ResourceType.COMMENT
        )

    async def test_roles_do_not_leak_across_tenants(
        self,
        checker: PermissionChecker,
        store: RoleStore,
        repo: InMemoryRBACRepository,
        tenant_id: UUID,
    ) -> None:
        other_tenant = repo.add_tenant()
        await store.provision_tenant_roles(other_tenant)
        user = _tenant_user(tenant_id, TenantRole.TENANT_OWNER)

        assert await checker.has_permission(user, tenant_id, "edit_story", ResourceType.STORY)
        assert not await checker.has_permission(
            user, other_tenant, "edit_story", ResourceType.STORY
        )
        assert not await checker.has_permission(user, None, "edit_story", ResourceType.STORY)

    async def test_inactive_tenant_denies(
        self, checker: PermissionChecker, repo: InMemoryRBACRepository, tenant_id: UUID
    ) -> None:
        user = _tenant_user(tenant_id, TenantRole.TENANT_OWNER)
        repo.tenants[tenant_id] = repo.tenants[tenant_id].model_copy(update={"is_active": False})

        assert not await checker.has_permission(user, tenant_id, "edit_story", ResourceType.STORY)

    async def test_tenant_role_from_another_tenant_is_corrupt(
        self,
        checker: PermissionChecker,
        store: RoleStore,
        repo: InMemoryRBACRepository,
        tenant_id: UUID,
    ) -> None:
        other_tenant = repo.add_tenant()
        await store.provision_tenant_roles(other_tenant)
        user = UserAssignments(
            user_id=uuid4(),
            tenant_roles={tenant_id: built_in_role_id(TenantRole.READER.value, other_tenant)},
        )

        with pytest.raises(IntegrityError):
            await checker.authorize(user, tenant_id, "comment", ResourceType.COMMENT)

    async def test_missing_assigned_role_is_corrupt(
        self, checker: PermissionChecker, tenant_id: UUID
    ) -> None:
        user = UserAssignments(user_id=uuid4(), tenant_roles={tenant_id: uuid4()})

        with pytest.raises(IntegrityError):
            await checker.authorize(user, tenant_id, "comment", ResourceType.COMMENT)


class TestCustomRoles:
    """Tests for custom roles and grant refinements."""

    async def test_custom_role_adds_to_tenant_role(
        self, checker: PermissionChecker, store: RoleStore, tenant_id: UUID
    ) -> None:
        translator = await store.create_role(
            "guest translator",
            RoleType.CUSTOM,
            tenant_id=tenant_id,
            grants=[grant(PermissionCode.CREATE_TRANSLATION)],
        )
        user = _tenant_user(tenant_id, TenantRole.READER, custom_role_ids=[translator.id])

        assert await checker.has_permission(
            user, tenant_id, "create_translation", ResourceType.STORY
        )
        assert await checker.effective_permissions(user, tenant_id) == {
            "comment",
            "rate_story",
            "bookmark",
            "follow_author",
            "create_translation",
        }

    async def test_custom_role_only_applies_in_its_tenant(
        self,
        checker: PermissionChecker,
        store: RoleStore,
        repo: InMemoryRBACRepository,
        tenant_id: UUID,
    ) -> None:
        other_tenant = repo.add_tenant()
        role = await store.create_role(
            "guest",
            RoleType.CUSTOM,
            tenant_id=other_tenant,
            grants=[grant(PermissionCode.BOOKMARK)],
        )
        user = UserAssignments(user_id=uuid4(), custom_role_ids=[role.id])

        assert not await checker.has_permission(user, tenant_id, "bookmark", ResourceType.STORY)
        assert await checker.has_permission(user, other_tenant, "bookmark", ResourceType.STORY)

    async def test_resource_scoped_grant(
        self, checker: PermissionChecker, store: RoleStore, tenant_id: UUID
    ) -> None:
        role = await store.create_role(
            "story editor",
            RoleType.CUSTOM,
            tenant_id=tenant_id,
            grants=[grant(PermissionCode.EDIT_STORY, resource_id="story-42")],
        )
        user = UserAssignments(user_id=uuid4(), custom_role_ids=[role.id])

        assert await checker.has_permission(
            user, tenant_id, "edit_story", ResourceType.STORY, resource_id="story-42"
        )
        assert not await checker.has_permission(
            user, tenant_id, "edit_story", ResourceType.STORY, resource_id="story-7"
        )
        assert not await checker.has_permission(user, tenant_id, "edit_story", ResourceType.STORY)

    async def test_owner_only_condition(
        self, checker: PermissionChecker, store: RoleStore, tenant_id: UUID
    ) -> None:
        role = await store.create_role(
            "own stories",
            RoleType.CUSTOM,
            tenant_id=tenant_id,
            grants=[
                grant(PermissionCode.EDIT_STORY, conditions=GrantConditions(owner_only=True))
            ],
        )
        user = UserAssignments(user_id=uuid4(), custom_role_ids=[role.id])
        own = AuthorizationContext(owner_id=str(user.user_id))
        foreign = AuthorizationContext(owner_id=str(uuid4()))

        assert await checker.has_permission(
            user, tenant_id, "edit_story", ResourceType.STORY, context=own
        )
        assert not await checker.has_permission(
            user, tenant_id, "edit_story", ResourceType.STORY, context=foreign
        )
        assert not await checker.has_permission(user, tenant_id, "edit_story", ResourceType.STORY)

    async def test_status_condition(
        self, checker: PermissionChecker, store: RoleStore, tenant_id: UUID
    ) -> None:
        role = await store.create_role(
            "draft editor",
            RoleType.CUSTOM,
            tenant_id=tenant_id,
            grants=[
                grant(
                    PermissionCode.EDIT_STORY,
                    conditions=GrantConditions(status=["draft", "review"]),
                )
            ],
        )
        user = UserAssignments(user_id=uuid4(), custom_role_ids=[role.id])

        assert await checker.has_permission(
            user,
            tenant_id,
            "edit_story",
            ResourceType.STORY,
            context=AuthorizationContext(status="review"),
        )
        assert not await checker.has_permission(
            user,
            tenant_id,
            "edit_story",
            ResourceType.STORY,
            context=AuthorizationContext(status="published"),
        )


class TestSystemRoles:
    """Tests for the system role path."""

    async def test_super_admin_manages_system(self, checker: PermissionChecker) -> None:
        user = UserAssignments(
            user_id=uuid4(), system_role_id=built_in_role_id(SystemRole.SUPER_ADMIN.value)
        )

        decision = await checker.authorize(user, None, "manage_system", ResourceType.SYSTEM)

        assert decision == Decision.GRANTED

    async def test_support_cannot_manage_tenants(self, checker: PermissionChecker) -> None:
        user = UserAssignments(
            user_id=uuid4(), system_role_id=built_in_role_id(SystemRole.SUPPORT.value)
        )

        assert not await checker.has_permission(user, None, "manage_tenants", ResourceType.TENANT)

    async def test_system_role_does_not_grant_tenant_permissions(
        self, checker: PermissionChecker, store: RoleStore, tenant_id: UUID
    ) -> None:
        # A system role granting a tenant-level permission only helps system-level checks
        role = await store.create_role(
            "global editor", RoleType.SYSTEM, grants=[grant(PermissionCode.EDIT_STORY)]
        )
        user = UserAssignments(user_id=uuid4(), system_role_id=role.id)

        assert not await checker.has_permission(user, tenant_id, "edit_story", ResourceType.STORY)

    async def test_system_grant_limited_to_resource(
        self, checker: PermissionChecker, store: RoleStore
    ) -> None:
        role = await store.create_role(
            "tenant x steward",
            RoleType.SYSTEM,
            grants=[grant(PermissionCode.MANAGE_TENANTS, resource_id="tenant-x")],
        )
        user = UserAssignments(user_id=uuid4(), system_role_id=role.id)

        granted = await checker.authorize(
            user, None, "manage_tenants", ResourceType.TENANT, resource_id="tenant-x"
        )
        denied = await checker.authorize(
            user, None, "manage_tenants", ResourceType.TENANT, resource_id="tenant-y"
        )

        assert granted == Decision.GRANTED
        assert denied == Decision.DENIED

    async def test_system_grant_conditions_apply(
        self, checker: PermissionChecker, store: RoleStore
    ) -> None:
        role = await store.create_role(
            "own accounts",
            RoleType.SYSTEM,
            grants=[
                grant(
                    PermissionCode.MANAGE_SYSTEM_USERS,
                    conditions=GrantConditions(owner_only=True),
                )
            ],
        )
        user = UserAssignments(user_id=uuid4(), system_role_id=role.id)

        own = await checker.authorize(
            user,
            None,
            "manage_system_users",
            ResourceType.USER,
            context=AuthorizationContext(owner_id=str(user.user_id)),
        )
        other = await checker.authorize(
            user,
            None,
            "manage_system_users",
            ResourceType.USER,
            context=AuthorizationContext(owner_id=str(uuid4())),
        )

        assert own == Decision.GRANTED
        assert other == Decision.DENIED

    async def test_non_system_role_as_system_role_is_corrupt(
        self, checker: PermissionChecker, tenant_id: UUID
    ) -> None:
        user = UserAssignments(
            user_id=uuid4(),
            system_role_id=built_in_role_id(TenantRole.READER.value, tenant_id),
        )

        with pytest.raises(IntegrityError):
            await checker.authorize(user, None, "manage_system", ResourceType.SYSTEM)


class TestCombinators:
    """Tests for any/all permission checks."""

    async def test_any_and_all(self, checker: PermissionChecker, tenant_id: UUID) -> None:
        user = _tenant_user(tenant_id, TenantRole.AUTHOR)
        create = ("create_story", ResourceType.STORY)
        publish = ("publish_story", ResourceType.STORY)

        assert await checker.has_any_permission(user, tenant_id, [publish, create])
        assert not await checker.has_all_permissions(user, tenant_id, [publish, create])
        assert await checker.has_all_permissions(user, tenant_id, [create])

    async def test_effective_permissions_include_system_level(
        self, checker: PermissionChecker, tenant_id: UUID
    ) -> None:
        user = _tenant_user(
            tenant_id,
            TenantRole.READER,
            system_role_id=built_in_role_id(SystemRole.SUPPORT.value),
        )

        codes = await checker.effective_permissions(user, tenant_id)

        assert "view_system_analytics" in codes
        assert "comment" in codes
