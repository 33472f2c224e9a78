"""Unit tests for the permission registry."""

import pytest

from inkwell.core.errors import ConflictError, NotFoundError, ValidationError
from inkwell.core.permissions.catalog import BUILT_IN_PERMISSIONS
from inkwell.core.permissions.enums import PermissionCode, ResourceType, RoleType
from inkwell.core.permissions.registry import PermissionRegistry
from inkwell.core.permissions.roles import RoleStore
from tests.factories.rbac import InMemoryRBACRepository, PermissionFactory, grant


pytestmark = pytest.mark.unit


class TestRegister:
    """Tests for registering permissions."""

    async def test_register_and_lookup(self, registry: PermissionRegistry) -> None:
        permission = PermissionFactory.build(code="feature_story")

        await registry.register(permission)

        found = await registry.lookup("feature_story")
        assert found.code == "feature_story"
        assert found.resource_type == ResourceType.STORY

    async def test_lookup_normalizes_code(self, registry: PermissionRegistry) -> None:
        await registry.register(PermissionFactory.build(code="feature_story"))

        found = await registry.lookup("  FEATURE_Story ")

        assert found.code == "feature_story"

    async def test_lookup_unknown_raises_not_found(self, registry: PermissionRegistry) -> None:
        with pytest.raises(NotFoundError):
            await registry.lookup("does_not_exist")

    async def test_lookup_malformed_code(self, registry: PermissionRegistry) -> None:
        with pytest.raises(ValidationError) as exc_info:
            await registry.lookup("not a code!")

        assert exc_info.value.error_code == "invalid_permission_code"

    async def test_duplicate_code_rejected(self, registry: PermissionRegistry) -> None:
        await registry.register(PermissionFactory.build(code="feature_story"))

        with pytest.raises(ValidationError) as exc_info:
            await registry.register(PermissionFactory.build(code="feature_story"))

        assert exc_info.value.error_code == "permission_exists"

    async def test_self_requirement_rejected(self, registry: PermissionRegistry) -> None:
        permission = PermissionFactory.build(
            code="feature_story", required_permissions=["feature_story"]
        )

        with pytest.raises(ValidationError) as exc_info:
            await registry.register(permission)

        fields = [e["field"] for e in exc_info.value.details["errors"]]
        assert "required_permissions" in fields

    async def test_self_conflict_rejected(self, registry: PermissionRegistry) -> None:
        permission = PermissionFactory.build(
            code="feature_story", conflicting_permissions=["feature_story"]
        )

        with pytest.raises(ValidationError) as exc_info:
            await registry.register(permission)

        assert exc_info.value.details["errors"] == [
            {
                "field": "conflicting_permissions",
                "message": "A permission cannot conflict with itself",
            }
        ]
        assert await registry.repo.fetch_permission("feature_story") is None

    async def test_required_and_conflicting_overlap_rejected(
        self, registry: PermissionRegistry
    ) -> None:
        await registry.register(PermissionFactory.build(code="base"))
        permission = PermissionFactory.build(
            code="feature_story",
            required_permissions=["base"],
            conflicting_permissions=["base"],
        )

        with pytest.raises(ValidationError):
            await registry.register(permission)

    async def test_unknown_parent_rejected(self, registry: PermissionRegistry) -> None:
        permission = PermissionFactory.build(code="child", parent_permission_id="missing")

        with pytest.raises(ValidationError) as exc_info:
            await registry.register(permission)

        assert exc_info.value.error_code == "unknown_parent_permission"

    async def test_required_cycle_rejected(self, registry: PermissionRegistry) -> None:
        # Stored data may name codes that are registered later
        await registry.register(
            PermissionFactory.build(code="alpha", required_permissions=["beta"])
        )

        with pytest.raises(ValidationError) as exc_info:
            await registry.register(
                PermissionFactory.build(code="beta", required_permissions=["alpha"])
            )

        assert exc_info.value.error_code == "permission_cycle"
        assert exc_info.value.details["cycle"] == ["beta", "alpha", "beta"]
        assert await registry.repo.fetch_permission("beta") is None

    async def test_writes_take_system_lock(
        self, registry: PermissionRegistry, repo: InMemoryRBACRepository
    ) -> None:
        await registry.register(PermissionFactory.build())

        assert repo.locked_scopes == ["system"]


class TestListing:
    """Tests for listing permissions."""

    async def test_list_all_sorted_and_active_only(self, registry: PermissionRegistry) -> None:
        await registry.register(PermissionFactory.build(code="zeta"))
        await registry.register(PermissionFactory.build(code="alpha"))
        await registry.register(PermissionFactory.build(code="hidden", is_active=False))

        codes = [p.code for p in await registry.list_all()]
        all_codes = [p.code for p in await registry.list_all(include_inactive=True)]

        assert codes == ["alpha", "zeta"]
        assert all_codes == ["alpha", "hidden", "zeta"]

    async def test_filters(self, registry: PermissionRegistry) -> None:
        await registry.register(
            PermissionFactory.build(code="pin_comment", resource_type=ResourceType.COMMENT)
        )
        await registry.register(PermissionFactory.build(code="feature_story", category="Curation"))

        by_type = await registry.list_by_resource_type("comment")
        by_category = await registry.list_by_category("curation")

        assert [p.code for p in by_type] == ["pin_comment"]
        assert [p.code for p in by_category] == ["feature_story"]


class TestUpdateAndDelete:
    """Tests for changing custom permissions."""

    async def test_update_custom_permission(self, registry: PermissionRegistry) -> None:
        await registry.register(PermissionFactory.build(code="feature_story"))

        updated = await registry.update("feature_story", {"display_name": "Feature a story"})

        assert updated.display_name == "Feature a story"
        assert (await registry.lookup("feature_story")).display_name == "Feature a story"

    async def test_update_read_only_field_rejected(self, registry: PermissionRegistry) -> None:
        await registry.register(PermissionFactory.build(code="feature_story"))

        with pytest.raises(ValidationError):
            await registry.update("feature_story", {"code": "renamed"})

    async def test_update_invalid_value_rejected(self, registry: PermissionRegistry) -> None:
        await registry.register(PermissionFactory.build(code="feature_story"))

        with pytest.raises(ValidationError):
            await registry.update("feature_story", {"display_name": ""})

    async def test_built_in_permissions_are_immutable(
        self, registry: PermissionRegistry, seeded: None
    ) -> None:
        with pytest.raises(ConflictError) as exc_info:
            await registry.update(PermissionCode.EDIT_STORY.value, {"display_name": "x"})
        assert exc_info.value.error_code == "permission_built_in"

        with pytest.raises(ConflictError):
            await registry.delete(PermissionCode.EDIT_STORY.value)

    async def test_delete_unused_permission(self, registry: PermissionRegistry) -> None:
        await registry.register(PermissionFactory.build(code="feature_story"))

        await registry.delete("feature_story")

        with pytest.raises(NotFoundError):
            await registry.lookup("feature_story")

    async def test_delete_granted_permission_rejected(
        self,
        registry: PermissionRegistry,
        store: RoleStore,
        tenant_id,
    ) -> None:
        await registry.register(PermissionFactory.build(code="feature_story"))
        await store.create_role(
            "curator",
            RoleType.CUSTOM,
            tenant_id=tenant_id,
            grants=[grant("feature_story", ResourceType.STORY)],
        )

        with pytest.raises(ConflictError) as exc_info:
            await registry.delete("feature_story")

        assert exc_info.value.error_code == "permission_in_use"

    async def test_delete_referenced_permission_rejected(
        self, registry: PermissionRegistry
    ) -> None:
        await registry.register(PermissionFactory.build(code="base"))
        await registry.register(
            PermissionFactory.build(code="derived", required_permissions=["base"])
        )

        with pytest.raises(ConflictError) as exc_info:
            await registry.delete("base")

        assert exc_info.value.error_code == "permission_referenced"
        assert exc_info.value.details["referenced_by"] == ["derived"]


class TestSeeding:
    """Tests for seeding the built-in catalog."""

    async def test_seed_is_idempotent(self, registry: PermissionRegistry) -> None:
        first = await registry.seed_built_ins()
        second = await registry.seed_built_ins()

        assert len(first) == len(BUILT_IN_PERMISSIONS)
        assert second == []
        assert len(await registry.list_all()) == len(BUILT_IN_PERMISSIONS)

    async def test_seeded_prerequisites(self, registry: PermissionRegistry) -> None:
        await registry.seed_built_ins()

        publish = await registry.lookup(PermissionCode.PUBLISH_STORY.value)

        assert publish.is_built_in
        assert publish.required_permissions == [PermissionCode.EDIT_STORY.value]
