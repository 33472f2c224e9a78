"""Unit tests for role resolution.

These tests verify:
- Inheritance union and grant deduplication
- Prerequisite filtering to a fixed point
- Conflicting permissions as a hard failure
- Corrupt graphs surfacing as integrity errors
"""

from uuid import UUID, uuid4

import pytest

from inkwell.core.errors import ConflictError, IntegrityError, NotFoundError
from inkwell.core.permissions.enums import PermissionCode, ResourceType, RoleType
from inkwell.core.permissions.registry import PermissionRegistry
from inkwell.core.permissions.resolver import RoleResolver
from inkwell.core.permissions.roles import RoleStore
from inkwell.core.permissions.schemas import GrantConditions, RoleDefinition
from tests.factories.rbac import InMemoryRBACRepository, PermissionFactory, grant


pytestmark = pytest.mark.unit


@pytest.fixture(autouse=True)
async def _catalog(seeded: None) -> None:
    """Every test here needs the built-in permissions."""


def _raw_role(name: str, tenant_id: UUID, **fields) -> RoleDefinition:
    return RoleDefinition(
        name=name,
        display_name=name,
        type=RoleType.CUSTOM,
        tenant_id=tenant_id,
        **fields,
    )


class TestInheritance:
    """Tests for the inheritance walk."""

    async def test_editor_inherits_author(
        self, store: RoleStore, resolver: RoleResolver, tenant_id: UUID
    ) -> None:
        author = await store.create_role(
            "author",
            RoleType.CUSTOM,
            tenant_id=tenant_id,
            grants=[grant(PermissionCode.CREATE_STORY), grant(PermissionCode.EDIT_STORY)],
        )
        editor = await store.create_role(
            "editor",
            RoleType.CUSTOM,
            tenant_id=tenant_id,
            grants=[grant(PermissionCode.MODERATE_CONTENT)],
            inherits_from=[author.id],
        )

        effective = await resolver.resolve(editor.id)

        assert effective.permissions() == {"create_story", "edit_story", "moderate_content"}
        assert all(r.grant.resource_type == ResourceType.STORY for r in effective.grants)
        create = next(r for r in effective.grants if r.grant.permission == "create_story")
        assert create.source_role_id == author.id
        assert create.chain == ["editor", "author"]

    async def test_grants_deduplicated_by_key(
        self, store: RoleStore, resolver: RoleResolver, tenant_id: UUID
    ) -> None:
        base = await store.create_role(
            "base", RoleType.CUSTOM, tenant_id=tenant_id, grants=[grant(PermissionCode.COMMENT)]
        )
        child = await store.create_role(
            "child",
            RoleType.CUSTOM,
            tenant_id=tenant_id,
            grants=[grant(PermissionCode.COMMENT)],
            inherits_from=[base.id],
        )

        effective = await resolver.resolve(child.id)

        assert len(effective.grants) == 1
        assert effective.grants[0].source_role_id == child.id

    async def test_resource_scoped_grants_kept_separately(
        self, store: RoleStore, resolver: RoleResolver, tenant_id: UUID
    ) -> None:
        role = await store.create_role(
            "curator",
            RoleType.CUSTOM,
            tenant_id=tenant_id,
            grants=[
                grant(PermissionCode.BOOKMARK),
                grant(PermissionCode.BOOKMARK, resource_id="story-1"),
            ],
        )

        effective = await resolver.resolve(role.id)

        assert len(effective.grants) == 2

    async def test_unconditional_grant_replaces_conditional(
        self, store: RoleStore, resolver: RoleResolver, tenant_id: UUID
    ) -> None:
        base = await store.create_role(
            "base",
            RoleType.CUSTOM,
            tenant_id=tenant_id,
            grants=[grant(PermissionCode.COMMENT)],
        )
        child = await store.create_role(
            "child",
            RoleType.CUSTOM,
            tenant_id=tenant_id,
            grants=[grant(PermissionCode.COMMENT, conditions=GrantConditions(owner_only=True))],
            inherits_from=[base.id],
        )

        effective = await resolver.resolve(child.id)

        assert len(effective.grants) == 1
        assert effective.grants[0].grant.conditions is None
        assert effective.grants[0].source_role_id == base.id

    async def test_inactive_parent_contributes_nothing(
        self, store: RoleStore, resolver: RoleResolver, tenant_id: UUID
    ) -> None:
        grandparent = await store.create_role(
            "grandparent",
            RoleType.CUSTOM,
            tenant_id=tenant_id,
            grants=[grant(PermissionCode.BOOKMARK)],
        )
        parent = await store.create_role(
            "parent",
            RoleType.CUSTOM,
            tenant_id=tenant_id,
            grants=[grant(PermissionCode.COMMENT)],
            inherits_from=[grandparent.id],
        )
        child = await store.create_role(
            "child", RoleType.CUSTOM, tenant_id=tenant_id, inherits_from=[parent.id]
        )
        await store.update_role(parent.id, {"is_active": False})

        effective = await resolver.resolve(child.id)

        assert effective.grants == []

    async def test_inactive_role_resolves_empty(
        self, store: RoleStore, resolver: RoleResolver, tenant_id: UUID
    ) -> None:
        role = await store.create_role(
            "reader2", RoleType.CUSTOM, tenant_id=tenant_id, grants=[grant(PermissionCode.COMMENT)]
        )
        await store.update_role(role.id, {"is_active": False})

        assert (await resolver.resolve(role.id)).grants == []

    async def test_inactive_tenant_resolves_empty(
        self, store: RoleStore, resolver: RoleResolver, repo: InMemoryRBACRepository
    ) -> None:
        tenant_id = repo.add_tenant()
        role = await store.create_role(
            "reader2", RoleType.CUSTOM, tenant_id=tenant_id, grants=[grant(PermissionCode.COMMENT)]
        )
        repo.tenants[tenant_id] = repo.tenants[tenant_id].model_copy(update={"is_active": False})

        assert (await resolver.resolve(role.id)).grants == []

    async def test_inactive_permission_dropped(
        self,
        registry: PermissionRegistry,
        store: RoleStore,
        resolver: RoleResolver,
        tenant_id: UUID,
    ) -> None:
        await registry.register(PermissionFactory.build(code="feature_story"))
        role = await store.create_role(
            "curator",
            RoleType.CUSTOM,
            tenant_id=tenant_id,
            grants=[grant("feature_story", ResourceType.STORY), grant(PermissionCode.BOOKMARK)],
        )
        await registry.update("feature_story", {"is_active": False})

        assert (await resolver.resolve(role.id)).permissions() == {"bookmark"}

    async def test_unknown_role(self, resolver: RoleResolver) -> None:
        with pytest.raises(NotFoundError):
            await resolver.resolve(uuid4())


class TestPrerequisites:
    """Tests for prerequisite filtering."""

    async def test_publish_without_edit_is_dropped(
        self, store: RoleStore, resolver: RoleResolver, tenant_id: UUID
    ) -> None:
        role = await store.create_role(
            "publisher",
            RoleType.CUSTOM,
            tenant_id=tenant_id,
            grants=[grant(PermissionCode.PUBLISH_STORY)],
        )

        effective = await resolver.resolve(role.id)

        assert effective.grants == []

    async def test_prerequisite_satisfied_through_inheritance(
        self, store: RoleStore, resolver: RoleResolver, tenant_id: UUID
    ) -> None:
        editor = await store.create_role(
            "editor",
            RoleType.CUSTOM,
            tenant_id=tenant_id,
            grants=[grant(PermissionCode.EDIT_STORY)],
        )
        publisher = await store.create_role(
            "publisher",
            RoleType.CUSTOM,
            tenant_id=tenant_id,
            grants=[grant(PermissionCode.PUBLISH_STORY)],
            inherits_from=[editor.id],
        )

        effective = await resolver.resolve(publisher.id)

        assert effective.permissions() == {"edit_story", "publish_story"}

    async def test_filtering_runs_to_fixed_point(
        self,
        registry: PermissionRegistry,
        store: RoleStore,
        resolver: RoleResolver,
        tenant_id: UUID,
    ) -> None:
        # level_two needs level_one, which needs the missing level_zero
        await registry.register(PermissionFactory.build(code="level_zero"))
        await registry.register(
            PermissionFactory.build(code="level_one", required_permissions=["level_zero"])
        )
        await registry.register(
            PermissionFactory.build(code="level_two", required_permissions=["level_one"])
        )
        role = await store.create_role(
            "climber",
            RoleType.CUSTOM,
            tenant_id=tenant_id,
            grants=[
                grant("level_two", ResourceType.STORY),
                grant("level_one", ResourceType.STORY),
                grant(PermissionCode.BOOKMARK),
            ],
        )

        effective = await resolver.resolve(role.id)

        assert effective.permissions() == {"bookmark"}


class TestConflicts:
    """Conflicting permissions are a configuration error."""

    async def test_conflict_through_inheritance(
        self,
        registry: PermissionRegistry,
        store: RoleStore,
        resolver: RoleResolver,
        tenant_id: UUID,
    ) -> None:
        await registry.register(PermissionFactory.build(code="approve_payout"))
        await registry.register(
            PermissionFactory.build(
                code="request_payout", conflicting_permissions=["approve_payout"]
            )
        )
        approver = await store.create_role(
            "approver",
            RoleType.CUSTOM,
            tenant_id=tenant_id,
            grants=[grant("approve_payout", ResourceType.STORY)],
        )
        requester = await store.create_role(
            "requester",
            RoleType.CUSTOM,
            tenant_id=tenant_id,
            grants=[grant("request_payout", ResourceType.STORY)],
            inherits_from=[approver.id],
        )

        with pytest.raises(ConflictError) as exc_info:
            await resolver.resolve(requester.id)

        details = exc_info.value.details
        assert exc_info.value.error_code == "conflicting_permissions"
        assert details["permissions"] == ["approve_payout", "request_payout"]
        assert details["chains"] == {
            "approve_payout": ["requester", "approver"],
            "request_payout": ["requester"],
        }

    async def test_conflict_declared_on_one_side_only(
        self,
        registry: PermissionRegistry,
        store: RoleStore,
        resolver: RoleResolver,
        tenant_id: UUID,
    ) -> None:
        await registry.register(
            PermissionFactory.build(code="alpha", conflicting_permissions=["beta"])
        )
        await registry.register(PermissionFactory.build(code="beta"))
        role = await store.create_role(
            "both",
            RoleType.CUSTOM,
            tenant_id=tenant_id,
            grants=[grant("beta", ResourceType.STORY), grant("alpha", ResourceType.STORY)],
        )

        with pytest.raises(ConflictError):
            await resolver.resolve(role.id)


class TestIntegrity:
    """Corrupt stored data is surfaced, never repaired."""

    async def test_cycle_in_stored_graph(
        self, resolver: RoleResolver, repo: InMemoryRBACRepository, tenant_id: UUID
    ) -> None:
        a = _raw_role("a", tenant_id)
        b = _raw_role("b", tenant_id, inherits_from=[a.id])
        a.inherits_from = [b.id]
        repo.put_role(a)
        repo.put_role(b)

        with pytest.raises(IntegrityError) as exc_info:
            await resolver.resolve(a.id)

        assert exc_info.value.details["cycle"] == ["a", "b", "a"]

    async def test_missing_parent(
        self, resolver: RoleResolver, repo: InMemoryRBACRepository, tenant_id: UUID
    ) -> None:
        missing = uuid4()
        role = repo.put_role(_raw_role("orphan", tenant_id, inherits_from=[missing]))

        with pytest.raises(IntegrityError) as exc_info:
            await resolver.resolve(role.id)

        assert exc_info.value.details["missing_role_id"] == str(missing)
        assert exc_info.value.details["chain"] == ["orphan"]

    async def test_missing_permission(
        self, resolver: RoleResolver, repo: InMemoryRBACRepository, tenant_id: UUID
    ) -> None:
        role = repo.put_role(
            _raw_role("ghost", tenant_id, grants=[grant("vanished", ResourceType.STORY)])
        )

        with pytest.raises(IntegrityError):
            await resolver.resolve(role.id)

    async def test_missing_tenant(
        self, resolver: RoleResolver, repo: InMemoryRBACRepository
    ) -> None:
        role = repo.put_role(_raw_role("stray", uuid4()))

        with pytest.raises(IntegrityError):
            await resolver.resolve(role.id)


class TestDeterminism:
    """Resolving twice without mutation yields identical results."""

    async def test_resolution_is_deterministic(
        self, store: RoleStore, resolver: RoleResolver, tenant_id: UUID
    ) -> None:
        await store.provision_tenant_roles(tenant_id)
        base = await store.create_role(
            "base",
            RoleType.CUSTOM,
            tenant_id=tenant_id,
            grants=[grant(PermissionCode.EDIT_CHAPTER), grant(PermissionCode.COMMENT)],
        )
        role = await store.create_role(
            "combo",
            RoleType.CUSTOM,
            tenant_id=tenant_id,
            grants=[grant(PermissionCode.PUBLISH_CHAPTER), grant(PermissionCode.BOOKMARK)],
            inherits_from=[base.id],
        )

        first = await resolver.resolve(role.id)
        second = await resolver.resolve(role.id)

        assert first == second
        assert [r.grant.permission for r in first.grants] == [
            "publish_chapter",
            "bookmark",
            "edit_chapter",
            "comment",
        ]
