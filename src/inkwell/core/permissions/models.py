"""Permission system database models.

This module defines the RBAC (Role-Based Access Control) tables:
- Permission: A capability code with its prerequisites and conflicts
- Role: A named set of grants, system-wide or scoped to one tenant
- RoleGrant: One permission grant held by a role
- RoleParent: Ordered inheritance link between two roles
"""

from typing import Any
from uuid import UUID

from sqlalchemy import (
    JSON,
    CheckConstraint,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from inkwell.core.constants import (
    MAX_CATEGORY_LENGTH,
    MAX_DESCRIPTION_LENGTH,
    MAX_DISPLAY_NAME_LENGTH,
    MAX_PERMISSION_CODE_LENGTH,
    MAX_RESOURCE_ID_LENGTH,
    MAX_RESOURCE_TYPE_LENGTH,
    MAX_ROLE_NAME_LENGTH,
)
from inkwell.core.database.base import Base, TimestampMixin, UUIDMixin


class Permission(Base, UUIDMixin, TimestampMixin):
    """Permission model representing an atomic capability.

    Permissions are global (not tenant-scoped). Built-in permissions
    are seeded at startup; custom ones are added by administrators.

    Attributes:
        code: Unique lower-case code (e.g., "publish_story")
        resource_type: Resource the permission applies to
        category: Grouping used by admin tooling
        is_system_level: Whether only system roles may grant it
        parent_permission_id: Code of the grouping parent
        required_permissions: Codes that must also be held
        conflicting_permissions: Codes that must never be held alongside
    """

    __tablename__ = "permissions"

    code: Mapped[str] = mapped_column(
        String(MAX_PERMISSION_CODE_LENGTH),
        nullable=False,
        unique=True,
        index=True,
    )
    display_name: Mapped[str] = mapped_column(
        String(MAX_DISPLAY_NAME_LENGTH),
        nullable=False,
    )
    description: Mapped[str | None] = mapped_column(
        String(MAX_DESCRIPTION_LENGTH),
        nullable=True,
    )
    resource_type: Mapped[str] = mapped_column(
        String(MAX_RESOURCE_TYPE_LENGTH),
        nullable=False,
        index=True,
    )
    category: Mapped[str] = mapped_column(
        String(MAX_CATEGORY_LENGTH),
        nullable=False,
        index=True,
    )
    is_system_level: Mapped[bool] = mapped_column(default=False, nullable=False)
    is_built_in: Mapped[bool] = mapped_column(default=False, nullable=False)
    is_active: Mapped[bool] = mapped_column(default=True, nullable=False)
    parent_permission_id: Mapped[str | None] = mapped_column(
        ForeignKey("permissions.code", ondelete="RESTRICT"),
        nullable=True,
    )
    required_permissions: Mapped[list[str]] = mapped_column(
        JSON,
        default=list,
        nullable=False,
    )
    conflicting_permissions: Mapped[list[str]] = mapped_column(
        JSON,
        default=list,
        nullable=False,
    )
    created_by: Mapped[str | None] = mapped_column(String(255), nullable=True)

    def __repr__(self) -> str:
        return f"<Permission({self.code}:{self.resource_type})>"


class Role(Base, UUIDMixin, TimestampMixin):
    """Role model representing a named set of permission grants.

    System roles have no tenant; tenant and custom roles belong to
    exactly one tenant. Names are unique per tenant, and globally
    among system roles.
    """

    __tablename__ = "roles"
    __table_args__ = (
        UniqueConstraint("tenant_id", "name", name="uq_role_tenant_name"),
        Index(
            "uq_role_system_name",
            "name",
            unique=True,
            postgresql_where=text("tenant_id IS NULL"),
            sqlite_where=text("tenant_id IS NULL"),
        ),
        CheckConstraint(
            "(type = 'system' AND tenant_id IS NULL) "
            "OR (type <> 'system' AND tenant_id IS NOT NULL)",
            name="ck_role_type_tenant",
        ),
    )

    name: Mapped[str] = mapped_column(
        String(MAX_ROLE_NAME_LENGTH),
        nullable=False,
        index=True,
    )
    display_name: Mapped[str] = mapped_column(
        String(MAX_DISPLAY_NAME_LENGTH),
        nullable=False,
    )
    description: Mapped[str | None] = mapped_column(
        String(MAX_DESCRIPTION_LENGTH),
        nullable=True,
    )
    type: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    tenant_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("tenants.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
    is_active: Mapped[bool] = mapped_column(default=True, nullable=False)
    is_built_in: Mapped[bool] = mapped_column(default=False, nullable=False)
    created_by: Mapped[str] = mapped_column(
        String(255),
        default="system",
        nullable=False,
    )

    # Relationships
    grants: Mapped[list["RoleGrant"]] = relationship(
        "RoleGrant",
        cascade="all, delete-orphan",
        order_by="RoleGrant.position",
        lazy="selectin",
    )
    parent_links: Mapped[list["RoleParent"]] = relationship(
        "RoleParent",
        foreign_keys="RoleParent.role_id",
        cascade="all, delete-orphan",
        order_by="RoleParent.position",
        lazy="selectin",
    )

    @property
    def inherits_from(self) -> list[UUID]:
        """Parent role ids in declaration order."""
        return [link.parent_id for link in self.parent_links]

    def __repr__(self) -> str:
        return f"<Role(id={self.id}, name={self.name}, tenant_id={self.tenant_id})>"


class RoleGrant(Base, UUIDMixin):
    """One permission grant held directly by a role."""

    __tablename__ = "role_grants"
    __table_args__ = (Index("ix_role_grants_permission", "permission"),)

    role_id: Mapped[UUID] = mapped_column(
        ForeignKey("roles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    permission: Mapped[str] = mapped_column(
        ForeignKey("permissions.code", ondelete="RESTRICT"),
        nullable=False,
    )
    resource_type: Mapped[str] = mapped_column(
        String(MAX_RESOURCE_TYPE_LENGTH),
        nullable=False,
    )
    resource_id: Mapped[str | None] = mapped_column(
        String(MAX_RESOURCE_ID_LENGTH),
        nullable=True,
    )
    conditions: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)

    def __repr__(self) -> str:
        return f"<RoleGrant(role_id={self.role_id}, permission={self.permission})>"


class RoleParent(Base):
    """Junction table holding the ordered ``inherits_from`` list of a role."""

    __tablename__ = "role_parents"

    role_id: Mapped[UUID] = mapped_column(
        ForeignKey("roles.id", ondelete="CASCADE"),
        primary_key=True,
    )
    parent_id: Mapped[UUID] = mapped_column(
        ForeignKey("roles.id", ondelete="RESTRICT"),
        primary_key=True,
        index=True,
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False)

    def __repr__(self) -> str:
        return f"<RoleParent(role_id={self.role_id}, parent_id={self.parent_id})>"
