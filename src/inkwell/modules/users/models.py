"""User database models.

Only the role data of a user lives here. Credentials and sessions
belong to the upstream authentication layer.
"""

from uuid import UUID

from sqlalchemy import Boolean, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from inkwell.core.constants import MAX_DISPLAY_NAME_LENGTH, MAX_USERNAME_LENGTH
from inkwell.core.database.base import Base, TimestampMixin, UUIDMixin


class User(Base, UUIDMixin, TimestampMixin):
    """User model holding a user's role assignments.

    Attributes:
        username: Unique login name
        display_name: Name shown to other users
        is_active: Whether the user may act at all
        system_role_id: Optional platform-wide role
        tenant_roles: One role per tenant the user belongs to
        custom_roles: Custom roles, each scoped to its own tenant
    """

    __tablename__ = "users"

    username: Mapped[str] = mapped_column(
        String(MAX_USERNAME_LENGTH),
        nullable=False,
        unique=True,
        index=True,
    )
    display_name: Mapped[str] = mapped_column(
        String(MAX_DISPLAY_NAME_LENGTH),
        nullable=False,
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        nullable=False,
    )
    system_role_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("roles.id", ondelete="SET NULL"),
        nullable=True,
    )

    # Loaded eagerly: every authorization check needs them
    tenant_roles: Mapped[list["UserTenantRole"]] = relationship(
        "UserTenantRole",
        cascade="all, delete-orphan",
        lazy="selectin",
    )
    custom_roles: Mapped[list["UserCustomRole"]] = relationship(
        "UserCustomRole",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, username={self.username})>"


class UserTenantRole(Base, TimestampMixin):
    """The role a user holds in one tenant."""

    __tablename__ = "user_tenant_roles"
    __table_args__ = (UniqueConstraint("user_id", "tenant_id", name="uq_user_tenant"),)

    user_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
        index=True,
    )
    tenant_id: Mapped[UUID] = mapped_column(
        ForeignKey("tenants.id", ondelete="CASCADE"),
        primary_key=True,
        index=True,
    )
    role_id: Mapped[UUID] = mapped_column(
        ForeignKey("roles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    def __repr__(self) -> str:
        return (
            f"<UserTenantRole(user_id={self.user_id}, tenant_id={self.tenant_id}, "
            f"role_id={self.role_id})>"
        )


class UserCustomRole(Base, TimestampMixin):
    """Junction table linking users to custom roles."""

    __tablename__ = "user_custom_roles"
    __table_args__ = (UniqueConstraint("user_id", "role_id", name="uq_user_custom_role"),)

    user_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
        index=True,
    )
    role_id: Mapped[UUID] = mapped_column(
        ForeignKey("roles.id", ondelete="CASCADE"),
        primary_key=True,
        index=True,
    )

    def __repr__(self) -> str:
        return f"<UserCustomRole(user_id={self.user_id}, role_id={self.role_id})>"
