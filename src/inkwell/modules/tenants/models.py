"""Tenant database models."""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from inkwell.core.constants import (
    MAX_EMAIL_LENGTH,
    MAX_NAME_LENGTH,
    MAX_PHONE_LENGTH,
    MAX_TENANT_CODE_LENGTH,
)
from inkwell.core.database.base import Base, TimestampMixin, UUIDMixin


class Tenant(Base, UUIDMixin, TimestampMixin):
    """Tenant model representing one publication on the platform.

    All tenant-scoped roles and assignments reference this table via
    tenant_id. Roles of an inactive tenant grant nothing.
    """

    __tablename__ = "tenants"

    code: Mapped[str] = mapped_column(
        String(MAX_TENANT_CODE_LENGTH),
        nullable=False,
        unique=True,
        index=True,
    )
    name: Mapped[str] = mapped_column(
        String(MAX_NAME_LENGTH),
        nullable=False,
        index=True,
    )
    domain: Mapped[str | None] = mapped_column(
        String(MAX_NAME_LENGTH),
        nullable=True,
        unique=True,
    )
    contact_email: Mapped[str | None] = mapped_column(
        String(MAX_EMAIL_LENGTH),
        nullable=True,
    )
    contact_phone: Mapped[str | None] = mapped_column(
        String(MAX_PHONE_LENGTH),
        nullable=True,
    )
    is_active: Mapped[bool] = mapped_column(
        default=True,
        nullable=False,
    )

    # Content settings
    allow_comments: Mapped[bool] = mapped_column(default=True, nullable=False)
    allow_rating: Mapped[bool] = mapped_column(default=True, nullable=False)

    def __repr__(self) -> str:
        return f"<Tenant(id={self.id}, name={self.name}, code={self.code})>"
