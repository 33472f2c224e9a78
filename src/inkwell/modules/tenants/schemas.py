"""Pydantic schemas for tenant operations."""

import re
from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from inkwell.core.constants import (
    MAX_NAME_LENGTH,
    MAX_PHONE_LENGTH,
    MAX_TENANT_CODE_LENGTH,
)


TENANT_CODE_PATTERN = re.compile(r"^[a-z0-9][a-z0-9-]*$")


class TenantBase(BaseModel):
    """Base schema for tenant data."""

    name: str = Field(..., min_length=1, max_length=MAX_NAME_LENGTH)
    domain: str | None = Field(None, min_length=1, max_length=MAX_NAME_LENGTH)
    contact_email: EmailStr | None = None
    contact_phone: str | None = Field(None, max_length=MAX_PHONE_LENGTH)
    allow_comments: bool = True
    allow_rating: bool = True


class TenantCreate(TenantBase):
    """Schema for creating a tenant."""

    code: str = Field(..., min_length=1, max_length=MAX_TENANT_CODE_LENGTH)

    @field_validator("code")
    @classmethod
    def normalize_code(cls, v: str) -> str:
        """Tenant codes are lower-case slugs."""
        v = v.strip().lower()
        if not TENANT_CODE_PATTERN.match(v):
            raise ValueError("Tenant code may only contain lowercase letters, digits and '-'")
        return v

    @field_validator("domain")
    @classmethod
    def normalize_domain(cls, v: str | None) -> str | None:
        return v.strip().lower() if v else v


class TenantUpdate(BaseModel):
    """Schema for updating tenant settings. Omitted fields are kept."""

    name: str | None = Field(None, min_length=1, max_length=MAX_NAME_LENGTH)
    contact_email: EmailStr | None = None
    contact_phone: str | None = Field(None, max_length=MAX_PHONE_LENGTH)
    allow_comments: bool | None = None
    allow_rating: bool | None = None


class TenantResponse(TenantBase):
    """Schema for tenant response data."""

    id: UUID
    code: str
    is_active: bool
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
