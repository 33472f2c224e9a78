"""Pydantic schemas for user operations."""

import re
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from inkwell.core.constants import (
    MAX_DISPLAY_NAME_LENGTH,
    MAX_USERNAME_LENGTH,
    MIN_USERNAME_LENGTH,
)


USERNAME_PATTERN = re.compile(r"^[A-Za-z0-9_.-]+$")


class UserCreate(BaseModel):
    """Schema for creating a user."""

    username: str = Field(
        ..., min_length=MIN_USERNAME_LENGTH, max_length=MAX_USERNAME_LENGTH
    )
    display_name: str = Field(..., min_length=1, max_length=MAX_DISPLAY_NAME_LENGTH)

    @field_validator("username")
    @classmethod
    def username_characters(cls, v: str) -> str:
        """Usernames are trimmed and limited to URL-safe characters."""
        v = v.strip()
        if not USERNAME_PATTERN.match(v):
            raise ValueError("Username may only contain letters, digits, '_', '.' and '-'")
        return v

    @field_validator("display_name")
    @classmethod
    def strip_display_name(cls, v: str) -> str:
        return v.strip()


class UserResponse(BaseModel):
    """Schema for user response data."""

    id: UUID
    username: str
    display_name: str
    is_active: bool
    system_role_id: UUID | None = None

    model_config = ConfigDict(from_attributes=True)
