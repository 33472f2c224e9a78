"""Shared API dependencies."""

from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from inkwell.core.database import get_db


# Type alias for database session dependency
DBSession = Annotated[AsyncSession, Depends(get_db)]


# Note: Caller identity is handled by inkwell.core.context. Use CurrentUser
# and CurrentTenantId from there in authenticated routes.
