"""FastAPI dependencies for the caller identity.

Authentication happens upstream. The authenticated user and the target
tenant arrive as ``X-User-ID`` and ``X-Tenant-ID`` headers; this module
turns them into role assignments for the permission checker.
"""

from typing import Annotated
from uuid import UUID

from fastapi import Depends, Header

from inkwell.api.dependencies import DBSession
from inkwell.core.errors import ForbiddenError, UnauthorizedError
from inkwell.core.permissions.schemas import UserAssignments


async def get_current_user_id(
    x_user_id: Annotated[str | None, Header()] = None,
) -> UUID:
    """Extract the authenticated user id from the ``X-User-ID`` header.

    Raises:
        UnauthorizedError: If the header is missing or not a UUID
    """
    if not x_user_id:
        raise UnauthorizedError(
            "Missing X-User-ID header",
            error_code="missing_identity",
        )
    try:
        return UUID(x_user_id)
    except ValueError as e:
        raise UnauthorizedError(
            "Malformed X-User-ID header",
            error_code="invalid_identity",
        ) from e


async def get_current_tenant_id(
    x_tenant_id: Annotated[str | None, Header()] = None,
) -> UUID | None:
    """Extract the optional target tenant from the ``X-Tenant-ID`` header."""
    if not x_tenant_id:
        return None
    try:
        return UUID(x_tenant_id)
    except ValueError as e:
        raise UnauthorizedError(
            "Malformed X-Tenant-ID header",
            error_code="invalid_tenant_context",
        ) from e


async def get_current_user(
    user_id: Annotated[UUID, Depends(get_current_user_id)],
    db: DBSession,
) -> UserAssignments:
    """Load the role assignments of the calling user.

    Raises:
        UnauthorizedError: If the user does not exist
        ForbiddenError: If the user is deactivated
    """
    from inkwell.modules.users.repos import UserRepository  # noqa: PLC0415

    repo = UserRepository(db)
    user = await repo.get_by_id(user_id)
    if user is None:
        raise UnauthorizedError(
            "User not found",
            error_code="user_not_found",
        )
    if not user.is_active:
        raise ForbiddenError(
            "User account is deactivated",
            error_code="user_inactive",
        )

    assignments = await repo.get_assignments(user_id)
    if assignments is None:
        raise UnauthorizedError("User not found", error_code="user_not_found")
    return assignments


# Type aliases for dependency injection
CurrentUserId = Annotated[UUID, Depends(get_current_user_id)]
CurrentTenantId = Annotated[UUID | None, Depends(get_current_tenant_id)]
CurrentUser = Annotated[UserAssignments, Depends(get_current_user)]
