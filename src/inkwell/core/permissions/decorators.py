"""Permission decorators for route protection.

This module provides decorators that can be applied to FastAPI
routes to require specific permissions. The decorated route must
declare ``current_user`` and ``checker`` parameters; the tenant is
taken from a ``tenant_id`` path parameter, falling back to
``current_tenant_id`` (the ``X-Tenant-ID`` header).
"""

from collections.abc import Awaitable, Callable
from functools import wraps
from typing import TYPE_CHECKING, Any, ParamSpec, TypeVar, cast
from uuid import UUID

import structlog

from inkwell.core.errors import ForbiddenError
from inkwell.core.permissions.enums import ResourceType
from inkwell.core.permissions.schemas import UserAssignments


if TYPE_CHECKING:
    from fastapi import Request

    from inkwell.core.permissions.checker import PermissionChecker


logger = structlog.get_logger()

P = ParamSpec("P")
R = TypeVar("R")

Requirement = tuple[str, ResourceType]


def _format(permissions: list[Requirement]) -> list[str]:
    return [
        f"{getattr(code, 'value', code)}:{ResourceType(resource_type).value}"
        for code, resource_type in permissions
    ]


def _get_context(
    kwargs: dict[str, Any],
) -> tuple[
    UserAssignments | None, "PermissionChecker | None", UUID | None, "Request | None"
]:
    """Extract user, checker, tenant and request from route kwargs."""
    user = cast("UserAssignments | None", kwargs.get("current_user"))
    checker = cast("PermissionChecker | None", kwargs.get("checker"))
    tenant_id = kwargs.get("tenant_id") or kwargs.get("current_tenant_id")
    request = cast("Request | None", kwargs.get("request"))
    return user, checker, cast("UUID | None", tenant_id), request


async def _check_permissions(
    kwargs: dict[str, Any],
    permissions: list[Requirement],
    require_all: bool,
) -> None:
    """Common permission checking logic.

    Raises:
        ForbiddenError: If the permission check fails
    """
    user, checker, tenant_id, request = _get_context(kwargs)

    if user is None:
        raise ForbiddenError(
            "Authentication required",
            error_code="auth_required",
        )

    if checker is None:
        raise ForbiddenError(
            "Permission check failed",
            error_code="permission_check_failed",
        )

    if require_all:
        has_perm = await checker.has_all_permissions(user, tenant_id, permissions)
    else:
        has_perm = await checker.has_any_permission(user, tenant_id, permissions)

    if not has_perm:
        required = _format(permissions)
        logger.info(
            "permission_denied",
            user_id=str(user.user_id),
            tenant_id=str(tenant_id) if tenant_id else None,
            permissions=required,
            endpoint=request.url.path if request else "unknown",
        )
        if require_all:
            message = f"Missing required permissions: {', '.join(required)}"
        else:
            message = f"Missing required permission. Need one of: {', '.join(required)}"
        raise ForbiddenError(
            message,
            error_code="permission_denied",
            details={"required_permissions": required},
        )


def require_permission(
    permission: str, resource_type: ResourceType
) -> Callable[[Callable[P, Awaitable[R]]], Callable[P, Awaitable[R]]]:
    """Decorator that requires a specific permission to access a route.

    Usage:
        @router.post("/permissions")
        @require_permission(PermissionCode.MANAGE_SYSTEM, ResourceType.SYSTEM)
        async def register_permission(current_user: CurrentUser, checker: Checker):
            ...

    Args:
        permission: The permission code
        resource_type: The resource type the permission applies to

    Returns:
        Decorator function

    Raises:
        ForbiddenError: If user lacks the required permission
    """
    return require_all_permissions([(permission, resource_type)])


def require_any_permission(
    permissions: list[Requirement],
) -> Callable[[Callable[P, Awaitable[R]]], Callable[P, Awaitable[R]]]:
    """Decorator that requires any one of the specified permissions.

    Usage:
        @router.get("/tenants/{tenant_id}/roles")
        @require_any_permission([
            (PermissionCode.MANAGE_TENANT_USERS, ResourceType.USER),
            (PermissionCode.MANAGE_TENANTS, ResourceType.TENANT),
        ])
        async def list_tenant_roles(tenant_id: UUID, current_user: CurrentUser, ...):
            ...

    Args:
        permissions: List of (permission, resource type) tuples

    Returns:
        Decorator function
    """

    def decorator(func: Callable[P, Awaitable[R]]) -> Callable[P, Awaitable[R]]:
        @wraps(func)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            await _check_permissions(kwargs, permissions, require_all=False)
            return await func(*args, **kwargs)

        return wrapper

    return decorator


def require_all_permissions(
    permissions: list[Requirement],
) -> Callable[[Callable[P, Awaitable[R]]], Callable[P, Awaitable[R]]]:
    """Decorator that requires all of the specified permissions.

    Args:
        permissions: List of (permission, resource type) tuples

    Returns:
        Decorator function
    """

    def decorator(func: Callable[P, Awaitable[R]]) -> Callable[P, Awaitable[R]]:
        @wraps(func)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            await _check_permissions(kwargs, permissions, require_all=True)
            return await func(*args, **kwargs)

        return wrapper

    return decorator
