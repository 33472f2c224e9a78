"""Request context: request ids and the upstream caller identity."""

from inkwell.core.context.dependencies import (
    CurrentTenantId,
    CurrentUser,
    CurrentUserId,
    get_current_tenant_id,
    get_current_user,
    get_current_user_id,
)
from inkwell.core.context.middleware import RequestContextMiddleware, RequestIdMiddleware


__all__ = [
    "CurrentTenantId",
    "CurrentUser",
    "CurrentUserId",
    "RequestContextMiddleware",
    "RequestIdMiddleware",
    "get_current_tenant_id",
    "get_current_user",
    "get_current_user_id",
]
