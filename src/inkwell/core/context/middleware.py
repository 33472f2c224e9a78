"""Request context middleware.

This module provides middleware for:
- Request tracing with unique IDs
- Binding the upstream caller identity to the request and log context
"""

import uuid
from uuid import UUID

import structlog
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint


logger = structlog.get_logger()

USER_ID_HEADER = "X-User-ID"
TENANT_ID_HEADER = "X-Tenant-ID"


def _parse_uuid(value: str | None) -> UUID | None:
    if not value:
        return None
    try:
        return UUID(value)
    except ValueError:
        return None


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Middleware that binds caller identity into the request context.

    The upstream authentication layer sets ``X-User-ID`` and
    ``X-Tenant-ID``. Well-formed values are copied to
    ``request.state`` and the structlog context; malformed ones are
    left for the identity dependencies to reject.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        user_id = _parse_uuid(request.headers.get(USER_ID_HEADER))
        tenant_id = _parse_uuid(request.headers.get(TENANT_ID_HEADER))

        request.state.user_id = user_id
        request.state.tenant_id = tenant_id

        context: dict[str, str] = {}
        if user_id:
            context["user_id"] = str(user_id)
        if tenant_id:
            context["tenant_id"] = str(tenant_id)
        if context:
            structlog.contextvars.bind_contextvars(**context)

        return await call_next(request)


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Middleware that adds a unique request ID to each request.

    The request ID is added to:
    - request.state.request_id
    - Response header X-Request-ID
    - Structlog context
    """

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())

        request.state.request_id = request_id
        request.state.trace_id = request_id  # Alias for error handler

        structlog.contextvars.bind_contextvars(request_id=request_id)
        try:
            response = await call_next(request)
        finally:
            structlog.contextvars.unbind_contextvars("request_id", "tenant_id", "user_id")

        response.headers["X-Request-ID"] = request_id
        return response
