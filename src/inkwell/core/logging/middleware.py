"""Request logging middleware.

One ``request_completed`` (or ``request_denied`` / ``request_failed``)
event per HTTP request, with status and duration. Request id, user and
tenant are merged in from the structlog context bound by the request
context middlewares.
"""

import time
from typing import Any

import structlog
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint


logger = structlog.get_logger()

DEFAULT_EXCLUDED_PATHS = ("/health/live", "/docs", "/redoc", "/openapi.json")

# Statuses produced by identity and permission guards
DENIAL_STATUSES = frozenset({401, 403})


def get_client_ip(request: Request) -> str | None:
    """Client address, preferring the first X-Forwarded-For hop."""
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else None


def _elapsed_ms(start: float) -> float:
    return round((time.perf_counter() - start) * 1000, 2)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log the outcome of each request.

    Authorization denials are logged as ``request_denied`` so they can be
    filtered apart from client mistakes; other 4xx responses log at
    warning and 5xx at error.
    """

    def __init__(self, app: Any, exclude_paths: list[str] | None = None) -> None:
        super().__init__(app)
        self.exclude_paths = tuple(exclude_paths or DEFAULT_EXCLUDED_PATHS)

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        path = request.url.path
        if path.startswith(self.exclude_paths):
            return await call_next(request)

        fields: dict[str, Any] = {
            "method": request.method,
            "path": path,
            "client_ip": get_client_ip(request),
        }
        start = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception:
            logger.exception("request_failed", duration_ms=_elapsed_ms(start), **fields)
            raise

        fields.update(status_code=response.status_code, duration_ms=_elapsed_ms(start))
        if response.status_code in DENIAL_STATUSES:
            logger.info("request_denied", **fields)
        elif response.status_code >= 500:
            logger.error("request_completed", **fields)
        elif response.status_code >= 400:
            logger.warning("request_completed", **fields)
        else:
            logger.info("request_completed", **fields)

        return response
