"""RFC 7807 Problem Details exception handlers.

Every error leaving the API is rendered as ``application/problem+json``
with a ``type`` URI of ``{api_docs_base_url}/errors/{code}``. Details
carried by an ``AppException`` (for example ``required_permissions`` on
a denial or ``cycle`` on a rejected role graph) are merged into the top
level of the problem document.

See: https://tools.ietf.org/html/rfc7807
"""

from typing import TYPE_CHECKING, Any, cast

import structlog
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from starlette.exceptions import HTTPException as StarletteHTTPException

from inkwell.config import settings
from inkwell.core.errors.exceptions import AppException, ForbiddenError, UnauthorizedError


if TYPE_CHECKING:
    from starlette.types import ExceptionHandler


logger = structlog.get_logger()

PROBLEM_MEDIA_TYPE = "application/problem+json"


class FieldError(BaseModel):
    """A single field-level validation failure."""

    field: str
    message: str
    type: str | None = None


class ProblemDetail(BaseModel):
    """RFC 7807 Problem Details response schema.

    Attributes:
        type: URI identifying the problem type
        title: Short human-readable summary
        status: HTTP status code
        detail: Explanation specific to this occurrence
        instance: Request path that produced the problem
        errors: Field-level errors for validation failures
        trace_id: Request trace ID for correlating logs
    """

    type: str
    title: str
    status: int
    detail: str
    instance: str | None = None
    errors: list[FieldError] | None = None
    trace_id: str | None = None

    model_config = {"extra": "allow"}


def _problem(
    request: Request,
    status_code: int,
    code: str,
    detail: str,
    *,
    title: str | None = None,
    extra: dict[str, Any] | None = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    content = ProblemDetail(
        type=f"{settings.api_docs_base_url}/errors/{code}",
        title=title or code.replace("_", " ").title(),
        status=status_code,
        detail=detail,
        instance=str(request.url.path),
        trace_id=getattr(request.state, "trace_id", None),
    ).model_dump(exclude_none=True)

    # Exception details never overwrite the standard members
    for key, value in (extra or {}).items():
        content.setdefault(key, value)

    return JSONResponse(
        status_code=status_code,
        content=content,
        media_type=PROBLEM_MEDIA_TYPE,
        headers=headers,
    )


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Render an ``AppException`` as a problem document.

    Authorization failures are logged with the caller and the
    permissions that were missing; integrity errors are logged at error
    level since they point at corrupt role data rather than a bad request.
    """
    log_fields: dict[str, Any] = {
        "error_code": exc.error_code,
        "status_code": exc.status_code,
        "path": str(request.url.path),
    }

    if isinstance(exc, ForbiddenError | UnauthorizedError):
        logger.info(
            "authorization_failed",
            user_id=getattr(request.state, "user_id", None),
            tenant_id=getattr(request.state, "tenant_id", None),
            required=exc.details.get("required_permissions"),
            **log_fields,
        )
    elif exc.status_code >= 500:
        logger.error("app_exception", message=exc.message, details=exc.details, **log_fields)
    else:
        logger.warning("app_exception", message=exc.message, details=exc.details, **log_fields)

    return _problem(
        request,
        exc.status_code,
        exc.error_code,
        exc.message,
        extra=exc.details,
    )


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    """Render routing-level errors, e.g. ``Cannot GET /nowhere`` for unknown paths."""
    if exc.status_code == status.HTTP_404_NOT_FOUND:
        code, detail = "not_found", f"Cannot {request.method} {request.url.path}"
    elif exc.status_code == status.HTTP_405_METHOD_NOT_ALLOWED:
        code, detail = "method_not_allowed", f"Cannot {request.method} {request.url.path}"
    else:
        code, detail = "http_error", str(exc.detail)

    return _problem(
        request,
        exc.status_code,
        code,
        detail,
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Render request body, query and path validation failures.

    Field paths drop the ``body`` prefix so that a bad permission code in
    a JSON body is reported as ``code`` rather than ``body.code``.
    """
    errors = [
        FieldError(
            field=".".join(str(part) for part in error.get("loc", ()) if part != "body")
            or "unknown",
            message=error.get("msg", "Invalid value"),
            type=error.get("type"),
        )
        for error in exc.errors()
    ]

    logger.warning(
        "validation_error",
        path=str(request.url.path),
        fields=[e.field for e in errors],
    )

    return _problem(
        request,
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        "validation_error",
        "Request validation failed",
        title="Validation Error",
        extra={"errors": [e.model_dump(exclude_none=True) for e in errors]},
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all for unexpected errors; details are logged, never returned."""
    logger.exception(
        "unhandled_exception",
        path=str(request.url.path),
        error_type=type(exc).__name__,
    )

    return _problem(
        request,
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "internal_error",
        "An unexpected error occurred",
        title="Internal Server Error",
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Install the problem-details handlers on ``app``."""
    handlers: list[tuple[type[Exception], Any]] = [
        (AppException, app_exception_handler),
        (StarletteHTTPException, http_exception_handler),
        (RequestValidationError, validation_exception_handler),
        (Exception, generic_exception_handler),
    ]
    for exc_class, handler in handlers:
        app.add_exception_handler(exc_class, cast("ExceptionHandler", handler))
