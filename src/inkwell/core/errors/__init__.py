"""Error handling module with RFC 7807 Problem Details."""

from inkwell.core.errors.exceptions import (
    AppException,
    ConflictError,
    ForbiddenError,
    IntegrityError,
    NotFoundError,
    ServiceUnavailableError,
    UnauthorizedError,
    ValidationError,
)
from inkwell.core.errors.handlers import (
    FieldError,
    ProblemDetail,
    register_exception_handlers,
)


__all__ = [
    # Exceptions
    "AppException",
    "ConflictError",
    # Handlers
    "FieldError",
    "ForbiddenError",
    "IntegrityError",
    "NotFoundError",
    "ProblemDetail",
    "ServiceUnavailableError",
    "UnauthorizedError",
    "ValidationError",
    "register_exception_handlers",
]
