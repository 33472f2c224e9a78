"""Domain exceptions for the application.

These exceptions represent business-logic errors and are automatically
converted to RFC 7807 Problem Details responses by the exception handlers.
"""

from typing import Any

from pydantic import ValidationError as PydanticValidationError


class AppException(Exception):
    """Base exception for all application errors.

    All domain exceptions should inherit from this class.

    Attributes:
        message: Human-readable error message
        error_code: Machine-readable error code for clients
        status_code: HTTP status code for the response
        details: Additional error details
    """

    message: str = "An unexpected error occurred"
    error_code: str = "internal_error"
    status_code: int = 500

    def __init__(
        self,
        message: str | None = None,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message or self.message
        self.error_code = error_code or self.error_code
        self.details = details or {}
        super().__init__(self.message)


class NotFoundError(AppException):
    """Raised when a referenced entity does not exist.

    Example:
        raise NotFoundError("Role not found", resource="role", resource_id=str(role_id))
    """

    message = "Resource not found"
    error_code = "not_found"
    status_code = 404

    def __init__(
        self,
        message: str | None = None,
        resource: str | None = None,
        resource_id: Any = None,
        **kwargs: Any,
    ) -> None:
        details = kwargs.pop("details", {})
        if resource:
            details["resource"] = resource
        if resource_id is not None:
            details["resource_id"] = str(resource_id)
        super().__init__(message=message, details=details, **kwargs)


class ConflictError(AppException):
    """Raised when a change or a resolved configuration needs human correction.

    Covers mutually exclusive permissions resolved together, deletion
    of built-in or still-referenced roles, and edits to built-in
    permissions.

    Example:
        raise ConflictError("Role is built-in", details={"role_id": str(role_id)})
    """

    message = "Resource conflict"
    error_code = "conflict"
    status_code = 409


class ValidationError(AppException):
    """Raised when input violates an invariant at write time.

    Example:
        raise ValidationError(
            "Invalid role",
            errors=[{"field": "tenant_id", "message": "System roles cannot have a tenant"}]
        )
    """

    message = "Validation error"
    error_code = "validation_error"
    status_code = 422

    def __init__(
        self,
        message: str | None = None,
        errors: list[dict[str, Any]] | None = None,
        **kwargs: Any,
    ) -> None:
        details = kwargs.pop("details", {})
        if errors:
            details["errors"] = errors
        super().__init__(message=message, details=details, **kwargs)

    @classmethod
    def from_pydantic(
        cls, exc: PydanticValidationError, message: str | None = None
    ) -> "ValidationError":
        """Wrap a pydantic validation failure raised inside a service."""
        return cls(
            message,
            errors=[
                {
                    "field": ".".join(str(part) for part in error["loc"]) or "unknown",
                    "message": error["msg"],
                }
                for error in exc.errors()
            ],
        )


class IntegrityError(AppException):
    """Raised when stored RBAC data is found corrupt at resolve time.

    A cycle or a dangling reference that slipped past the write-time
    checks. Never repaired automatically.

    Example:
        raise IntegrityError(
            "Role inheritance cycle detected",
            details={"chain": ["editor", "author", "editor"]}
        )
    """

    message = "Data integrity violation"
    error_code = "integrity_error"
    status_code = 500


class UnauthorizedError(AppException):
    """Raised when the caller identity is missing or malformed.

    Example:
        raise UnauthorizedError("Missing X-User-ID header")
    """

    message = "Authentication required"
    error_code = "unauthorized"
    status_code = 401


class ForbiddenError(AppException):
    """Raised when user lacks permission to access a resource.

    Example:
        raise ForbiddenError(
            "Insufficient permissions",
            details={"required_permissions": ["manage_tenants:tenant"]}
        )
    """

    message = "Access forbidden"
    error_code = "forbidden"
    status_code = 403


class ServiceUnavailableError(AppException):
    """Raised when a required service is unavailable.

    Example:
        raise ServiceUnavailableError("Database is not connected")
    """

    message = "Service temporarily unavailable"
    error_code = "service_unavailable"
    status_code = 503
