"""Domain exceptions for the application.

These exceptions represent business-logic errors and are automatically
converted to RFC 7807 Problem Details responses by the exception handlers.
"""

from typing import Any


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
    """Raised when a requested resource is not found.

    Example:
        raise NotFoundError("User not found", details={"user_id": str(user_id)})
    """

    message = "Resource not found"
    error_code = "not_found"
    status_code = 404

    def __init__(
        self,
        message: str | None = None,
        resource: str | None = None,
        resource_id: str | None = None,
        **kwargs: Any,
    ) -> None:
        details = kwargs.pop("details", {})
        if resource:
            details["resource"] = resource
        if resource_id:
            details["resource_id"] = resource_id
        super().__init__(message=message, details=details, **kwargs)


class ConflictError(AppException):
    """Raised when there's a conflict with existing data.

    Example:
        raise ConflictError("Email already registered", details={"email": email})
    """

    message = "Resource conflict"
    error_code = "conflict"
    status_code = 409


class ValidationError(AppException):
    """Raised when request data fails validation.

    Example:
        raise ValidationError(
            "Invalid input data",
            errors=[{"field": "email", "message": "Invalid email format"}]
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


class UnauthorizedError(AppException):
    """Raised when authentication is required but not provided or invalid.

    Example:
        raise UnauthorizedError("Invalid access token")
    """

    message = "Authentication required"
    error_code = "unauthorized"
    status_code = 401


class ForbiddenError(AppException):
    """Raised when user lacks permission to access a resource.

    Example:
        raise ForbiddenError("Access denied: not the store owner")
    """

    message = "Access forbidden"
    error_code = "forbidden"
    status_code = 403


# ============================================================
# Tenancy
# ============================================================


class TenantNotFoundError(AppException):
    """Raised when a tenant-required route has no resolved tenant.

    The message and body are identical for every cause (unknown subdomain,
    unregistered domain, malformed host) so probing a hostname reveals
    nothing about which stores exist.
    """

    message = "Store not found"
    error_code = "tenant_not_found"
    status_code = 404

    def __init__(self) -> None:
        super().__init__()


class TenantInactiveError(AppException):
    """Raised when the resolved tenant is deactivated.

    Example:
        raise TenantInactiveError(details={"subdomain": slug, "is_active": False})
    """

    message = "Store is currently inactive"
    error_code = "tenant_inactive"
    status_code = 403


class DomainConflictError(ConflictError):
    """Raised when a custom domain is already attached to another tenant."""

    message = "Domain already in use"
    error_code = "domain_conflict"


class VerificationPendingError(AppException):
    """Raised when the DNS challenge record is not visible yet.

    Recoverable: the user checks again once DNS has propagated.
    """

    message = "Verification record not found yet. DNS changes can take a while to propagate."
    error_code = "verification_pending"
    status_code = 409


class VerificationExpiredError(AppException):
    """Raised when the challenge TTL has elapsed.

    Recoverable: the user requests a fresh challenge.
    """

    message = "Verification challenge expired. Request a new one."
    error_code = "verification_expired"
    status_code = 410


class InvalidSlugError(ValidationError):
    """Raised when a store subdomain fails the naming policy."""

    message = "Invalid store subdomain"
    error_code = "invalid_subdomain"


class InvalidDomainError(ValidationError):
    """Raised when a custom domain cannot be attached to a store."""

    message = "Invalid custom domain"
    error_code = "invalid_domain"
