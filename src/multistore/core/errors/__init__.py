"""Error handling module with RFC 7807 Problem Details."""

from multistore.core.errors.exceptions import (
    AppException,
    ConflictError,
    DomainConflictError,
    ForbiddenError,
    InvalidDomainError,
    InvalidSlugError,
    NotFoundError,
    TenantInactiveError,
    TenantNotFoundError,
    UnauthorizedError,
    ValidationError,
    VerificationExpiredError,
    VerificationPendingError,
)
from multistore.core.errors.handlers import (
    FieldError,
    ProblemDetail,
    register_exception_handlers,
)


__all__ = [
    # Exceptions
    "AppException",
    "ConflictError",
    "DomainConflictError",
    # Handlers
    "FieldError",
    "ForbiddenError",
    "InvalidDomainError",
    "InvalidSlugError",
    "NotFoundError",
    "ProblemDetail",
    "TenantInactiveError",
    "TenantNotFoundError",
    "UnauthorizedError",
    "ValidationError",
    "VerificationExpiredError",
    "VerificationPendingError",
    "register_exception_handlers",
]
