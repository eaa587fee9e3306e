"""Domain error taxonomy.

Services raise these; the API layer maps them to HTTP responses in one place
(see ``ERROR_STATUS_MAP`` and the handler registered in ``main``). Storage
errors are never wrapped: they propagate and surface as 500.
"""

from fastapi import status


class LmsError(Exception):
    """Base error for all domain failures."""

    default_message = "Operation failed"
    default_code = "lms_error"

    def __init__(self, message: str | None = None, code: str | None = None):
        self.message = message or self.default_message
        self.code = code or self.default_code
        super().__init__(self.message)


class NotFoundError(LmsError):
    """Requested entity does not exist."""

    default_message = "Resource not found"
    default_code = "not_found"


class ValidationFailedError(LmsError):
    """Input is well-formed but violates a business rule."""

    default_message = "Validation failed"
    default_code = "validation_failed"


class PermissionDeniedError(LmsError):
    """Caller is authenticated but may not perform the action."""

    default_message = "Permission denied"
    default_code = "permission_denied"


class ConflictError(LmsError):
    """Operation would duplicate an entity that must be unique."""

    default_message = "Resource already exists"
    default_code = "conflict"


class RateLimitExceededError(LmsError):
    """Too many requests from the same client."""

    default_message = "Too many requests. Please try again later."
    default_code = "rate_limit_exceeded"


ERROR_STATUS_MAP: dict[type[LmsError], int] = {
    NotFoundError: status.HTTP_404_NOT_FOUND,
    ValidationFailedError: status.HTTP_400_BAD_REQUEST,
    PermissionDeniedError: status.HTTP_403_FORBIDDEN,
    ConflictError: status.HTTP_409_CONFLICT,
    RateLimitExceededError: status.HTTP_429_TOO_MANY_REQUESTS,
}


def status_code_for(error: LmsError) -> int:
    """Resolve the HTTP status for an error, walking its class hierarchy."""
    for cls in type(error).__mro__:
        if cls in ERROR_STATUS_MAP:
            return ERROR_STATUS_MAP[cls]
    return status.HTTP_500_INTERNAL_SERVER_ERROR
