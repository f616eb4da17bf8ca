# app/core/exceptions.py
"""
Domain error taxonomy.

Services raise these; they carry no HTTP knowledge. `app/main.py` maps
each class to a status code and the failure envelope.
"""


class AppError(Exception):
    """Base class for all domain errors raised by the API."""

    code = "app_error"
    default_message = "Something went wrong"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(AppError):
    """Malformed or missing input (e.g. quantity < 1)."""

    code = "validation_error"
    default_message = "Validation failed"


class NotFoundError(AppError):
    """Resource absent, or not owned by the caller."""

    code = "not_found"
    default_message = "Resource not found"


class ConflictError(AppError):
    """Unique key clash (slug already taken, ...)."""

    code = "conflict"
    default_message = "Resource already exists"


class AuthenticationError(AppError):
    """No caller identity, or the bearer token is invalid/revoked."""

    code = "authentication_required"
    default_message = "Unauthenticated - Please login first"


class PermissionDeniedError(AppError):
    code = "forbidden"
    default_message = "You don't have permission to access this resource"


class StorageError(AppError):
    """Persistence failure. Never retried; the message stays opaque."""

    code = "storage_error"
    default_message = "A storage error occurred, please try again later"
