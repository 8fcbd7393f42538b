"""Error taxonomy for the user service.

Every failure the service reports is one of these types. The HTTP layer maps
them onto status codes through `status_code` and `error`; nothing below the
router knows about HTTP.
"""

from typing import Any


class UserServiceError(Exception):
    """Base class for all typed service errors."""

    status_code: int = 500
    error: str = "internal_error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class RecordNotFoundError(UserServiceError):
    """No non-deleted record exists with the given id."""

    status_code = 404
    error = "not_found"

    def __init__(self, record_id: int) -> None:
        super().__init__(f"User with id {record_id} not found")
        self.record_id = record_id


class DuplicateKeyError(UserServiceError):
    """The email is already held by a non-deleted record."""

    status_code = 409
    error = "conflict"

    def __init__(self, email: str) -> None:
        super().__init__(f"User with email {email} already exists")
        self.email = email


class InvalidInputError(UserServiceError):
    """Supplied fields violate a shape or range constraint."""

    status_code = 400
    error = "invalid_input"

    def __init__(self, details: str | list[Any]) -> None:
        message = details if isinstance(details, str) else "Invalid input"
        super().__init__(message)
        self.details = details


class DependencyUnavailableError(UserServiceError):
    """The database or the cache could not be reached."""

    status_code = 503
    error = "dependency_unavailable"

    def __init__(self, dependency: str, reason: str | None = None) -> None:
        message = f"{dependency} unavailable"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.dependency = dependency


class CacheUnavailableError(DependencyUnavailableError):
    """A cache operation failed. The service treats this as a miss."""

    def __init__(self, operation: str, reason: str | None = None) -> None:
        super().__init__("cache", f"{operation} failed: {reason}" if reason else operation)
        self.operation = operation
