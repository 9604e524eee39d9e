from typing import Any


class AppException(Exception):
    """
    Error with an HTTP status, rendered as an ErrorResponse.

    ``details`` may carry a ``field`` key naming the offending input.
    """

    status_code = 400

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.details = details or {}

    @property
    def field(self) -> str | None:
        return self.details.get("field")


class NotFoundError(AppException):
    status_code = 404

    def __init__(self, resource: str, identifier: Any = None):
        if identifier is None:
            message = f"{resource} not found"
        else:
            message = f"{resource} with id={identifier} not found"
        super().__init__(message)


class ValidationError(AppException):
    status_code = 422

    def __init__(self, message: str, field: str | None = None):
        super().__init__(message, details={"field": field} if field else None)


class InvalidInputError(ValidationError):
    """A quantity, unit price or rate is not a finite number."""

    def __init__(self, field: str, value: Any):
        super().__init__(f"{field} must be a finite number, got {value!r}", field=field)
        self.value = value


class AuthenticationError(AppException):
    status_code = 401

    def __init__(self, message: str = "Not authenticated"):
        super().__init__(message)


class AuthorizationError(AppException):
    status_code = 403

    def __init__(self, message: str = "Not authorized"):
        super().__init__(message)


class StorageUnavailableError(AppException):
    """Counter or document store unreachable, or the unit of work failed to commit."""

    status_code = 503

    def __init__(self, message: str = "Storage is unavailable, please retry"):
        super().__init__(message)
