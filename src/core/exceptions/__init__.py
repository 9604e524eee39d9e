from src.core.exceptions.base import (
    AppException,
    AuthenticationError,
    AuthorizationError,
    InvalidInputError,
    NotFoundError,
    StorageUnavailableError,
    ValidationError,
)

__all__ = [
    "AppException",
    "AuthenticationError",
    "AuthorizationError",
    "InvalidInputError",
    "NotFoundError",
    "StorageUnavailableError",
    "ValidationError",
]
