from src.core.exceptions.base import (
    AppException,
    NotFoundError,
    ValidationError,
    AuthorizationError,
    DuplicateError,
)

__all__ = [
    "AppException",
    "NotFoundError",
    "ValidationError",
    "AuthorizationError",
    "DuplicateError",
]
