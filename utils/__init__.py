"""Shared utilities for the backend."""
from utils.case import columns_to_camel, dict_keys_to_camel, iso, to_camel_key
from utils.errors import (
    AppError,
    AuthError,
    ConflictError,
    ForbiddenError,
    InvalidTransitionError,
    NotFoundError,
    ValidationFailed,
)

__all__ = [
    "to_camel_key",
    "dict_keys_to_camel",
    "columns_to_camel",
    "iso",
    "AppError",
    "AuthError",
    "ConflictError",
    "ForbiddenError",
    "InvalidTransitionError",
    "NotFoundError",
    "ValidationFailed",
]
