"""
Application errors carrying an HTTP status and a machine-readable code.
Raised from services and dependencies; rendered by the handlers in api.errors.
"""
from typing import Any, Optional


class AppError(Exception):
    status_code = 400
    code = "BAD_REQUEST"

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        code: Optional[str] = None,
        details: Any = None,
    ):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        if code is not None:
            self.code = code
        self.details = details


class NotFoundError(AppError):
    status_code = 404
    code = "NOT_FOUND"


class AuthError(AppError):
    status_code = 401
    code = "AUTH_FAILED"


class ForbiddenError(AppError):
    status_code = 403
    code = "INSUFFICIENT_PERMISSIONS"


class ConflictError(AppError):
    status_code = 409
    code = "CONFLICT"


class ValidationFailed(AppError):
    status_code = 400
    code = "VALIDATION_ERROR"


class InvalidTransitionError(AppError):
    status_code = 409
    code = "INVALID_STATUS_TRANSITION"
