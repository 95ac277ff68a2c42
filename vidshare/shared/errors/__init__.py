from .base import (
    AppError,
    AuthError,
    ConflictError,
    ErrorKind,
    NotFoundError,
    RateLimitedError,
    UpstreamFailureError,
    ValidationError,
)
from .http import error_envelope, handle_app_error, register_error_handler

__all__ = [
    "AppError",
    "AuthError",
    "ConflictError",
    "ErrorKind",
    "NotFoundError",
    "RateLimitedError",
    "UpstreamFailureError",
    "ValidationError",
    "error_envelope",
    "handle_app_error",
    "register_error_handler",
]
