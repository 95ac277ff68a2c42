# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Shared error hierarchy for the service.

Every operational failure is an :class:`AppError` carrying an
:class:`ErrorKind`. The HTTP boundary maps the kind to a status code and
renders the shared envelope; anything that is not an ``AppError`` is treated
as a programmer error and rendered as an opaque 500.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from enum import Enum
from http import HTTPStatus
from typing import Any, cast


class ErrorKind(str, Enum):
    VALIDATION = "validation"
    AUTH = "auth"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    RATE_LIMITED = "rate_limited"
    UPSTREAM = "upstream"


KIND_STATUS: Mapping[ErrorKind, HTTPStatus] = {
    ErrorKind.VALIDATION: HTTPStatus.BAD_REQUEST,
    ErrorKind.AUTH: HTTPStatus.UNAUTHORIZED,
    ErrorKind.NOT_FOUND: HTTPStatus.NOT_FOUND,
    ErrorKind.CONFLICT: HTTPStatus.CONFLICT,
    ErrorKind.RATE_LIMITED: HTTPStatus.TOO_MANY_REQUESTS,
    ErrorKind.UPSTREAM: HTTPStatus.INTERNAL_SERVER_ERROR,
}


@dataclass(eq=False)
class AppError(Exception):
    """Base application exception carrying structured metadata."""

    kind: ErrorKind
    code: str
    message: str
    errors: Sequence[Mapping[str, Any]] = field(default_factory=list)

    def __post_init__(self) -> None:
        Exception.__init__(self, self.message)

    @property
    def status(self) -> HTTPStatus:
        return KIND_STATUS[self.kind]

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": False,
            "statusCode": int(self.status),
            "message": self.message,
            "errors": [dict(item) for item in self.errors],
            "error": self.code,
        }


class _DeclaredError(AppError):
    """Error whose kind, code and message are declared as class attributes."""

    def __init__(
        self,
        message: str | None = None,
        *,
        errors: Sequence[Mapping[str, Any]] | None = None,
    ) -> None:
        resolved_kind = cast(ErrorKind, getattr(self, "kind", ErrorKind.VALIDATION))
        resolved_code = cast(str, getattr(self, "code", "domain_error"))
        fallback_message = cast(str, getattr(self, "message", resolved_code))
        super().__init__(
            kind=resolved_kind,
            code=resolved_code,
            message=message if message is not None else fallback_message,
            errors=list(errors or []),
        )


class ValidationError(_DeclaredError):
    kind = ErrorKind.VALIDATION
    code = "validation_error"
    message = "Invalid request payload"


class AuthError(_DeclaredError):
    kind = ErrorKind.AUTH
    code = "unauthorized"
    message = "Authentication required"


class NotFoundError(_DeclaredError):
    kind = ErrorKind.NOT_FOUND
    code = "not_found"
    message = "Resource not found"


class ConflictError(_DeclaredError):
    kind = ErrorKind.CONFLICT
    code = "conflict"
    message = "Resource already exists"


class RateLimitedError(_DeclaredError):
    kind = ErrorKind.RATE_LIMITED
    code = "rate_limited"
    message = "Too many requests, slow down"


class UpstreamFailureError(_DeclaredError):
    kind = ErrorKind.UPSTREAM
    code = "upstream_failure"
    message = "An upstream service failed, please retry"
