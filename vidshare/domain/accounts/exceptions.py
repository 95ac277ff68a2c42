# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from vidshare.shared.errors.base import (
    AuthError,
    ConflictError,
    NotFoundError,
    UpstreamFailureError,
    ValidationError,
)


class DuplicateAccountError(ConflictError):
    code = "duplicate_account"
    message = "User with email or username already exists"


class AccountNotFoundError(NotFoundError):
    code = "account_not_found"
    message = "User does not exist"


class InvalidCredentialsError(AuthError):
    code = "invalid_credentials"
    message = "Invalid credentials"


class EmailNotVerifiedError(AuthError):
    code = "email_not_verified"
    message = "Please verify your email first"


class UnauthorizedError(AuthError):
    code = "unauthorized"
    message = "Authentication required"


class InvalidTokenError(AuthError):
    code = "invalid_token"
    message = "Token expired or invalid"


class MissingTokenError(AuthError):
    code = "missing_token"
    message = "Refresh token missing"


class ReuseDetectedError(AuthError):
    code = "refresh_token_reused"
    message = "Refresh token reused or expired"


class CodeExpiredError(ValidationError):
    code = "verification_code_expired"
    message = "Code expired"


class CodeInvalidError(ValidationError):
    code = "verification_code_invalid"
    message = "Invalid code"


class AlreadyVerifiedError(ValidationError):
    code = "email_already_verified"
    message = "Email is already verified"


class MailDeliveryError(UpstreamFailureError):
    code = "mail_delivery_failed"
    message = "Failed to deliver email, please request a new code"


class MediaUploadError(UpstreamFailureError):
    code = "media_upload_failed"
    message = "Image upload failed"
