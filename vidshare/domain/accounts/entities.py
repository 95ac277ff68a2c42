# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Account entities and the email verification state machine."""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum

from vidshare.domain.exceptions import InvariantViolation


class VerificationState(str, Enum):
    """Unverified -> PendingVerification -> Verified. Verified is terminal."""

    UNVERIFIED = "unverified"
    PENDING = "pending_verification"
    VERIFIED = "verified"


@dataclass(slots=True, frozen=True)
class UploadedMedia:
    url: str
    file_id: str


@dataclass(slots=True, frozen=True)
class AccountProfile:
    """Account projection that is safe to hand to clients."""

    id: int
    full_name: str
    username: str
    email: str
    avatar_url: str | None
    cover_image_url: str | None
    is_email_verified: bool
    created_at: datetime | None


@dataclass(slots=True, frozen=True)
class Account:
    id: int
    full_name: str
    username: str
    email: str
    password_hash: str
    avatar_url: str | None = None
    avatar_file_id: str | None = None
    cover_image_url: str | None = None
    cover_image_file_id: str | None = None
    is_email_verified: bool = False
    email_verification_code_hash: str | None = None
    email_verification_expires_at: datetime | None = None
    current_refresh_token: str | None = None
    created_at: datetime | None = None

    def __post_init__(self) -> None:
        has_hash = self.email_verification_code_hash is not None
        has_expiry = self.email_verification_expires_at is not None
        if has_hash != has_expiry:
            raise InvariantViolation(
                "verification code hash and expiry must be set together",
                field="email_verification_code_hash",
            )
        if self.username != self.username.lower():
            raise InvariantViolation("username must be lower-case", field="username")

    @property
    def verification_state(self) -> VerificationState:
        if self.is_email_verified:
            return VerificationState.VERIFIED
        if self.email_verification_code_hash is not None:
            return VerificationState.PENDING
        return VerificationState.UNVERIFIED

    def with_pending_code(self, code_hash: str, expires_at: datetime) -> Account:
        if self.is_email_verified:
            raise InvariantViolation("account is already verified", field="is_email_verified")
        return replace(
            self,
            email_verification_code_hash=code_hash,
            email_verification_expires_at=expires_at,
        )

    def verified(self) -> Account:
        return replace(
            self,
            is_email_verified=True,
            email_verification_code_hash=None,
            email_verification_expires_at=None,
        )

    def with_refresh_token(self, token: str | None) -> Account:
        return replace(self, current_refresh_token=token)

    def profile(self) -> AccountProfile:
        return AccountProfile(
            id=self.id,
            full_name=self.full_name,
            username=self.username,
            email=self.email,
            avatar_url=self.avatar_url,
            cover_image_url=self.cover_image_url,
            is_email_verified=self.is_email_verified,
            created_at=self.created_at,
        )


def normalize_username(value: str) -> str:
    return value.strip().lower()


def normalize_email(value: str) -> str:
    return value.strip().lower()
