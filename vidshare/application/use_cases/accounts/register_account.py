# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path

from vidshare.application.services.verification import VerificationService
from vidshare.domain.accounts.entities import (
    Account,
    AccountProfile,
    UploadedMedia,
    normalize_email,
    normalize_username,
)
from vidshare.domain.accounts.exceptions import DuplicateAccountError, MediaUploadError
from vidshare.domain.accounts.repositories import AccountRepository, MediaStorage, PasswordHasher
from vidshare.shared.logging import logger


@dataclass(slots=True, frozen=True)
class RegistrationData:
    full_name: str
    email: str
    username: str
    password: str
    avatar_path: Path
    cover_image_path: Path


class RegisterAccountUseCase:
    def __init__(
        self,
        *,
        accounts: AccountRepository,
        password_hasher: PasswordHasher,
        media: MediaStorage,
        verification: VerificationService,
    ) -> None:
        self._accounts = accounts
        self._password_hasher = password_hasher
        self._media = media
        self._verification = verification

    def execute(self, data: RegistrationData) -> AccountProfile:
        username = normalize_username(data.username)
        email = normalize_email(data.email)
        if self._accounts.exists(username=username, email=email):
            raise DuplicateAccountError()

        uploaded: list[UploadedMedia] = []
        try:
            avatar = self._upload(data.avatar_path, "Avatar upload failed")
            uploaded.append(avatar)
            cover_image = self._upload(data.cover_image_path, "Cover image upload failed")
            uploaded.append(cover_image)

            account = Account(
                id=0,
                full_name=data.full_name.strip(),
                username=username,
                email=email,
                password_hash=self._password_hasher.hash(data.password),
                avatar_url=avatar.url,
                avatar_file_id=avatar.file_id,
                cover_image_url=cover_image.url,
                cover_image_file_id=cover_image.file_id,
                is_email_verified=False,
                created_at=datetime.now(UTC),
            )
            persisted = self._accounts.add(account)
        except Exception:
            self._discard(uploaded)
            raise

        logger.info(f"accounts.register: created account_id={persisted.id}")
        # Not atomic with account creation: a mail failure surfaces to the
        # caller while the unverified account stays, and resend repairs it.
        self._verification.issue_code(persisted)
        return persisted.profile()

    def _upload(self, path: Path, failure_message: str) -> UploadedMedia:
        result = self._media.upload(path)
        if result is None or not result.url:
            logger.warning(f"accounts.register: upload failed for {path.name}")
            raise MediaUploadError(failure_message)
        return result

    def _discard(self, uploaded: list[UploadedMedia]) -> None:
        for media in uploaded:
            if not self._media.delete(media.file_id):
                logger.warning(f"accounts.register: could not delete orphaned media {media.file_id}")
