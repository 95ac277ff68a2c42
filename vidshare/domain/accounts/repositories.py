# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Protocol

from .entities import Account, UploadedMedia


class AccountRepository(Protocol):
    def find_by_id(self, account_id: int) -> Account | None: ...
    def find_by_username(self, username: str) -> Account | None: ...
    def find_by_email(self, email: str) -> Account | None: ...
    def exists(self, *, username: str, email: str) -> bool: ...
    def add(self, account: Account) -> Account: ...
    def save_verification_code(
        self, account_id: int, code_hash: str, expires_at: datetime
    ) -> None: ...
    def mark_email_verified(self, account_id: int) -> None: ...
    def set_refresh_token(self, account_id: int, token: str | None) -> None: ...
    def swap_refresh_token(self, account_id: int, expected: str, replacement: str) -> bool: ...
    def update_password_hash(self, account_id: int, password_hash: str) -> None: ...


class PasswordHasher(Protocol):
    def hash(self, password: str) -> str: ...
    def verify(self, password: str, hashed: str) -> bool: ...


class CodeHasher(Protocol):
    def hash(self, code: str) -> str: ...
    def verify(self, code: str, hashed: str) -> bool: ...


class Mailer(Protocol):
    def send(self, to: str, subject: str, body: str) -> None: ...


class MediaStorage(Protocol):
    def upload(self, local_path: Path) -> UploadedMedia | None: ...
    def delete(self, file_id: str) -> bool | None: ...
