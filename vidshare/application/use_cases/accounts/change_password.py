# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from vidshare.domain.accounts.exceptions import AccountNotFoundError, InvalidCredentialsError
from vidshare.domain.accounts.repositories import AccountRepository, PasswordHasher
from vidshare.shared.logging import logger


class ChangePasswordUseCase:
    def __init__(self, *, accounts: AccountRepository, password_hasher: PasswordHasher) -> None:
        self._accounts = accounts
        self._password_hasher = password_hasher

    def execute(self, account_id: int, old_password: str, new_password: str) -> None:
        account = self._accounts.find_by_id(account_id)
        if account is None:
            raise AccountNotFoundError()

        if not self._password_hasher.verify(old_password, account.password_hash):
            raise InvalidCredentialsError("Invalid old password")

        self._accounts.update_password_hash(account_id, self._password_hasher.hash(new_password))
        logger.info(f"accounts.change_password: ok account_id={account_id}")
