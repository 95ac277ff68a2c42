# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from vidshare.application.services.sessions import AuthSession, SessionIssuer
from vidshare.domain.accounts.entities import Account, normalize_email, normalize_username
from vidshare.domain.accounts.exceptions import (
    AccountNotFoundError,
    EmailNotVerifiedError,
    InvalidCredentialsError,
)
from vidshare.domain.accounts.repositories import AccountRepository, PasswordHasher
from vidshare.shared.logging import logger


class LoginAccountUseCase:
    def __init__(
        self,
        *,
        accounts: AccountRepository,
        password_hasher: PasswordHasher,
        sessions: SessionIssuer,
        require_verified_email: bool = True,
    ) -> None:
        self._accounts = accounts
        self._password_hasher = password_hasher
        self._sessions = sessions
        self._require_verified_email = require_verified_email

    def execute(self, identifier: str, password: str) -> AuthSession:
        account = self._lookup(identifier)
        if account is None:
            raise AccountNotFoundError()

        if self._require_verified_email and not account.is_email_verified:
            logger.info(f"accounts.login: unverified account_id={account.id}")
            raise EmailNotVerifiedError()

        if not self._password_hasher.verify(password, account.password_hash):
            logger.info(f"accounts.login: bad password account_id={account.id}")
            raise InvalidCredentialsError()

        return self._sessions.start(account)

    def _lookup(self, identifier: str) -> Account | None:
        account = self._accounts.find_by_username(normalize_username(identifier))
        if account is None:
            account = self._accounts.find_by_email(normalize_email(identifier))
        return account
