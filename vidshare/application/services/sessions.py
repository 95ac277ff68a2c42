# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from dataclasses import dataclass

from vidshare.application.services.tokens import TokenService
from vidshare.domain.accounts.entities import Account, AccountProfile
from vidshare.domain.accounts.repositories import AccountRepository
from vidshare.shared.logging import logger


@dataclass(slots=True, frozen=True)
class AuthSession:
    account: AccountProfile
    access_token: str
    refresh_token: str


class SessionIssuer:
    """Mints a token pair and stores the refresh token in the account's single slot.

    Storing overwrites whatever token was there, which ends every other
    session of the account.
    """

    def __init__(self, *, accounts: AccountRepository, tokens: TokenService) -> None:
        self._accounts = accounts
        self._tokens = tokens

    def start(self, account: Account) -> AuthSession:
        access_token = self._tokens.issue_access_token(account.id)
        refresh_token = self._tokens.issue_refresh_token(account.id)
        self._accounts.set_refresh_token(account.id, refresh_token)
        logger.info(f"sessions.start: account_id={account.id}")
        return AuthSession(
            account=account.profile(),
            access_token=access_token,
            refresh_token=refresh_token,
        )
