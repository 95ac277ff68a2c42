# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

import hmac

from vidshare.application.services.tokens import TokenPair, TokenService
from vidshare.domain.accounts.exceptions import MissingTokenError, ReuseDetectedError
from vidshare.domain.accounts.repositories import AccountRepository
from vidshare.shared.logging import logger


class RefreshSessionUseCase:
    """Trades a refresh token for a new access token.

    With rotation enabled the refresh token is replaced too, through a
    compare-and-swap on the stored value: of two concurrent refreshes with
    the same token only one wins, the other sees reuse.
    """

    def __init__(
        self,
        *,
        accounts: AccountRepository,
        tokens: TokenService,
        rotate_refresh_tokens: bool = True,
    ) -> None:
        self._accounts = accounts
        self._tokens = tokens
        self._rotate = rotate_refresh_tokens

    def execute(self, presented: str | None) -> TokenPair:
        if not presented:
            raise MissingTokenError()

        claims = self._tokens.verify_refresh(presented)
        account = self._accounts.find_by_id(claims.account_id)
        if (
            account is None
            or account.current_refresh_token is None
            or not hmac.compare_digest(account.current_refresh_token.encode(), presented.encode())
        ):
            logger.warning(f"sessions.refresh: reuse detected account_id={claims.account_id}")
            raise ReuseDetectedError()

        access_token = self._tokens.issue_access_token(account.id)
        if not self._rotate:
            return TokenPair(access_token=access_token, refresh_token=None)

        refresh_token = self._tokens.issue_refresh_token(account.id)
        if not self._accounts.swap_refresh_token(account.id, presented, refresh_token):
            logger.warning(f"sessions.refresh: lost rotation race account_id={account.id}")
            raise ReuseDetectedError()

        logger.info(f"sessions.refresh: rotated account_id={account.id}")
        return TokenPair(access_token=access_token, refresh_token=refresh_token)
