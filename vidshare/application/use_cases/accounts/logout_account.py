"""Use-case for ending the account's session."""

from __future__ import annotations

from vidshare.domain.accounts.repositories import AccountRepository


class LogoutAccountUseCase:
    def __init__(self, *, accounts: AccountRepository) -> None:
        self._accounts = accounts

    def execute(self, account_id: int) -> None:
        self._accounts.set_refresh_token(account_id, None)
