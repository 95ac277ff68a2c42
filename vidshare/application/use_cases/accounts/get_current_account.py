from __future__ import annotations

from vidshare.domain.accounts.entities import AccountProfile
from vidshare.domain.accounts.exceptions import AccountNotFoundError
from vidshare.domain.accounts.repositories import AccountRepository


class GetCurrentAccountUseCase:
    def __init__(self, *, accounts: AccountRepository) -> None:
        self._accounts = accounts

    def execute(self, account_id: int) -> AccountProfile:
        account = self._accounts.find_by_id(account_id)
        if account is None:
            raise AccountNotFoundError()
        return account.profile()
