"""Use-case for re-sending a superseding verification code."""

from __future__ import annotations

from vidshare.application.services.verification import VerificationService
from vidshare.domain.accounts.entities import normalize_email
from vidshare.domain.accounts.exceptions import AccountNotFoundError
from vidshare.domain.accounts.repositories import AccountRepository


class ResendVerificationCodeUseCase:
    def __init__(
        self, *, accounts: AccountRepository, verification: VerificationService
    ) -> None:
        self._accounts = accounts
        self._verification = verification

    def execute(self, email: str) -> None:
        account = self._accounts.find_by_email(normalize_email(email))
        if account is None:
            raise AccountNotFoundError()
        self._verification.resend(account)
