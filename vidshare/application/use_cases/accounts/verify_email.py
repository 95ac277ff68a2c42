# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from vidshare.application.services.sessions import AuthSession, SessionIssuer
from vidshare.application.services.verification import VerificationService
from vidshare.domain.accounts.entities import normalize_email
from vidshare.domain.accounts.exceptions import AccountNotFoundError
from vidshare.domain.accounts.repositories import AccountRepository


class VerifyEmailUseCase:
    """Checks the emailed code; success also opens the first session."""

    def __init__(
        self,
        *,
        accounts: AccountRepository,
        verification: VerificationService,
        sessions: SessionIssuer,
    ) -> None:
        self._accounts = accounts
        self._verification = verification
        self._sessions = sessions

    def execute(self, email: str, code: str) -> AuthSession:
        account = self._accounts.find_by_email(normalize_email(email))
        if account is None:
            raise AccountNotFoundError()

        verified = self._verification.verify_code(account, code)
        return self._sessions.start(verified)
