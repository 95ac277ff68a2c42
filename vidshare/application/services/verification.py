# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Email verification codes: issue, check, resend."""

from __future__ import annotations

import secrets
from collections.abc import Callable
from datetime import UTC, datetime, timedelta

from vidshare.domain.accounts.entities import Account, VerificationState
from vidshare.domain.accounts.exceptions import (
    AlreadyVerifiedError,
    CodeExpiredError,
    CodeInvalidError,
)
from vidshare.domain.accounts.repositories import AccountRepository, CodeHasher, Mailer
from vidshare.shared.logging import logger

CODE_MIN = 100_000
CODE_MAX = 999_999

VERIFICATION_SUBJECT = "Your verification code"


def generate_code() -> str:
    return str(CODE_MIN + secrets.randbelow(CODE_MAX - CODE_MIN + 1))


def render_code_email(code: str, ttl: timedelta) -> str:
    minutes = int(ttl.total_seconds() // 60)
    return f"<h2>{code}</h2><p>Expires in {minutes} minutes</p>"


class VerificationService:
    def __init__(
        self,
        *,
        accounts: AccountRepository,
        code_hasher: CodeHasher,
        mailer: Mailer,
        code_ttl: timedelta = timedelta(minutes=10),
        clock: Callable[[], datetime] | None = None,
        code_factory: Callable[[], str] = generate_code,
    ) -> None:
        self._accounts = accounts
        self._code_hasher = code_hasher
        self._mailer = mailer
        self._code_ttl = code_ttl
        self._clock = clock or (lambda: datetime.now(UTC))
        self._code_factory = code_factory

    def issue_code(self, account: Account) -> Account:
        """Store a fresh code hash (superseding any pending one) and mail the code.

        The hash is persisted before delivery, so a mail failure leaves a
        pending code the user never received; ``resend`` replaces it.
        """

        code = self._code_factory()
        expires_at = self._clock() + self._code_ttl
        code_hash = self._code_hasher.hash(code)

        self._accounts.save_verification_code(account.id, code_hash, expires_at)
        updated = account.with_pending_code(code_hash, expires_at)
        logger.info(
            f"verification.issue: account_id={account.id} expires_at={expires_at.isoformat()}"
        )

        self._mailer.send(account.email, VERIFICATION_SUBJECT, render_code_email(code, self._code_ttl))
        return updated

    def verify_code(self, account: Account, submitted_code: str) -> Account:
        stored_hash = account.email_verification_code_hash
        expires_at = account.email_verification_expires_at
        if stored_hash is None or expires_at is None:
            logger.info(
                f"verification.verify: no pending code account_id={account.id} "
                f"state={account.verification_state.value}"
            )
            raise CodeInvalidError()

        if self._clock() > _as_aware(expires_at):
            logger.info(f"verification.verify: expired code account_id={account.id}")
            raise CodeExpiredError()

        if not self._code_hasher.verify(str(submitted_code).strip(), stored_hash):
            logger.info(f"verification.verify: code mismatch account_id={account.id}")
            raise CodeInvalidError()

        self._accounts.mark_email_verified(account.id)
        logger.info(f"verification.verify: ok account_id={account.id}")
        return account.verified()

    def resend(self, account: Account) -> Account:
        if account.verification_state is VerificationState.VERIFIED:
            raise AlreadyVerifiedError()
        return self.issue_code(account)


def _as_aware(value: datetime) -> datetime:
    # SQLite drops tzinfo; stored values are always UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


__all__ = ["VerificationService", "generate_code", "render_code_email"]
