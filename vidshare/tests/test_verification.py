from __future__ import annotations

from datetime import timedelta

import pytest

from vidshare.application.services.password_hashing import BcryptCodeHasher
from vidshare.application.services.verification import (
    VERIFICATION_SUBJECT,
    VerificationService,
    generate_code,
)
from vidshare.domain.accounts.entities import VerificationState
from vidshare.domain.accounts.exceptions import (
    AlreadyVerifiedError,
    CodeExpiredError,
    CodeInvalidError,
    MailDeliveryError,
)


def test_generated_codes_are_six_digits() -> None:
    for _ in range(200):
        code = generate_code()
        assert len(code) == 6
        assert 100_000 <= int(code) <= 999_999


def test_issue_code_persists_hash_and_mails_plaintext(
    verification, accounts, mailer, clock, make_account
) -> None:
    account = make_account(verified=False)

    updated = verification.issue_code(account)

    stored = accounts.find_by_id(account.id)
    assert stored.verification_state is VerificationState.PENDING
    assert stored.email_verification_code_hash == "hashed:123456"
    assert stored.email_verification_expires_at == clock.now + timedelta(minutes=10)
    assert updated.email_verification_code_hash == stored.email_verification_code_hash

    to, subject, body = mailer.sent[-1]
    assert to == "alice@example.com"
    assert subject == VERIFICATION_SUBJECT
    assert "<h2>123456</h2>" in body
    assert "10 minutes" in body


def test_verify_code_success_clears_pending_state(verification, accounts, make_account) -> None:
    account = verification.issue_code(make_account(verified=False))

    result = verification.verify_code(account, "123456")

    stored = accounts.find_by_id(account.id)
    assert result.is_email_verified
    assert stored.is_email_verified
    assert stored.email_verification_code_hash is None
    assert stored.email_verification_expires_at is None


def test_verify_code_after_expiry_fails(verification, clock, make_account) -> None:
    account = verification.issue_code(make_account(verified=False))
    clock.advance(minutes=10, seconds=1)

    with pytest.raises(CodeExpiredError):
        verification.verify_code(account, "123456")


def test_verify_code_at_exact_expiry_still_valid(verification, clock, make_account) -> None:
    account = verification.issue_code(make_account(verified=False))
    clock.advance(minutes=10)

    assert verification.verify_code(account, "123456").is_email_verified


def test_verify_wrong_code_fails_and_keeps_state(verification, accounts, make_account) -> None:
    account = verification.issue_code(make_account(verified=False))

    with pytest.raises(CodeInvalidError):
        verification.verify_code(account, "654321")
    assert accounts.find_by_id(account.id).verification_state is VerificationState.PENDING


def test_verify_without_pending_code_fails(verification, make_account) -> None:
    with pytest.raises(CodeInvalidError):
        verification.verify_code(make_account(verified=False), "123456")


def test_verified_account_rejects_any_code(verification, make_account) -> None:
    with pytest.raises(CodeInvalidError):
        verification.verify_code(make_account(verified=True), "123456")


def test_resend_supersedes_previous_code(accounts, hasher, mailer, clock, make_account) -> None:
    codes = iter(["111111", "222222"])
    service = VerificationService(
        accounts=accounts,
        code_hasher=hasher,
        mailer=mailer,
        clock=clock,
        code_factory=lambda: next(codes),
    )
    account = make_account(verified=False)
    service.issue_code(account)
    resent = service.resend(accounts.find_by_id(account.id))

    with pytest.raises(CodeInvalidError):
        service.verify_code(resent, "111111")
    assert service.verify_code(resent, "222222").is_email_verified
    assert len(mailer.sent) == 2


def test_resend_on_verified_account_fails(verification, make_account) -> None:
    with pytest.raises(AlreadyVerifiedError):
        verification.resend(make_account(verified=True))


def test_mail_failure_leaves_pending_code_that_resend_replaces(
    verification, accounts, mailer, make_account
) -> None:
    account = make_account(verified=False)
    mailer.fail = True

    with pytest.raises(MailDeliveryError):
        verification.issue_code(account)
    assert accounts.find_by_id(account.id).verification_state is VerificationState.PENDING

    mailer.fail = False
    verification.resend(accounts.find_by_id(account.id))
    assert len(mailer.sent) == 1


def test_bcrypt_code_hasher_checks_codes() -> None:
    code_hasher = BcryptCodeHasher(rounds=4)
    hashed = code_hasher.hash("123456")

    assert hashed != "123456"
    assert code_hasher.verify("123456", hashed)
    assert not code_hasher.verify("123457", hashed)
    assert not code_hasher.verify("123456", "not-a-bcrypt-hash")
