from __future__ import annotations

import os
import tempfile
from dataclasses import replace
from datetime import UTC, datetime, timedelta
from pathlib import Path

_TMP = Path(tempfile.mkdtemp(prefix="vidshare-tests-"))
os.environ.setdefault("DATABASE_URL", f"sqlite:///{_TMP / 'default.db'}")
os.environ.setdefault("LOG_FILE", str(_TMP / "vidshare.log"))
os.environ.setdefault("UPLOAD_TEMP_DIR", str(_TMP / "uploads"))
os.environ["ENABLE_RATE_LIMIT"] = "false"
os.environ["COOKIE_SECURE"] = "false"
os.environ["COOKIE_SAMESITE"] = "Lax"
os.environ["MAIL_BACKEND"] = "console"
os.environ["ACCESS_TOKEN_SECRET"] = "access-secret-for-tests-0123456789abcdef"
os.environ["REFRESH_TOKEN_SECRET"] = "refresh-secret-for-tests-0123456789abcdef"

import pytest  # noqa: E402

from vidshare.application.services.sessions import SessionIssuer  # noqa: E402
from vidshare.application.services.tokens import TokenService  # noqa: E402
from vidshare.application.services.verification import VerificationService  # noqa: E402
from vidshare.domain.accounts.entities import Account, UploadedMedia  # noqa: E402
from vidshare.domain.accounts.exceptions import (  # noqa: E402
    DuplicateAccountError,
    MailDeliveryError,
)
from vidshare.shared.config import TokenSettings  # noqa: E402

ACCESS_SECRET = os.environ["ACCESS_TOKEN_SECRET"]
REFRESH_SECRET = os.environ["REFRESH_TOKEN_SECRET"]


class InMemoryAccountRepository:
    def __init__(self) -> None:
        self._accounts: dict[int, Account] = {}
        self._seq = 1

    def find_by_id(self, account_id: int) -> Account | None:
        return self._accounts.get(account_id)

    def find_by_username(self, username: str) -> Account | None:
        return next((a for a in self._accounts.values() if a.username == username), None)

    def find_by_email(self, email: str) -> Account | None:
        return next((a for a in self._accounts.values() if a.email == email), None)

    def exists(self, *, username: str, email: str) -> bool:
        return self.find_by_username(username) is not None or self.find_by_email(email) is not None

    def add(self, account: Account) -> Account:
        if self.exists(username=account.username, email=account.email):
            raise DuplicateAccountError()
        stored = replace(account, id=self._seq)
        self._seq += 1
        self._accounts[stored.id] = stored
        return stored

    def save_verification_code(self, account_id: int, code_hash: str, expires_at: datetime) -> None:
        self._accounts[account_id] = self._accounts[account_id].with_pending_code(
            code_hash, expires_at
        )

    def mark_email_verified(self, account_id: int) -> None:
        self._accounts[account_id] = self._accounts[account_id].verified()

    def set_refresh_token(self, account_id: int, token: str | None) -> None:
        if account_id in self._accounts:
            self._accounts[account_id] = self._accounts[account_id].with_refresh_token(token)

    def swap_refresh_token(self, account_id: int, expected: str, replacement: str) -> bool:
        account = self._accounts.get(account_id)
        if account is None or account.current_refresh_token != expected:
            return False
        self._accounts[account_id] = account.with_refresh_token(replacement)
        return True

    def update_password_hash(self, account_id: int, password_hash: str) -> None:
        self._accounts[account_id] = replace(self._accounts[account_id], password_hash=password_hash)

    def delete(self, account_id: int) -> None:
        self._accounts.pop(account_id, None)


class DeterministicHasher:
    def hash(self, password: str) -> str:
        return f"hashed:{password}"

    def verify(self, password: str, hashed: str) -> bool:
        return hashed == f"hashed:{password}"


class RecordingMailer:
    def __init__(self) -> None:
        self.sent: list[tuple[str, str, str]] = []
        self.fail = False

    def send(self, to: str, subject: str, body: str) -> None:
        if self.fail:
            raise MailDeliveryError()
        self.sent.append((to, subject, body))


class FakeMediaStorage:
    def __init__(self) -> None:
        self.uploaded: list[Path] = []
        self.deleted: list[str] = []
        self.fail_names: set[str] = set()

    def upload(self, local_path: Path) -> UploadedMedia | None:
        path = Path(local_path)
        if any(path.name.endswith(name) for name in self.fail_names):
            return None
        self.uploaded.append(path)
        n = len(self.uploaded)
        return UploadedMedia(url=f"https://cdn.test/{path.name}", file_id=f"file-{n}")

    def delete(self, file_id: str) -> bool | None:
        self.deleted.append(file_id)
        return True


class Clock:
    def __init__(self, now: datetime | None = None) -> None:
        self.now = now or datetime.now(UTC)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture()
def accounts() -> InMemoryAccountRepository:
    return InMemoryAccountRepository()


@pytest.fixture()
def hasher() -> DeterministicHasher:
    return DeterministicHasher()


@pytest.fixture()
def mailer() -> RecordingMailer:
    return RecordingMailer()


@pytest.fixture()
def media() -> FakeMediaStorage:
    return FakeMediaStorage()


@pytest.fixture()
def clock() -> Clock:
    return Clock()


@pytest.fixture()
def token_settings() -> TokenSettings:
    return TokenSettings(access_secret=ACCESS_SECRET, refresh_secret=REFRESH_SECRET)


@pytest.fixture()
def tokens(token_settings: TokenSettings) -> TokenService:
    return TokenService(token_settings)


@pytest.fixture()
def verification(
    accounts: InMemoryAccountRepository,
    hasher: DeterministicHasher,
    mailer: RecordingMailer,
    clock: Clock,
) -> VerificationService:
    return VerificationService(
        accounts=accounts,
        code_hasher=hasher,
        mailer=mailer,
        clock=clock,
        code_factory=lambda: "123456",
    )


@pytest.fixture()
def sessions(accounts: InMemoryAccountRepository, tokens: TokenService) -> SessionIssuer:
    return SessionIssuer(accounts=accounts, tokens=tokens)


@pytest.fixture()
def make_account(accounts: InMemoryAccountRepository):
    def _make(
        username: str = "alice",
        email: str = "alice@example.com",
        password: str = "secret123",
        verified: bool = True,
    ) -> Account:
        return accounts.add(
            Account(
                id=0,
                full_name="Alice Liddell",
                username=username,
                email=email,
                password_hash=f"hashed:{password}",
                is_email_verified=verified,
                created_at=datetime.now(UTC),
            )
        )

    return _make
