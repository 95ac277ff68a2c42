# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime

from sqlalchemy import or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from vidshare.domain.accounts.entities import Account as DomainAccount
from vidshare.domain.accounts.exceptions import DuplicateAccountError
from vidshare.domain.accounts.repositories import AccountRepository
from vidshare.infrastructure.db.models import Account
from vidshare.infrastructure.db.session import session_scope


def _aware(value: datetime | None) -> datetime | None:
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def _to_domain(row: Account) -> DomainAccount:
    return DomainAccount(
        id=row.id,
        full_name=row.full_name,
        username=row.username,
        email=row.email,
        password_hash=row.password_hash,
        avatar_url=row.avatar_url,
        avatar_file_id=row.avatar_file_id,
        cover_image_url=row.cover_image_url,
        cover_image_file_id=row.cover_image_file_id,
        is_email_verified=bool(row.is_email_verified),
        email_verification_code_hash=row.email_verification_code_hash,
        email_verification_expires_at=_aware(row.email_verification_expires_at),
        current_refresh_token=row.current_refresh_token,
        created_at=_aware(row.created_at),
    )


class SqlAlchemyAccountRepository(AccountRepository):
    def __init__(self, session_factory: Callable[[], Session] | None = None) -> None:
        self._session_factory = session_factory

    def find_by_id(self, account_id: int) -> DomainAccount | None:
        with session_scope(self._session_factory) as session:
            row = session.get(Account, account_id)
            return _to_domain(row) if row else None

    def find_by_username(self, username: str) -> DomainAccount | None:
        with session_scope(self._session_factory) as session:
            row = session.scalars(select(Account).where(Account.username == username)).first()
            return _to_domain(row) if row else None

    def find_by_email(self, email: str) -> DomainAccount | None:
        with session_scope(self._session_factory) as session:
            row = session.scalars(select(Account).where(Account.email == email)).first()
            return _to_domain(row) if row else None

    def exists(self, *, username: str, email: str) -> bool:
        with session_scope(self._session_factory) as session:
            row_id = session.scalars(
                select(Account.id).where(
                    or_(Account.username == username, Account.email == email)
                )
            ).first()
            return row_id is not None

    def add(self, account: DomainAccount) -> DomainAccount:
        try:
            with session_scope(self._session_factory) as session:
                row = Account(
                    full_name=account.full_name,
                    username=account.username,
                    email=account.email,
                    password_hash=account.password_hash,
                    avatar_url=account.avatar_url,
                    avatar_file_id=account.avatar_file_id,
                    cover_image_url=account.cover_image_url,
                    cover_image_file_id=account.cover_image_file_id,
                    is_email_verified=account.is_email_verified,
                    email_verification_code_hash=account.email_verification_code_hash,
                    email_verification_expires_at=account.email_verification_expires_at,
                )
                if account.created_at is not None:
                    row.created_at = account.created_at
                session.add(row)
                session.flush()
                session.refresh(row)
                return _to_domain(row)
        except IntegrityError as exc:
            raise DuplicateAccountError() from exc

    def save_verification_code(
        self, account_id: int, code_hash: str, expires_at: datetime
    ) -> None:
        self._update(
            account_id,
            email_verification_code_hash=code_hash,
            email_verification_expires_at=expires_at,
        )

    def mark_email_verified(self, account_id: int) -> None:
        self._update(
            account_id,
            is_email_verified=True,
            email_verification_code_hash=None,
            email_verification_expires_at=None,
        )

    def set_refresh_token(self, account_id: int, token: str | None) -> None:
        self._update(account_id, current_refresh_token=token)

    def swap_refresh_token(self, account_id: int, expected: str, replacement: str) -> bool:
        with session_scope(self._session_factory) as session:
            result = session.execute(
                update(Account)
                .where(Account.id == account_id, Account.current_refresh_token == expected)
                .values(current_refresh_token=replacement, updated_at=datetime.now(UTC))
            )
            return result.rowcount == 1

    def update_password_hash(self, account_id: int, password_hash: str) -> None:
        self._update(account_id, password_hash=password_hash)

    def _update(self, account_id: int, **values: object) -> int:
        with session_scope(self._session_factory) as session:
            result = session.execute(
                update(Account)
                .where(Account.id == account_id)
                .values(updated_at=datetime.now(UTC), **values)
            )
            return result.rowcount
