# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Access-token gate for protected routes."""

from __future__ import annotations

from collections.abc import Callable
from functools import wraps
from typing import Any, TypeVar, cast

from flask import g, request

from vidshare.application.services.tokens import TokenService
from vidshare.domain.accounts.entities import AccountProfile
from vidshare.domain.accounts.exceptions import InvalidTokenError, UnauthorizedError
from vidshare.domain.accounts.repositories import AccountRepository
from vidshare.shared.logging import logger

ACCESS_COOKIE = "accessToken"

F = TypeVar("F", bound=Callable[..., Any])


def _extract_token() -> str:
    token = request.cookies.get(ACCESS_COOKIE, "")
    if token:
        return token
    auth = request.headers.get("Authorization", "")
    if auth.startswith("Bearer "):
        return auth[7:].strip()
    return ""


class AuthGate:
    """Resolves the access token of the current request to an account profile."""

    def __init__(self, *, tokens: TokenService, accounts: AccountRepository) -> None:
        self._tokens = tokens
        self._accounts = accounts

    def authenticate(self) -> AccountProfile:
        token = _extract_token()
        if not token:
            logger.warning(
                f"No access token cookie/header on {request.method} {request.path}"
            )
            raise UnauthorizedError()

        try:
            claims = self._tokens.verify_access(token)
        except InvalidTokenError as exc:
            raise UnauthorizedError("Invalid access token") from exc

        account = self._accounts.find_by_id(claims.account_id)
        if account is None:
            logger.warning(
                f"Auth failed (account gone) account_id={claims.account_id} "
                f"on {request.method} {request.path}"
            )
            raise UnauthorizedError("Invalid access token")
        return account.profile()

    def auth_required(self, f: F) -> F:
        @wraps(f)
        def inner(*args: Any, **kwargs: Any) -> Any:
            profile = self.authenticate()
            g.account = profile
            g.user_id = profile.id
            return f(*args, **kwargs)

        return cast(F, inner)


def current_account() -> AccountProfile:
    account = getattr(g, "account", None)
    if account is None:
        raise UnauthorizedError()
    return account


__all__ = ["ACCESS_COOKIE", "AuthGate", "current_account"]
