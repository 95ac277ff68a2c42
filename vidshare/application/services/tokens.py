# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Signed access/refresh token issuing and verification."""

from __future__ import annotations

import secrets
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from enum import Enum

import jwt

from vidshare.domain.accounts.exceptions import InvalidTokenError
from vidshare.shared.config import TokenSettings
from vidshare.shared.logging import logger


class TokenType(str, Enum):
    ACCESS = "access"
    REFRESH = "refresh"


@dataclass(slots=True, frozen=True)
class TokenClaims:
    account_id: int
    token_type: TokenType
    issued_at: datetime
    expires_at: datetime
    token_id: str


@dataclass(slots=True, frozen=True)
class TokenPair:
    access_token: str
    refresh_token: str | None


class TokenService:
    """Stateless JWT issuing; secrets and lifetimes come from :class:`TokenSettings`."""

    def __init__(
        self,
        settings: TokenSettings,
        *,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._settings = settings
        self._clock = clock or (lambda: datetime.now(UTC))

    @property
    def access_ttl(self) -> timedelta:
        return timedelta(seconds=self._settings.access_ttl_seconds)

    @property
    def refresh_ttl(self) -> timedelta:
        return timedelta(seconds=self._settings.refresh_ttl_seconds)

    def issue_access_token(self, account_id: int) -> str:
        return self._issue(
            account_id, TokenType.ACCESS, self._settings.access_secret, self.access_ttl
        )

    def issue_refresh_token(self, account_id: int) -> str:
        return self._issue(
            account_id, TokenType.REFRESH, self._settings.refresh_secret, self.refresh_ttl
        )

    def issue_pair(self, account_id: int) -> TokenPair:
        return TokenPair(
            access_token=self.issue_access_token(account_id),
            refresh_token=self.issue_refresh_token(account_id),
        )

    def verify(
        self,
        token: str,
        secret: str,
        *,
        expected_type: TokenType | None = None,
    ) -> TokenClaims:
        """Decode ``token`` or raise :class:`InvalidTokenError`.

        Expiry is judged against the injected clock, the same one used for
        issuing. Expired and malformed tokens fail identically; the
        difference only shows up in the log line.
        """

        try:
            payload = jwt.decode(
                token,
                secret,
                algorithms=[self._settings.algorithm],
                options={
                    "require": ["sub", "exp", "iat", "typ"],
                    "verify_exp": False,
                    "verify_iat": False,
                },
            )
        except jwt.InvalidTokenError as exc:
            logger.warning(f"tokens.verify: malformed token ({type(exc).__name__})")
            raise InvalidTokenError() from exc

        try:
            claims = TokenClaims(
                account_id=int(payload["sub"]),
                token_type=TokenType(payload["typ"]),
                issued_at=datetime.fromtimestamp(int(payload["iat"]), UTC),
                expires_at=datetime.fromtimestamp(int(payload["exp"]), UTC),
                token_id=str(payload.get("jti", "")),
            )
        except (TypeError, ValueError) as exc:
            logger.warning("tokens.verify: unexpected claim values")
            raise InvalidTokenError() from exc

        if claims.expires_at <= self._clock():
            logger.info("tokens.verify: expired token")
            raise InvalidTokenError()

        if expected_type is not None and claims.token_type is not expected_type:
            logger.warning(
                f"tokens.verify: wrong token type {claims.token_type.value}, "
                f"expected {expected_type.value}"
            )
            raise InvalidTokenError()
        return claims

    def verify_access(self, token: str) -> TokenClaims:
        return self.verify(token, self._settings.access_secret, expected_type=TokenType.ACCESS)

    def verify_refresh(self, token: str) -> TokenClaims:
        return self.verify(token, self._settings.refresh_secret, expected_type=TokenType.REFRESH)

    def _issue(
        self, account_id: int, token_type: TokenType, secret: str, ttl: timedelta
    ) -> str:
        now = self._clock()
        payload = {
            "sub": str(account_id),
            "typ": token_type.value,
            "iat": int(now.timestamp()),
            "exp": int((now + ttl).timestamp()),
            "jti": secrets.token_urlsafe(16),
        }
        return jwt.encode(payload, secret, algorithm=self._settings.algorithm)


__all__ = ["TokenClaims", "TokenPair", "TokenService", "TokenType"]
