"""Password and verification-code hashing strategies."""

from __future__ import annotations

import bcrypt
from werkzeug.security import check_password_hash, generate_password_hash

from vidshare.domain.accounts.repositories import CodeHasher, PasswordHasher


class WerkzeugPasswordHasher(PasswordHasher):
    def hash(self, password: str) -> str:
        return str(generate_password_hash(password))

    def verify(self, password: str, hashed: str) -> bool:
        return bool(check_password_hash(hashed, password))


class BcryptCodeHasher(CodeHasher):
    """Slow one-way hash for short numeric secrets."""

    def __init__(self, rounds: int = 10) -> None:
        self._rounds = rounds

    def hash(self, code: str) -> str:
        salt = bcrypt.gensalt(rounds=self._rounds)
        return bcrypt.hashpw(code.encode("utf-8"), salt).decode("ascii")

    def verify(self, code: str, hashed: str) -> bool:
        try:
            return bcrypt.checkpw(code.encode("utf-8"), hashed.encode("ascii"))
        except ValueError:
            # Malformed stored hash
            return False
