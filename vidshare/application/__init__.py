# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from .services.sessions import AuthSession, SessionIssuer
from .services.tokens import TokenClaims, TokenPair, TokenService, TokenType
from .services.verification import VerificationService

__all__ = [
    "AuthSession",
    "SessionIssuer",
    "TokenClaims",
    "TokenPair",
    "TokenService",
    "TokenType",
    "VerificationService",
]
