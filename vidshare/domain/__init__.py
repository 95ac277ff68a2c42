# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from .accounts.entities import Account, AccountProfile, UploadedMedia, VerificationState
from .exceptions import InvariantViolation

__all__ = [
    "Account",
    "AccountProfile",
    "InvariantViolation",
    "UploadedMedia",
    "VerificationState",
]
