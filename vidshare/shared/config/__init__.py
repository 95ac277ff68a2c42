# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from .settings import (
    AppConfig,
    AuthPolicyConfig,
    MailConfig,
    MediaConfig,
    SecurityConfig,
    TokenSettings,
    load_config,
)

__all__ = [
    "AppConfig",
    "AuthPolicyConfig",
    "MailConfig",
    "MediaConfig",
    "SecurityConfig",
    "TokenSettings",
    "load_config",
]
