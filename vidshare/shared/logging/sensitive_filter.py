# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

import re
from typing import Any

_I = re.IGNORECASE


def _keyed(key: str, value: str = r"[^'\"\s,}]+") -> re.Pattern[str]:
    """``key=value`` / ``key: "value"`` with the value in group 2."""
    return re.compile(rf"((?:{key})\s*[:=]\s*['\"]?)({value})", _I)


_REDACTIONS: tuple[tuple[re.Pattern[str], str], ...] = (
    # Access and refresh tokens are HS256 JWTs
    (re.compile(r"\beyJ[\w-]+\.[\w-]+\.[\w-]+"), "***JWT***"),
    (re.compile(r"(bearer\s+)[\w.~+/-]{20,}=*", _I), r"\1***REDACTED***"),
    (_keyed(r"authorization"), r"\1***REDACTED***"),
    (_keyed(r"(?:access|refresh)?[_-]?token", r"[\w.-]{20,}"), r"\1***REDACTED***"),
    (_keyed(r"[\w-]*secret|private[_-]?key|api[_-]?key", r"[\w-]{8,}"), r"\1***REDACTED***"),
    (_keyed(r"(?:old|new)?[_-]?password|pwd"), r"\1***REDACTED***"),
    (_keyed(r"code", r"\d{6}"), r"\1******"),
    (
        re.compile(r"\b((?:postgres(?:ql)?|mysql|mariadb)(?:\+\w+)?://[^:/\s]+:)[^@\s]+@", _I),
        r"\1***REDACTED***@",
    ),
    (re.compile(r"\b[\w.%+-]+@([\w-]+(?:\.[\w-]+)*\.[a-zA-Z]{2,})\b"), r"***@\1"),
)


def sanitize_message(message: str) -> str:
    for pattern, replacement in _REDACTIONS:
        message = pattern.sub(replacement, message)
    return message


def mask_identifier(value: str) -> str:
    """Keep enough of an email or username to correlate, not to identify."""
    if "@" in value:
        local, domain = value.split("@", 1)
        return f"{local[:2]}***@{domain}"
    return f"{value[:2]}***" if value else "***"


def sanitize_record(record: dict[str, Any]) -> bool:
    """loguru filter: scrub the message in place and keep the record."""
    if "message" in record:
        record["message"] = sanitize_message(record["message"])
    return True


__all__ = ["mask_identifier", "sanitize_message", "sanitize_record"]
