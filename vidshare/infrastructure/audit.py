# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Security audit trail for account and session events.

Every event is written twice: a log line (always) and an ``audit_logs`` row
(best effort). It also bumps the ``vidshare_auth_events_total`` counter.
"""

from __future__ import annotations

import json
from collections.abc import Callable, Mapping
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from vidshare.infrastructure.db.models import AuditLog
from vidshare.infrastructure.db.session import session_scope
from vidshare.infrastructure.observability import record_auth_event
from vidshare.shared.logging import get_correlation_id, logger


class AuditAction(str, Enum):
    REGISTER = "register"
    EMAIL_VERIFIED = "email_verified"
    VERIFICATION_CODE_SENT = "verification_code_sent"
    LOGIN_SUCCESS = "login_success"
    LOGIN_FAILED = "login_failed"
    LOGOUT = "logout"
    TOKEN_REFRESHED = "token_refreshed"
    REFRESH_REUSE_DETECTED = "refresh_reuse_detected"
    PASSWORD_CHANGED = "password_changed"


_REDACTED_KEY_PARTS = ("password", "token", "code", "secret", "key", "hash")


def redact_details(details: Mapping[str, Any] | None) -> dict[str, Any]:
    if not details:
        return {}
    return {
        key: "***REDACTED***"
        if any(part in key.lower() for part in _REDACTED_KEY_PARTS)
        else value
        for key, value in details.items()
    }


class AuditLogger:
    def __init__(self, session_factory: Callable[[], Session] | None = None) -> None:
        self._session_factory = session_factory

    def log(
        self,
        action: AuditAction,
        account_id: int | None = None,
        ip_address: str | None = None,
        details: Mapping[str, Any] | None = None,
        success: bool = True,
    ) -> None:
        safe = redact_details(details)
        line = (
            f"audit: {action.value} account_id={account_id} ip={ip_address} "
            f"success={success}"
        )
        if safe:
            line += f" details={safe}"
        (logger.info if success else logger.warning)(line)

        record_auth_event(action.value, success)
        self._persist(action, account_id, ip_address, success, safe)

    def _persist(
        self,
        action: AuditAction,
        account_id: int | None,
        ip_address: str | None,
        success: bool,
        details: dict[str, Any],
    ) -> None:
        payload = dict(details)
        correlation_id = get_correlation_id()
        if correlation_id != "-":
            payload["correlation_id"] = correlation_id

        row = AuditLog(
            timestamp=datetime.now(UTC),
            action=action.value,
            account_id=account_id,
            ip_address=ip_address,
            success=success,
            details_json=json.dumps(payload, default=str)[:2048] if payload else None,
        )
        # Audit rows are best effort
        try:
            with session_scope(self._session_factory) as session:
                session.add(row)
        except SQLAlchemyError as exc:
            logger.warning(f"audit: row for {action.value} not stored ({type(exc).__name__})")


audit = AuditLogger()


def audit_log(
    action: AuditAction,
    account_id: int | None = None,
    ip_address: str | None = None,
    details: Mapping[str, Any] | None = None,
    success: bool = True,
) -> None:
    audit.log(action, account_id, ip_address, details, success)


__all__ = ["AuditAction", "AuditLogger", "audit", "audit_log", "redact_details"]
