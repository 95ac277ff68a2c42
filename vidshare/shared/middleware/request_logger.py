# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

import hashlib
import re
import secrets
import time
from collections.abc import Mapping

from flask import Flask, Response, g, request

from vidshare.infrastructure.observability import observe_request
from vidshare.shared.config import load_config
from vidshare.shared.logging import clear_correlation_id, logger, set_correlation_id
from vidshare.shared.middleware.rate_limit import client_address

REQUEST_ID_HEADER = "X-Request-ID"

_HASHED_HEADERS = frozenset(
    {"authorization", "cookie", "set-cookie", "x-api-key", "x-auth-token"}
)
_REDACTED_PARAM_PARTS = ("password", "token", "secret", "code", "key", "auth")
_REQUEST_ID_RE = re.compile(r"^[A-Za-z0-9._-]{1,64}$")

# Access lines for these paths are debug-only
_QUIET_PATHS = frozenset({"/api/health", "/api/metrics"})

_SLOW_REQUEST_SECONDS = 1.0


def _fingerprint(value: str) -> str:
    return f"<hashed:{hashlib.sha256(value.encode()).hexdigest()[:8]}>"


def _safe_headers(headers: Mapping[str, str]) -> dict[str, str]:
    return {
        name: _fingerprint(value) if name.lower() in _HASHED_HEADERS else value
        for name, value in headers.items()
    }


def _safe_params(params: Mapping[str, str]) -> dict[str, str]:
    return {
        name: "<redacted>"
        if any(part in name.lower() for part in _REDACTED_PARAM_PARTS)
        else value
        for name, value in params.items()
    }


def _incoming_request_id() -> str:
    supplied = request.headers.get(REQUEST_ID_HEADER, "")
    if _REQUEST_ID_RE.match(supplied):
        return supplied
    return secrets.token_urlsafe(8)


def configure_request_logging(app: Flask) -> None:
    """Attach correlation ids, access logs and latency metrics to ``app``."""

    debug_mode = load_config().debug_logging

    @app.before_request
    def _start() -> None:
        g.correlation_id = _incoming_request_id()
        g.request_started = time.perf_counter()
        set_correlation_id(g.correlation_id)

        if request.path in _QUIET_PATHS and not debug_mode:
            return
        if debug_mode:
            logger.debug(
                f"--> {request.method} {request.path} from {client_address(request)} "
                f"query={_safe_params(request.args)} "
                f"headers={_safe_headers(request.headers)} "
                f"body_size={request.content_length or 0}"
            )
        else:
            logger.info(f"--> {request.method} {request.path} from {client_address(request)}")

    @app.after_request
    def _finish(response: Response) -> Response:
        elapsed = time.perf_counter() - getattr(g, "request_started", time.perf_counter())
        route = request.url_rule.rule if request.url_rule else "unmatched"
        observe_request(route, response.status_code, elapsed)
        response.headers.setdefault(REQUEST_ID_HEADER, getattr(g, "correlation_id", "-"))

        line = (
            f"<-- {request.method} {request.path} {response.status_code} "
            f"in {elapsed * 1000:.1f}ms user={getattr(g, 'user_id', None)}"
        )
        if elapsed >= _SLOW_REQUEST_SECONDS:
            logger.warning(f"{line} (slow)")
        elif request.path not in _QUIET_PATHS or debug_mode:
            logger.info(line)
        return response

    @app.teardown_request
    def _teardown(exc: BaseException | None) -> None:
        if exc is not None:
            logger.error(
                f"request failed: {type(exc).__name__} on {request.method} {request.path}"
            )
        clear_correlation_id()


__all__ = ["REQUEST_ID_HEADER", "configure_request_logging"]
