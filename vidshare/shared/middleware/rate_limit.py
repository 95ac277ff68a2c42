# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

import math
import threading
import time
from collections import deque
from collections.abc import Callable
from functools import wraps

from flask import Request, request

from vidshare.shared.config import load_config
from vidshare.shared.errors import RateLimitedError
from vidshare.shared.logging import logger


class SlidingWindowLimiter:
    """Per-key sliding window of hit timestamps."""

    def __init__(
        self,
        limit: int,
        window_seconds: float,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.limit = max(1, int(limit))
        self.window = max(0.1, float(window_seconds))
        self._clock = clock
        self._hits: dict[str, deque[float]] = {}
        self._lock = threading.Lock()
        self._next_sweep = 0.0

    def hit(self, key: str) -> float:
        """Record a hit; returns 0 when allowed, else seconds until a slot frees."""
        now = self._clock()
        cutoff = now - self.window
        with self._lock:
            if now >= self._next_sweep:
                self._sweep(cutoff)
                self._next_sweep = now + self.window
            hits = self._hits.setdefault(key, deque())
            while hits and hits[0] <= cutoff:
                hits.popleft()
            if len(hits) >= self.limit:
                return max(hits[0] + self.window - now, 0.001)
            hits.append(now)
            return 0.0

    def reset(self) -> None:
        with self._lock:
            self._hits.clear()

    @property
    def tracked_keys(self) -> int:
        return len(self._hits)

    def _sweep(self, cutoff: float) -> None:
        stale = [key for key, hits in self._hits.items() if not hits or hits[-1] <= cutoff]
        for key in stale:
            del self._hits[key]


def client_address(req: Request) -> str:
    """Peer address as seen by WSGI.

    Forwarded headers are honoured only through ``ProxyFix``, which
    ``create_app`` installs when ``TRUSTED_PROXY_COUNT`` is set.
    """
    return req.remote_addr or "unknown"


def rate_limit(limit: int | None = None, window_seconds: float | None = None):
    """Throttle a view per client address and path.

    The switch is read on every call so tests and operators can toggle it
    without rebuilding the app.
    """

    security = load_config().security
    limiter = SlidingWindowLimiter(
        limit or security.rate_limit_requests,
        window_seconds or security.rate_limit_window,
    )

    def decorator(view: Callable):
        @wraps(view)
        def wrapper(*args, **kwargs):
            if load_config().security.enable_rate_limit:
                address = client_address(request)
                wait = limiter.hit(f"{request.endpoint or request.path}|{address}")
                if wait:
                    retry_after = math.ceil(wait)
                    logger.warning(
                        f"rate_limit: {request.method} {request.path} throttled, "
                        f"retry in {retry_after}s"
                    )
                    raise RateLimitedError(
                        f"Too many requests, retry in {retry_after} seconds"
                    )
            return view(*args, **kwargs)

        wrapper.limiter = limiter  # type: ignore[attr-defined]
        return wrapper

    return decorator


__all__ = ["SlidingWindowLimiter", "client_address", "rate_limit"]
