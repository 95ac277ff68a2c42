# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from prometheus_client import Counter, Histogram

from vidshare.shared.config import load_config

REQUEST_LATENCY = Histogram(
    "vidshare_request_latency_seconds",
    "Request latency",
    labelnames=("endpoint",),
    buckets=(0.05, 0.1, 0.25, 0.5, 1, 2, 5, 10),
)
REQUEST_COUNTER = Counter(
    "vidshare_requests_total",
    "Number of processed requests",
    labelnames=("endpoint", "status"),
)
AUTH_EVENTS = Counter(
    "vidshare_auth_events_total",
    "Authentication events by action and outcome",
    labelnames=("action", "outcome"),
)


def _enabled() -> bool:
    return load_config().observability.metrics_enabled


def observe_request(endpoint: str, status_code: int, duration: float) -> None:
    if not _enabled():
        return
    REQUEST_LATENCY.labels(endpoint=endpoint).observe(duration)
    REQUEST_COUNTER.labels(endpoint=endpoint, status=str(status_code)).inc()


def record_auth_event(action: str, success: bool) -> None:
    if not _enabled():
        return
    AUTH_EVENTS.labels(action=action, outcome="success" if success else "failure").inc()


__all__ = [
    "AUTH_EVENTS",
    "REQUEST_COUNTER",
    "REQUEST_LATENCY",
    "observe_request",
    "record_auth_event",
]
