# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest

from kharji.shared.config import load_config

_config = load_config()

REQUEST_LATENCY = Histogram(
    "kharji_request_latency_seconds",
    "Request latency",
    buckets=(0.05, 0.1, 0.25, 0.5, 1, 2, 5, 10),
)
REQUEST_COUNTER = Counter(
    "kharji_requests_total",
    "Number of processed requests",
    labelnames=("endpoint", "status"),
)
EXCHANGE_RATE_LOOKUPS = Counter(
    "kharji_exchange_rate_lookups_total",
    "Exchange rate lookups by outcome",
    labelnames=("outcome",),
)


def metrics_enabled() -> bool:
    return _config.observability.metrics_enabled


def record_request(endpoint: str, status: int, duration: float) -> None:
    if not metrics_enabled():
        return
    REQUEST_LATENCY.observe(duration)
    REQUEST_COUNTER.labels(endpoint=endpoint, status=str(status)).inc()


def record_rate_lookup(outcome: str) -> None:
    if metrics_enabled():
        EXCHANGE_RATE_LOOKUPS.labels(outcome=outcome).inc()


def render_latest() -> tuple[bytes, str]:
    return generate_latest(), CONTENT_TYPE_LATEST


__all__ = [
    "EXCHANGE_RATE_LOOKUPS",
    "REQUEST_COUNTER",
    "REQUEST_LATENCY",
    "metrics_enabled",
    "record_rate_lookup",
    "record_request",
    "render_latest",
]
