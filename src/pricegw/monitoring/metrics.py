"""Prometheus metrics for the gateway."""

from __future__ import annotations

from prometheus_client import CONTENT_TYPE_LATEST, CollectorRegistry, Counter, Histogram, generate_latest

registry = CollectorRegistry(auto_describe=True)

REQUEST_COUNTER = Counter(
    "gateway_requests_total",
    "Total requests handled by the prediction gateway",
    ["method", "status"],
    registry=registry,
)
ERROR_COUNTER = Counter(
    "gateway_errors_total",
    "Failed requests by error code",
    ["code"],
    registry=registry,
)
UPSTREAM_LATENCY = Histogram(
    "gateway_upstream_latency_seconds",
    "AI service call latency seconds",
    ["outcome"],
    buckets=(0.25, 0.5, 1.0, 2.0, 4.0, 8.0, 16.0, 32.0),
    registry=registry,
)


TRACKED_METHODS = ("POST", "OPTIONS")


def method_label(method: str) -> str:
    return method if method in TRACKED_METHODS else "other"


def observe_request(method: str, status: int, code: str | None = None) -> None:
    REQUEST_COUNTER.labels(method=method_label(method), status=str(status)).inc()
    if code:
        ERROR_COUNTER.labels(code=code).inc()


def observe_upstream(latency: float, outcome: str) -> None:
    UPSTREAM_LATENCY.labels(outcome=outcome).observe(latency)


def render_metrics() -> tuple[bytes, str]:
    return generate_latest(registry), CONTENT_TYPE_LATEST
