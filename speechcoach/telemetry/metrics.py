"""Prometheus metrics definitions and helpers."""

from __future__ import annotations

from prometheus_client import Counter, Histogram

REQUEST_COUNT = Counter(
    "http_requests_total",
    "Total HTTP requests processed",
    ("method", "route", "status"),
)

REQUEST_LATENCY = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ("method", "route"),
    buckets=(0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0),
)

ERROR_COUNTER = Counter(
    "app_internal_errors_total",
    "Number of requests ending in internal server error responses",
    ("method", "route"),
)

ANALYSIS_RUNS = Counter(
    "speech_analysis_runs_total",
    "Speech analysis runs by final outcome",
    ("outcome",),
)

ANALYSIS_FAILURES = Counter(
    "speech_analysis_failures_total",
    "Failed speech analysis runs by failing stage and error kind",
    ("stage", "kind"),
)

STAGE_LATENCY = Histogram(
    "speech_analysis_stage_seconds",
    "Time spent in each speech analysis stage",
    ("stage",),
    buckets=(0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0, 120.0),
)


def observe_request(method: str, route: str, status_code: int, duration_seconds: float) -> None:
    """Count one finished HTTP request and its latency; 5xx also counts as an error."""

    labels = {"method": method or "UNKNOWN", "route": route or "unknown"}
    REQUEST_COUNT.labels(status=str(status_code), **labels).inc()
    REQUEST_LATENCY.labels(**labels).observe(max(duration_seconds, 0))
    if status_code >= 500:
        ERROR_COUNTER.labels(**labels).inc()


def observe_stage(stage: str, duration_seconds: float) -> None:
    STAGE_LATENCY.labels(stage=stage).observe(max(duration_seconds, 0))


def record_analysis_outcome(outcome: str) -> None:
    ANALYSIS_RUNS.labels(outcome=outcome).inc()


def record_analysis_failure(stage: str | None, kind: str) -> None:
    ANALYSIS_FAILURES.labels(stage=stage or "unknown", kind=kind).inc()
