"""Telemetry helpers and metrics."""

from .metrics import (
    ANALYSIS_FAILURES,
    ANALYSIS_RUNS,
    ERROR_COUNTER,
    REQUEST_COUNT,
    REQUEST_LATENCY,
    STAGE_LATENCY,
    observe_request,
    observe_stage,
    record_analysis_failure,
    record_analysis_outcome,
)

__all__ = [
    "ANALYSIS_FAILURES",
    "ANALYSIS_RUNS",
    "ERROR_COUNTER",
    "REQUEST_COUNT",
    "REQUEST_LATENCY",
    "STAGE_LATENCY",
    "observe_request",
    "observe_stage",
    "record_analysis_failure",
    "record_analysis_outcome",
]
