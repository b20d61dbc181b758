"""Telemetry helpers and metrics."""

from .metrics import (
    ANALYSIS_LATENCY,
    ANALYSIS_OUTCOMES,
    ERROR_COUNTER,
    REQUEST_COUNT,
    REQUEST_LATENCY,
    observe_request,
    record_analysis,
)

__all__ = [
    "ANALYSIS_LATENCY",
    "ANALYSIS_OUTCOMES",
    "ERROR_COUNTER",
    "REQUEST_COUNT",
    "REQUEST_LATENCY",
    "observe_request",
    "record_analysis",
]
