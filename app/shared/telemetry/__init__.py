"""Shared telemetry: logging setup, OpenTelemetry config and span helpers."""

from app.shared.telemetry.logging import RequestContextFilter, get_logger, setup_logging
from app.shared.telemetry.telemetry import (
    TelemetryConfig,
    get_telemetry,
    get_tracer,
    set_telemetry,
    setup_telemetry,
)
from app.shared.telemetry.tracing import TracedOperation, add_span_attributes, get_trace_id

__all__ = [
    "RequestContextFilter",
    "setup_logging",
    "get_logger",
    "TelemetryConfig",
    "get_telemetry",
    "set_telemetry",
    "setup_telemetry",
    "get_tracer",
    "TracedOperation",
    "add_span_attributes",
    "get_trace_id",
]
