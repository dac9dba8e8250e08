"""Telemetry module for OpenTelemetry instrumentation."""
from taskcadence.telemetry.instrumentation import (
    TelemetryManager,
    create_generation_span_attributes,
    set_span_attributes,
)

__all__ = [
    "TelemetryManager",
    "set_span_attributes",
    "create_generation_span_attributes",
]
