"""Utility functions for the OpenTracing shim."""

from opentracing_shim.utils.helpers import (
    format_span_id,
    format_trace_id,
    seconds_to_ns,
    to_attribute_value,
    to_attributes,
)

__all__ = [
    "format_trace_id",
    "format_span_id",
    "seconds_to_ns",
    "to_attribute_value",
    "to_attributes",
]
