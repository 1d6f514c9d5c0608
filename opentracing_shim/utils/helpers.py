"""Helper functions for converting between OpenTracing and OpenTelemetry values."""

from __future__ import annotations

import math
import traceback
from types import TracebackType
from typing import Any, Dict, Mapping, Optional

from opentracing_shim import runtime_config


def format_trace_id(trace_id: int) -> str:
    """
    Format OTel trace_id (int128) to hex string.

    Args:
        trace_id: OTel trace_id as int

    Returns:
        32-character hex string
    """
    return format(trace_id, '032x')


def format_span_id(span_id: int) -> str:
    """
    Format OTel span_id (int64) to hex string.

    Args:
        span_id: OTel span_id as int

    Returns:
        16-character hex string
    """
    return format(span_id, '016x')


def seconds_to_ns(timestamp: Optional[float]) -> Optional[int]:
    """
    Convert an OpenTracing timestamp to an OpenTelemetry timestamp.

    OpenTracing expresses time as float seconds since the epoch, OpenTelemetry
    as integer nanoseconds since the epoch. ``None`` means "now" in both APIs
    and is passed through.

    Whole seconds and the fraction are converted separately: a float
    multiplied by 1e9 cannot hold current epoch times to the nanosecond.
    """
    if timestamp is None:
        return None
    seconds = math.floor(timestamp)
    return int(seconds) * 1_000_000_000 + round((timestamp - seconds) * 1e9)


def _truncate(text: str) -> str:
    limit = runtime_config.get_attr_truncation_limit()
    if limit is not None and len(text) > limit:
        return text[:limit]
    return text


def to_attribute_value(value: Any) -> Any:
    """
    Convert a tag or log field value to an OTel attribute value.

    bool, int, float and str are kept unchanged. Exception classes become
    their qualified name, tracebacks their formatted text, and anything else
    its ``str()`` form.
    """
    if isinstance(value, (bool, int, float, str)):
        return value
    if isinstance(value, type):
        return f"{value.__module__}.{value.__qualname__}"
    if isinstance(value, TracebackType):
        return _truncate("".join(traceback.format_tb(value)))
    return _truncate(str(value))


def to_attributes(fields: Optional[Mapping[Any, Any]]) -> Dict[str, Any]:
    """Convert a tag or log field mapping to OTel attributes."""
    if not fields:
        return {}
    return {str(key): to_attribute_value(value) for key, value in fields.items()}
