"""Context utilities for the OpenTracing shim."""

from opentracing_shim.context.context import (
    create_scope_key,
    get_active_scope,
    pop_scope,
    push_scope,
)
from opentracing_shim.context.propagators import (
    SUPPORTED_FORMATS,
    HeaderGetter,
    build_propagator,
    extract_span_context,
    inject_span_context,
    is_supported_format,
)

__all__ = [
    "create_scope_key",
    "get_active_scope",
    "push_scope",
    "pop_scope",
    "SUPPORTED_FORMATS",
    "HeaderGetter",
    "build_propagator",
    "inject_span_context",
    "extract_span_context",
    "is_supported_format",
]
