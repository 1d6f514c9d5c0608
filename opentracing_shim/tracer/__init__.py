"""Tracer components of the OpenTracing shim."""

from opentracing_shim.tracer.provider import create_tracer
from opentracing_shim.tracer.scope import Scope
from opentracing_shim.tracer.scope_manager import ScopeManager
from opentracing_shim.tracer.span import Span
from opentracing_shim.tracer.span_context import SpanContext
from opentracing_shim.tracer.tracer import Tracer

__all__ = [
    "Span",
    "SpanContext",
    "Scope",
    "ScopeManager",
    "Tracer",
    "create_tracer",
]
