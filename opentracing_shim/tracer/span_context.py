"""Immutable trace metadata."""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping, Optional

import opentracing
from opentelemetry import baggage as baggage_api
from opentelemetry.context import Context
from opentelemetry.trace import NonRecordingSpan, set_span_in_context
from opentelemetry.trace import SpanContext as OTelSpanContext

from opentracing_shim.utils.helpers import format_span_id, format_trace_id


class SpanContext(opentracing.SpanContext):
    """
    OpenTracing SpanContext over an OpenTelemetry SpanContext.

    The baggage is a snapshot taken at construction. A Span builds a new
    SpanContext whenever its baggage changes; instances are never updated.
    """

    def __init__(
        self,
        otel_context: OTelSpanContext,
        baggage: Optional[Mapping[str, object]] = None,
    ) -> None:
        self._otel_context = otel_context
        self._baggage = MappingProxyType(
            {str(k): str(v) for k, v in (baggage or {}).items()}
        )

    @property
    def trace_id(self) -> int:
        return self._otel_context.trace_id

    @property
    def span_id(self) -> int:
        return self._otel_context.span_id

    @property
    def baggage(self) -> Mapping[str, str]:
        return self._baggage

    def unwrap(self) -> OTelSpanContext:
        """Return the wrapped OpenTelemetry SpanContext."""
        return self._otel_context

    def to_context(self, base: Optional[Context] = None) -> Context:
        """
        Build an OpenTelemetry Context carrying this span context and baggage.

        The span is non-recording; the Context is used as a parent for new
        spans and as the source for propagator injection.
        """
        ctx = set_span_in_context(NonRecordingSpan(self._otel_context), context=base or Context())
        for key, value in self._baggage.items():
            ctx = baggage_api.set_baggage(key, value, context=ctx)
        return ctx

    def __repr__(self) -> str:
        return (
            f"SpanContext(trace_id={format_trace_id(self.trace_id)}, "
            f"span_id={format_span_id(self.span_id)}, baggage={dict(self._baggage)})"
        )
