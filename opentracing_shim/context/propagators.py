"""Carrier format dispatch using OpenTelemetry's standard propagators."""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional, TYPE_CHECKING

from opentracing import Format
from opentelemetry import baggage
from opentelemetry.baggage.propagation import W3CBaggagePropagator
from opentelemetry.propagate import get_global_textmap
from opentelemetry.propagators.composite import CompositePropagator
from opentelemetry.propagators.textmap import (
    CarrierT,
    DefaultGetter,
    Getter,
    TextMapPropagator,
)
from opentelemetry.trace import get_current_span
from opentelemetry.trace.propagation.tracecontext import TraceContextTextMapPropagator

if TYPE_CHECKING:
    from opentracing_shim.tracer.span_context import SpanContext

# Formats handed to the propagator. Format.BINARY has no text carrier mapping
# and is treated as unsupported.
SUPPORTED_FORMATS = (Format.TEXT_MAP, Format.HTTP_HEADERS)

_PROPAGATORS = {
    "tracecontext": TraceContextTextMapPropagator,
    "baggage": W3CBaggagePropagator,
}


def _header_value(value: Any) -> str:
    # Raw header bytes are ISO-8859-1 per RFC 7230.
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("latin-1")
    return str(value)


def _header_values(value: Any) -> List[str]:
    if isinstance(value, (str, bytes, bytearray)):
        return [_header_value(value)]
    if isinstance(value, Iterable):
        return [_header_value(item) for item in value]
    return [_header_value(value)]


class HeaderGetter(Getter[Dict[Any, Any]]):
    """
    Getter for HTTP header carriers.

    Header names are case-insensitive, and names or values given as bytes
    are decoded.
    """

    def get(self, carrier: Dict[Any, Any], key: str) -> Optional[List[str]]:
        wanted = key.lower()
        for name, value in carrier.items():
            if _header_value(name).lower() != wanted:
                continue
            return _header_values(value)
        return None

    def keys(self, carrier: Dict[Any, Any]) -> List[str]:
        return [_header_value(name) for name in carrier]


_default_getter = DefaultGetter()
_header_getter = HeaderGetter()


def is_supported_format(format: str) -> bool:
    return format in SUPPORTED_FORMATS


def build_propagator(names: Optional[Iterable[str]] = None) -> TextMapPropagator:
    """
    Build a propagator from names such as ``"tracecontext"`` and ``"baggage"``.

    With no names, the globally configured OpenTelemetry propagator is used.
    """
    names = list(names or [])
    if not names:
        return get_global_textmap()
    return CompositePropagator([_PROPAGATORS[name]() for name in names])


def inject_span_context(
    propagator: TextMapPropagator,
    span_context: "SpanContext",
    carrier: CarrierT,
) -> None:
    """Serialize a shim SpanContext and its baggage into ``carrier``."""
    propagator.inject(carrier, context=span_context.to_context())


def extract_span_context(
    propagator: TextMapPropagator,
    format: str,
    carrier: CarrierT,
) -> Optional["SpanContext"]:
    """
    Rebuild a shim SpanContext from ``carrier``.

    Returns None when the carrier holds no valid span context.
    """
    from opentracing_shim.tracer.span_context import SpanContext

    getter = _header_getter if format == Format.HTTP_HEADERS else _default_getter
    ctx = propagator.extract(carrier, getter=getter)
    otel_context = get_current_span(ctx).get_span_context()
    if not otel_context.is_valid:
        return None
    return SpanContext(otel_context, baggage.get_all(ctx))
