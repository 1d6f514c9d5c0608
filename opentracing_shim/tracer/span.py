"""Span implementation - OpenTracing Span wrapping an OpenTelemetry Span."""

from __future__ import annotations

import warnings
from typing import Any, Dict, Optional, TYPE_CHECKING

import opentracing
from opentracing import logs, tags
from opentelemetry import baggage
from opentelemetry.context import Context
from opentelemetry.trace import Span as OTelSpan, Status, StatusCode

from opentracing_shim.tracer.span_context import SpanContext
from opentracing_shim.utils.helpers import seconds_to_ns, to_attribute_value, to_attributes

if TYPE_CHECKING:
    from opentracing_shim.tracer.tracer import Tracer

DEFAULT_EVENT_NAME = "log"
EXCEPTION_EVENT_NAME = "exception"

# OpenTracing Python spells the error object "error.object"; other OpenTracing
# implementations use "event.object". Both are accepted.
ERROR_OBJECT_KEYS = (logs.ERROR_OBJECT, "event.object")

# OpenTracing error log fields -> OpenTelemetry exception semantic conventions
EXCEPTION_FIELD_MAP = {
    logs.ERROR_KIND: "exception.type",
    logs.MESSAGE: "exception.message",
    logs.STACK: "exception.stacktrace",
}


def error_tag_to_status(value: Any) -> Status:
    """
    Map the value of an OpenTracing ``error`` tag to an OTel Status.

    True means ERROR, False means OK, anything else UNSET.
    """
    if value is True:
        return Status(StatusCode.ERROR)
    if value is False:
        return Status(StatusCode.OK)
    return Status(StatusCode.UNSET)


class Span(opentracing.Span):
    """
    OpenTracing Span backed by an OpenTelemetry Span.

    Tags become attributes (``error`` becomes the span status), logs become
    span events, and baggage lives in an OpenTelemetry Context owned by this
    span.
    """

    def __init__(
        self,
        tracer: "Tracer",
        otel_span: OTelSpan,
        baggage_context: Optional[Context] = None,
    ) -> None:
        """
        Initialize span wrapper.

        Args:
            tracer: shim Tracer that created this span
            otel_span: OpenTelemetry Span instance
            baggage_context: OTel Context holding the baggage inherited from
                the parent(s)
        """
        self._otel_span = otel_span
        self._baggage_context = baggage_context if baggage_context is not None else Context()
        super().__init__(tracer, self._build_context())

    def _build_context(self) -> SpanContext:
        return SpanContext(
            self._otel_span.get_span_context(),
            baggage.get_all(self._baggage_context),
        )

    def unwrap(self) -> OTelSpan:
        """Return the wrapped OpenTelemetry Span."""
        return self._otel_span

    def set_operation_name(self, operation_name: str) -> "Span":
        self._otel_span.update_name(operation_name)
        return self

    def set_tag(self, key: str, value: Any) -> "Span":
        if key == tags.ERROR:
            self._otel_span.set_status(error_tag_to_status(value))
        else:
            self._otel_span.set_attribute(key, to_attribute_value(value))
        return self

    def set_baggage_item(self, key: str, value: str) -> "Span":
        self._baggage_context = baggage.set_baggage(key, value, context=self._baggage_context)
        self._context = self._build_context()
        return self

    def get_baggage_item(self, key: str) -> Optional[str]:
        value = baggage.get_baggage(key, context=self._baggage_context)
        return None if value is None else str(value)

    def log_kv(self, key_values: Dict[str, Any], timestamp: Optional[float] = None) -> "Span":
        fields = dict(key_values or {})
        timestamp_ns = seconds_to_ns(timestamp)

        error_object_key = next((k for k in ERROR_OBJECT_KEYS if fields.get(k) is not None), None)
        if fields.get(logs.EVENT) == tags.ERROR and error_object_key is not None:
            fields.pop(logs.EVENT)
            error = fields.pop(error_object_key)
            for key in ERROR_OBJECT_KEYS:
                fields.pop(key, None)
            self._record_error(error, to_attributes(fields), timestamp_ns)
            return self

        name = fields.pop(logs.EVENT, None)
        name = DEFAULT_EVENT_NAME if name is None else str(name)
        if name == tags.ERROR:
            name = EXCEPTION_EVENT_NAME
            for ot_key, otel_key in EXCEPTION_FIELD_MAP.items():
                if fields.get(ot_key) is not None:
                    fields[otel_key] = fields.pop(ot_key)

        self._otel_span.add_event(name, attributes=to_attributes(fields), timestamp=timestamp_ns)
        return self

    def _record_error(self, error: Any, attributes: Dict[str, Any], timestamp_ns: Optional[int]) -> None:
        if isinstance(error, BaseException):
            self._otel_span.record_exception(error, attributes=attributes, timestamp=timestamp_ns)
            return
        # Not an exception instance: keep the information as a plain exception event.
        event_attributes = {"exception.message": to_attribute_value(error)}
        event_attributes.update(attributes)
        self._otel_span.add_event(EXCEPTION_EVENT_NAME, attributes=event_attributes, timestamp=timestamp_ns)

    def log_event(self, event: Any, payload: Any = None) -> "Span":
        """DEPRECATED: use log_kv()."""
        warnings.warn(
            "Span.log_event is deprecated, use Span.log_kv instead",
            DeprecationWarning,
            stacklevel=2,
        )
        fields = {logs.EVENT: event}
        if payload is not None:
            fields["payload"] = payload
        return self.log_kv(fields)

    def log(self, **kwargs: Any) -> "Span":
        """DEPRECATED: use log_kv()."""
        warnings.warn(
            "Span.log is deprecated, use Span.log_kv instead",
            DeprecationWarning,
            stacklevel=2,
        )
        timestamp = kwargs.pop("timestamp", None)
        if kwargs.get(logs.EVENT) is not None:
            kwargs[logs.EVENT] = str(kwargs[logs.EVENT])
        return self.log_kv(kwargs, timestamp)

    def finish(self, finish_time: Optional[float] = None) -> None:
        self._otel_span.end(end_time=seconds_to_ns(finish_time))
