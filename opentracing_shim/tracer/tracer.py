"""OpenTracing Tracer backed by an OpenTelemetry Tracer."""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union

import opentracing
from opentracing import Reference, ReferenceType, tags as ot_tags
from opentelemetry import baggage
from opentelemetry.context import Context
from opentelemetry.propagate import get_global_textmap
from opentelemetry.propagators.textmap import TextMapPropagator
from opentelemetry.trace import Link
from opentelemetry.trace import Tracer as OTelTracer

from opentracing_shim import runtime_config
from opentracing_shim.context.propagators import (
    extract_span_context,
    inject_span_context,
    is_supported_format,
)
from opentracing_shim.tracer.scope import Scope
from opentracing_shim.tracer.scope_manager import ScopeManager
from opentracing_shim.tracer.span import Span
from opentracing_shim.tracer.span_context import SpanContext
from opentracing_shim.utils.helpers import seconds_to_ns, to_attributes

logger = logging.getLogger(__name__)

REF_TYPE_ATTRIBUTE = "opentracing.ref_type"

ParentType = Union[opentracing.Span, opentracing.SpanContext, None]


def _as_span_context(parent: ParentType) -> Optional[SpanContext]:
    if isinstance(parent, opentracing.Span):
        parent = parent.context
    if parent is None or isinstance(parent, SpanContext):
        return parent
    logger.debug("Ignoring parent %r: not created by this shim", parent)
    return None


class Tracer(opentracing.Tracer):
    """
    OpenTracing Tracer that creates OpenTelemetry spans.

    Args:
        otel_tracer: OpenTelemetry tracer used to create spans
        propagator: propagator for inject/extract; defaults to the global
            OpenTelemetry propagator, looked up on every call
        scope_manager: defaults to a new ScopeManager
    """

    def __init__(
        self,
        otel_tracer: OTelTracer,
        propagator: Optional[TextMapPropagator] = None,
        scope_manager: Optional[ScopeManager] = None,
    ) -> None:
        super().__init__(scope_manager if scope_manager is not None else ScopeManager())
        self._otel_tracer = otel_tracer
        self._propagator = propagator

    @property
    def propagator(self) -> TextMapPropagator:
        if self._propagator is not None:
            return self._propagator
        return get_global_textmap()

    def unwrap(self) -> OTelTracer:
        """Return the wrapped OpenTelemetry Tracer."""
        return self._otel_tracer

    def start_active_span(
        self,
        operation_name: str,
        child_of: ParentType = None,
        references: Optional[List[Reference]] = None,
        tags: Optional[Dict[str, Any]] = None,
        start_time: Optional[float] = None,
        ignore_active_span: bool = False,
        finish_on_close: bool = True,
    ) -> Scope:
        """
        Start a span and make it active.

        Use the returned Scope as a context manager to close it (and, with
        ``finish_on_close``, finish the span) when the block exits.
        """
        span = self.start_span(
            operation_name=operation_name,
            child_of=child_of,
            references=references,
            tags=tags,
            start_time=start_time,
            ignore_active_span=ignore_active_span,
        )
        return self.scope_manager.activate(span, finish_on_close)

    def start_span(
        self,
        operation_name: Optional[str] = None,
        child_of: ParentType = None,
        references: Optional[List[Reference]] = None,
        tags: Optional[Dict[str, Any]] = None,
        start_time: Optional[float] = None,
        ignore_active_span: bool = False,
    ) -> Span:
        """
        Start a span without activating it.

        Parent resolution, first match wins:

        1. ``child_of``
        2. the first CHILD_OF entry of ``references``
        3. the active span, unless ``references`` were given or
           ``ignore_active_span`` is set
        4. the current OpenTelemetry context when no scope is active,
           under the same conditions
        5. no parent

        References that do not become the parent are added as links.
        Baggage is merged from ``child_of`` and then from each reference in
        order, later values replacing earlier ones.
        """
        references = list(references or [])
        explicit_parent = _as_span_context(child_of)
        parent, links, reference_baggage = self._resolve_references(explicit_parent, references)

        baggage_sources: List[Mapping[str, str]] = []
        if explicit_parent is not None:
            baggage_sources.append(explicit_parent.baggage)
        baggage_sources.extend(reference_baggage)

        otel_parent: Optional[Context] = None
        if parent is None and child_of is None and not references and not ignore_active_span:
            active = self.active_span
            if active is not None:
                parent = active.context
                baggage_sources.append(parent.baggage)
            else:
                # No shim scope: follow whatever is current in OpenTelemetry.
                baggage_sources.append(baggage.get_all())

        if parent is not None:
            otel_parent = parent.to_context()
        elif child_of is not None or references or ignore_active_span:
            otel_parent = Context()

        attributes, error_tag = self._split_tags(tags)
        otel_span = self._otel_tracer.start_span(
            name=operation_name or "",
            context=otel_parent,
            attributes=attributes,
            links=links,
            start_time=seconds_to_ns(start_time),
        )

        span = Span(self, otel_span, self._merge_baggage(baggage_sources))
        if error_tag is not None:
            span.set_tag(ot_tags.ERROR, error_tag)
        return span

    @staticmethod
    def _resolve_references(
        parent: Optional[SpanContext],
        references: Iterable[Reference],
    ) -> Tuple[Optional[SpanContext], List[Link], List[Dict[str, str]]]:
        links: List[Link] = []
        baggage_sources: List[Dict[str, str]] = []
        for reference in references:
            context = _as_span_context(reference.referenced_context)
            if context is None:
                continue
            baggage_sources.append(dict(context.baggage))
            if parent is None and reference.type == ReferenceType.CHILD_OF:
                parent = context
                continue
            links.append(Link(context.unwrap(), attributes={REF_TYPE_ATTRIBUTE: reference.type}))
        return parent, links, baggage_sources

    @staticmethod
    def _split_tags(tags: Optional[Dict[str, Any]]) -> Tuple[Dict[str, Any], Any]:
        tags = dict(tags or {})
        error_tag = tags.pop(ot_tags.ERROR, None)
        return to_attributes(tags), error_tag

    @staticmethod
    def _merge_baggage(sources: Iterable[Mapping[str, str]]) -> Context:
        ctx = Context()
        for source in sources:
            for key, value in source.items():
                ctx = baggage.set_baggage(key, value, context=ctx)
        return ctx

    def inject(self, span_context: SpanContext, format: str, carrier: Any) -> None:
        """
        Inject ``span_context`` into ``carrier``.

        TEXT_MAP and HTTP_HEADERS are supported. Other formats, BINARY
        included, leave the carrier untouched.
        """
        if not is_supported_format(format):
            self._unsupported_format("inject", format)
            return
        inject_span_context(self.propagator, span_context, carrier)

    def extract(self, format: str, carrier: Any) -> Optional[SpanContext]:
        """
        Extract a SpanContext from ``carrier``.

        Returns None for unsupported formats and when the carrier holds no
        valid span context.
        """
        if not is_supported_format(format):
            self._unsupported_format("extract", format)
            return None
        return extract_span_context(self.propagator, format, carrier)

    @staticmethod
    def _unsupported_format(operation: str, format: str) -> None:
        log = logger.warning if runtime_config.get_warn_unsupported_format() else logger.debug
        log("Unsupported %s format %r, skipping", operation, format)
