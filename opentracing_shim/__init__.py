"""OpenTracing API shim running on top of OpenTelemetry.

Code instrumented with ``opentracing`` keeps working unchanged; spans are
created, parented and propagated by OpenTelemetry::

    import opentracing
    from opentracing_shim import create_tracer

    opentracing.set_global_tracer(create_tracer())

    with opentracing.global_tracer().start_active_span("handle-request") as scope:
        scope.span.set_tag("http.method", "GET")
"""

from opentracing_shim.errors import ConfigError, ShimError
from opentracing_shim.tracer import (
    Scope,
    ScopeManager,
    Span,
    SpanContext,
    Tracer,
    create_tracer,
)
from opentracing_shim.version import __version__

__all__ = [
    "__version__",
    "create_tracer",
    "Tracer",
    "Span",
    "SpanContext",
    "Scope",
    "ScopeManager",
    "ShimError",
    "ConfigError",
]
