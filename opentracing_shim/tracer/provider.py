"""Tracer construction from an OpenTelemetry TracerProvider."""

from __future__ import annotations

import logging
from typing import Optional

from opentelemetry import trace as otel_trace_api
from opentelemetry.propagators.textmap import TextMapPropagator

from opentracing_shim import runtime_config
from opentracing_shim.config import ShimConfig, load_config
from opentracing_shim.context.propagators import build_propagator
from opentracing_shim.tracer.tracer import Tracer
from opentracing_shim.version import __version__

logger = logging.getLogger(__name__)


def create_tracer(
    tracer_provider: Optional[otel_trace_api.TracerProvider] = None,
    propagator: Optional[TextMapPropagator] = None,
    config: Optional[ShimConfig] = None,
    config_file: Optional[str] = None,
) -> Tracer:
    """
    Create an OpenTracing Tracer that records spans through OpenTelemetry.

    Args:
        tracer_provider: OpenTelemetry TracerProvider; the global one if omitted
        propagator: propagator for inject/extract; when omitted the
            configured propagators are used, or the global propagator if none
            are configured
        config: loaded configuration; loaded from file and environment if omitted
        config_file: explicit config file path, used only when ``config`` is omitted

    Returns:
        shim Tracer, usable with ``opentracing.set_global_tracer``
    """
    if config is None:
        config = load_config(config_file=config_file)
    runtime_config.apply_config(config)

    provider = tracer_provider or otel_trace_api.get_tracer_provider()
    otel_tracer = provider.get_tracer(
        config.tracer.instrumentation_name,
        config.tracer.instrumentation_version or __version__,
    )

    if propagator is None and config.propagation.propagators:
        propagator = build_propagator(config.propagation.propagators)

    logger.debug(
        "Created OpenTracing shim tracer %r (propagators=%s)",
        config.tracer.instrumentation_name,
        config.propagation.propagators or "global",
    )
    return Tracer(otel_tracer, propagator=propagator)
