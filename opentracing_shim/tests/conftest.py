"""Shared fixtures: a private OpenTelemetry SDK provider with in-memory export."""

import pytest
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import SimpleSpanProcessor
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter

from opentracing_shim import Tracer, runtime_config
from opentracing_shim.context.propagators import build_propagator


@pytest.fixture
def exporter():
    return InMemorySpanExporter()


@pytest.fixture
def tracer_provider(exporter):
    provider = TracerProvider()
    provider.add_span_processor(SimpleSpanProcessor(exporter))
    yield provider
    provider.shutdown()


@pytest.fixture
def shim(tracer_provider):
    """Shim tracer with W3C trace context and baggage propagation."""
    return Tracer(
        tracer_provider.get_tracer("opentracing_shim.tests"),
        propagator=build_propagator(["tracecontext", "baggage"]),
    )


@pytest.fixture
def finished(exporter):
    """Return finished spans keyed by name."""
    def _finished():
        return {span.name: span for span in exporter.get_finished_spans()}
    return _finished


@pytest.fixture(autouse=True)
def _reset_runtime_config():
    yield
    runtime_config.reset()
