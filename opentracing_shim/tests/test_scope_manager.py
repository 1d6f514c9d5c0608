"""Tests for scope activation, stack discipline and context isolation."""

import asyncio
import logging
import threading

from opentelemetry import baggage
from opentelemetry import trace as otel_trace_api

from opentracing_shim import ScopeManager


class TestActivation:
    def test_activate_none_is_noop(self, shim):
        assert shim.scope_manager.activate(None) is None
        assert shim.scope_manager.active is None

    def test_nothing_active_initially(self):
        assert ScopeManager().active is None

    def test_activate_returns_active_scope(self, shim):
        span = shim.start_span("a")
        scope = shim.scope_manager.activate(span)

        assert shim.scope_manager.active is scope
        assert scope.span is span
        assert scope.parent is None
        scope.close()
        assert shim.scope_manager.active is None

    def test_close_restores_previous_scope(self, shim):
        manager = shim.scope_manager
        scope_a = manager.activate(shim.start_span("a"))
        scope_b = manager.activate(shim.start_span("b"))
        assert scope_b.parent is scope_a

        scope_b.close()
        assert manager.active is scope_a
        assert manager.active.span is scope_a.span

        scope_a.close()
        assert manager.active is None

    def test_finish_on_close(self, shim, finished):
        manager = shim.scope_manager
        manager.activate(shim.start_span("finished")).close()
        manager.activate(shim.start_span("open"), finish_on_close=False).close()

        assert "finished" in finished()
        assert "open" not in finished()

    def test_double_close_is_noop(self, shim, exporter):
        manager = shim.scope_manager
        outer = manager.activate(shim.start_span("outer"))
        inner = manager.activate(shim.start_span("inner"))

        inner.close()
        inner.close()

        assert inner.closed
        assert manager.active is outer
        assert len(exporter.get_finished_spans()) == 1
        outer.close()

    def test_out_of_order_close_is_detected(self, shim, finished, caplog):
        manager = shim.scope_manager
        scope_a = manager.activate(shim.start_span("a"))
        scope_b = manager.activate(shim.start_span("b"))

        with caplog.at_level(logging.WARNING, logger="opentracing_shim.tracer.scope_manager"):
            scope_a.close()

        assert "out of order" in caplog.text
        assert manager.active is scope_b
        assert "a" in finished()

        scope_b.close()
        assert manager.active is None

    def test_scope_context_manager_closes(self, shim, finished):
        with shim.scope_manager.activate(shim.start_span("a")) as scope:
            assert shim.scope_manager.active is scope
        assert shim.scope_manager.active is None
        assert "a" in finished()


class TestIsolation:
    def test_threads_do_not_share_active_scope(self, shim):
        manager = shim.scope_manager
        seen = {}

        def worker():
            seen["before"] = manager.active
            scope = manager.activate(shim.start_span("worker"))
            seen["inside"] = manager.active
            seen["worker_scope"] = scope
            scope.close()
            seen["after"] = manager.active

        with manager.activate(shim.start_span("main")) as main_scope:
            thread = threading.Thread(target=worker)
            thread.start()
            thread.join()
            assert manager.active is main_scope

        assert seen["before"] is None
        assert seen["inside"] is seen["worker_scope"]
        assert seen["after"] is None

    def test_tasks_do_not_share_active_scope(self, shim):
        manager = shim.scope_manager

        async def handle(name, started, proceed):
            scope = manager.activate(shim.start_span(name))
            started.set()
            await proceed.wait()
            active = manager.active
            scope.close()
            return active, scope

        async def main():
            started_a, started_b, proceed = asyncio.Event(), asyncio.Event(), asyncio.Event()
            task_a = asyncio.create_task(handle("a", started_a, proceed))
            task_b = asyncio.create_task(handle("b", started_b, proceed))
            await started_a.wait()
            await started_b.wait()
            outside = manager.active
            proceed.set()
            return outside, await asyncio.gather(task_a, task_b)

        outside, results = asyncio.run(main())

        assert outside is None
        for active, own_scope in results:
            assert active is own_scope

    def test_managers_do_not_share_active_scope(self, shim):
        other = ScopeManager()
        with shim.scope_manager.activate(shim.start_span("a")):
            assert other.active is None


class TestOpenTelemetryInterop:
    def test_activation_sets_current_opentelemetry_span(self, shim):
        span = shim.start_span("a")
        with shim.scope_manager.activate(span):
            assert otel_trace_api.get_current_span() is span.unwrap()
        assert otel_trace_api.get_current_span() is not span.unwrap()

    def test_activation_exposes_baggage(self, shim):
        span = shim.start_span("a")
        span.set_baggage_item("tenant", "acme")
        with shim.scope_manager.activate(span):
            assert baggage.get_baggage("tenant") == "acme"
        assert baggage.get_baggage("tenant") is None

    def test_native_spans_parented_to_active_shim_span(self, shim, tracer_provider, finished):
        native_tracer = tracer_provider.get_tracer("native")
        with shim.start_active_span("outer"):
            with native_tracer.start_as_current_span("native"):
                pass

        spans = finished()
        assert spans["native"].parent.span_id == spans["outer"].context.span_id
