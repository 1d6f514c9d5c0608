"""Context helpers for the active scope register - using OpenTelemetry directly.

The active Scope is stored in the OpenTelemetry runtime context next to the
active OpenTelemetry span, so both live in one contextvars-backed cell per
thread and per asyncio task.
"""

from contextvars import Token
from typing import Optional, TYPE_CHECKING

from opentelemetry import baggage
from opentelemetry import context as context_api
from opentelemetry.context import Context
from opentelemetry.trace import set_span_in_context

if TYPE_CHECKING:
    from opentracing_shim.tracer.scope import Scope


def create_scope_key() -> str:
    """Create a private context key for one scope manager."""
    return context_api.create_key("opentracing-shim-scope")


def get_active_scope(key: str, context: Optional[Context] = None) -> Optional["Scope"]:
    """Return the Scope stored under ``key`` in ``context`` (default: the current context)."""
    return context_api.get_value(key, context=context)


def push_scope(key: str, scope: "Scope") -> Token:
    """
    Make a scope and its span current.

    The span's baggage is copied into the new current context so that code
    using the OpenTelemetry API directly sees it too.

    Returns:
        Token needed to restore the previous state
    """
    ctx = set_span_in_context(scope.span.unwrap())
    for name, value in scope.span.context.baggage.items():
        ctx = baggage.set_baggage(name, value, context=ctx)
    ctx = context_api.set_value(key, scope, context=ctx)
    return context_api.attach(ctx)


def pop_scope(token: Token) -> None:
    """
    Restore the context that was current before ``push_scope``.

    Args:
        token: Token returned by push_scope()
    """
    context_api.detach(token)
