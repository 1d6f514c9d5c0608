"""ScopeManager keeping the active Scope in the OpenTelemetry context."""

from __future__ import annotations

import logging
from typing import Optional, TYPE_CHECKING

import opentracing

from opentracing_shim.context.context import (
    create_scope_key,
    get_active_scope,
    pop_scope,
    push_scope,
)
from opentracing_shim.tracer.scope import Scope

if TYPE_CHECKING:
    from opentracing_shim.tracer.span import Span

logger = logging.getLogger(__name__)


class ScopeManager(opentracing.ScopeManager):
    """
    Register of the active Scope for the calling thread or asyncio task.

    Activation attaches a new OpenTelemetry context that carries both the
    Scope and its OpenTelemetry span, so spans created directly through the
    OpenTelemetry API are parented to the active shim span as well.
    """

    def __init__(self) -> None:
        super().__init__()
        self._scope_key = create_scope_key()

    def activate(self, span: Optional["Span"], finish_on_close: bool = True) -> Optional[Scope]:
        """
        Make ``span`` active.

        Returns:
            the new Scope, or None when ``span`` is None. The caller must
            close the Scope.
        """
        if span is None:
            return None

        scope = Scope(self, span, finish_on_close)
        scope._token = push_scope(self._scope_key, scope)
        return scope

    @property
    def active(self) -> Optional[Scope]:
        """The active Scope, or None."""
        return get_active_scope(self._scope_key)

    def _deactivate(self, scope: Scope) -> None:
        if self.active is not scope:
            logger.warning(
                "Scope for span %r closed out of order, active scope left unchanged",
                scope.span,
            )
            return
        pop_scope(scope._token)

        # Scopes closed out of order are unwound once they surface again.
        active = self.active
        while active is not None and active.closed:
            pop_scope(active._token)
            active = self.active
