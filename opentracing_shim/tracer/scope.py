"""Scope implementation - one activation period of a Span."""

from __future__ import annotations

import logging
from contextvars import Token
from typing import Optional, TYPE_CHECKING

import opentracing

if TYPE_CHECKING:
    from opentracing_shim.tracer.scope_manager import ScopeManager
    from opentracing_shim.tracer.span import Span

logger = logging.getLogger(__name__)


class Scope(opentracing.Scope):
    """
    A Scope formalizes the activation and deactivation of a Span.

    The Scope active when this one is created becomes its ``parent`` and is
    active again once this one is closed. Scopes must be closed in reverse
    order of activation.
    """

    def __init__(self, manager: "ScopeManager", span: "Span", finish_on_close: bool = True) -> None:
        super().__init__(manager, span)
        self._finish_on_close = finish_on_close
        self._parent: Optional[Scope] = manager.active
        self._token: Optional[Token] = None
        self._closed = False

    @property
    def parent(self) -> Optional["Scope"]:
        """The Scope that was active when this one was activated."""
        return self._parent

    @property
    def finish_on_close(self) -> bool:
        return self._finish_on_close

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        """
        End the active period of this Scope.

        Finishes the span when ``finish_on_close`` is set and makes the parent
        Scope active again. Closing twice is a no-op.
        """
        if self._closed:
            logger.debug("Scope for span %r already closed", self._span)
            return
        self._closed = True

        if self._finish_on_close:
            self._span.finish()
        self._manager._deactivate(self)
