"""Exceptions raised by the OpenTracing shim.

Tracing calls never raise: unsupported formats, foreign span contexts and
misordered scopes are logged instead. Only explicit setup, such as loading
the configuration, raises.
"""

from __future__ import annotations

from typing import Iterable, Optional


class ShimError(Exception):
    """Base exception for all OpenTracing shim errors."""


class ConfigError(ShimError):
    """
    The shim configuration could not be loaded or is invalid.

    Attributes:
        message: short description
        source: where the settings came from, a file path or ``"environment"``;
            None when the merged settings failed validation
        problems: one line per rejected setting, ``"section.key: reason"``
    """

    def __init__(
        self,
        message: str,
        source: Optional[str] = None,
        problems: Optional[Iterable[str]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.source = source
        self.problems = list(problems or [])

    def __str__(self) -> str:
        text = self.message
        if self.source is not None:
            text = f"{text} ({self.source})"
        if self.problems:
            text = f"{text}: " + "; ".join(self.problems)
        return text
