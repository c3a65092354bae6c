"""Exception hierarchy for fallible.

Domain failures never appear here: they travel as ``Failure``/``Absent``
values. These exceptions cover misuse of the containers and invalid
configuration only.
"""

from __future__ import annotations

from typing import Any


class FallibleError(Exception):
    """Base exception for all fallible errors."""

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint = hint


class UnwrapError(FallibleError):
    """An extraction was attempted against the wrong variant.

    Raised by ``unwrap``/``expect``/``expect_err``. The offending payload
    (the error of a ``Failure``, the value of a ``Success``, or ``None``
    for ``Absent``) is kept on ``payload`` for debugging.
    """

    def __init__(
        self,
        message: str,
        *,
        payload: Any = None,
        hint: str | None = None,
    ) -> None:
        super().__init__(message, hint=hint)
        self.payload = payload


class ConfigurationError(FallibleError, ValueError):
    """Configuration validation or resolution failed."""


def describe(payload: Any) -> str:
    """Return a human-readable rendering of an arbitrary payload."""
    try:
        return repr(payload)
    except Exception:  # a broken __repr__ must not mask the unwrap failure
        return f"<{type(payload).__name__} object>"


__all__ = ["ConfigurationError", "FallibleError", "UnwrapError", "describe"]
