"""Retry policy for ``try_async``.

Design goals:
- Explicit state (policy + zero-based attempt index)
- Validation at construction, not at the first retry
- Deterministic delays: no jitter, no elapsed-time budget
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import TYPE_CHECKING, Any, Literal

from fallible.errors import ConfigurationError

if TYPE_CHECKING:
    from collections.abc import Mapping

Backoff = Literal["linear", "exponential"]

_BACKOFFS: frozenset[str] = frozenset({"linear", "exponential"})


@dataclass(frozen=True)
class RetryPolicy:
    """Bounded retry policy.

    ``times`` counts retries, so an operation runs at most ``times + 1``
    times. Linear backoff waits ``delay_ms`` between every attempt;
    exponential backoff waits ``delay_ms * 2**attempt_index``.
    """

    times: int = 0
    delay_ms: int = 0
    backoff: Backoff = "linear"

    def __post_init__(self) -> None:
        """Validate invariants to keep retry behavior predictable."""
        if isinstance(self.times, bool) or not isinstance(self.times, int):
            raise ConfigurationError(
                f"RetryPolicy.times must be an int, got {type(self.times).__name__}"
            )
        if self.times < 0:
            raise ConfigurationError(
                f"RetryPolicy.times must be >= 0, got {self.times}",
                hint="Use times=0 to run the operation once without retrying.",
            )
        if isinstance(self.delay_ms, bool) or not isinstance(self.delay_ms, int):
            raise ConfigurationError(
                f"RetryPolicy.delay_ms must be an int, got {type(self.delay_ms).__name__}"
            )
        if self.delay_ms < 0:
            raise ConfigurationError(
                f"RetryPolicy.delay_ms must be >= 0, got {self.delay_ms}"
            )
        if self.backoff not in _BACKOFFS:
            raise ConfigurationError(
                f"Unknown backoff: {self.backoff!r}",
                hint="Supported backoff strategies: 'linear', 'exponential'",
            )

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> RetryPolicy:
        """Build a policy from a plain mapping such as ``{"times": 2}``."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigurationError(
                f"Unknown retry option(s): {', '.join(unknown)}",
                hint=f"Supported options: {', '.join(sorted(known))}",
            )
        return cls(**data)

    @property
    def max_attempts(self) -> int:
        return self.times + 1

    def delay_s(self, attempt_index: int) -> float:
        """Return the wait after the failed attempt ``attempt_index`` (0-based)."""
        if self.backoff == "exponential":
            return self.delay_ms * (2**attempt_index) / 1000
        return self.delay_ms / 1000


__all__ = ["Backoff", "RetryPolicy"]
