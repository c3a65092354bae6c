"""Binary outcome container: ``Success`` or ``Failure``.

An outcome is a closed union of two frozen dataclasses. Every combinator
returns a new outcome (or the receiver itself on passthrough); nothing is
ever mutated. Extraction against the wrong variant is the only place that
raises, always with ``UnwrapError``.

Outcomes double as single steps for the propagation engine: iterating a
``Success`` completes immediately with its value, iterating a ``Failure``
suspends once and hands the failure itself to the engine. Inside a
``@gen`` procedure this reads as ``value = yield from parse(text)``.
"""

from __future__ import annotations

import dataclasses
from typing import TYPE_CHECKING, Any, Never, TypeIs, TypeVar

from fallible.errors import UnwrapError, describe

if TYPE_CHECKING:
    from collections.abc import Callable, Generator

    from fallible.optional import Option

_T = TypeVar("_T")
_E = TypeVar("_E")


@dataclasses.dataclass(frozen=True, slots=True)
class Success[T]:
    """A successful outcome carrying ``value``."""

    value: T

    def is_success(self) -> bool:
        return True

    def is_failure(self) -> bool:
        return False

    def unwrap(self) -> T:
        return self.value

    def unwrap_or(self, default: object) -> T:
        return self.value

    def unwrap_or_else(self, func: Callable[[Any], object]) -> T:
        return self.value

    def expect(self, message: str) -> T:
        return self.value

    def expect_err(self, message: str) -> Never:
        raise UnwrapError(message, payload=self.value)

    def map[U](self, func: Callable[[T], U]) -> Success[U]:
        return Success(func(self.value))

    def map_err(self, func: Callable[[Any], object]) -> Success[T]:
        return self

    def flat_map[U, F](self, func: Callable[[T], Outcome[U, F]]) -> Outcome[U, F]:
        """Delegate entirely to ``func``; its error type joins the union."""
        return func(self.value)

    def and_[U, F](self, other: Outcome[U, F]) -> Outcome[U, F]:
        return other

    def or_(self, other: Outcome[Any, Any]) -> Success[T]:
        return self

    def match[U](
        self,
        *,
        success: Callable[[T], U],
        failure: Callable[[Any], U],
    ) -> U:
        return success(self.value)

    def to_option(self) -> Option[T]:
        from fallible.optional import from_nullable

        return from_nullable(self.value)

    def error_option(self) -> Option[Never]:
        from fallible.optional import ABSENT

        return ABSENT

    def __iter__(self) -> Generator[Never, object, T]:
        return self.value
        yield  # pragma: no cover - marks this as a generator


@dataclasses.dataclass(frozen=True, slots=True)
class Failure[E]:
    """A failed outcome carrying ``error``."""

    error: E

    def is_success(self) -> bool:
        return False

    def is_failure(self) -> bool:
        return True

    def unwrap(self) -> Never:
        raise self._unwrap_error(
            f"called unwrap on a failure value: {describe(self.error)}"
        )

    def unwrap_or[U](self, default: U) -> U:
        return default

    def unwrap_or_else[U](self, func: Callable[[E], U]) -> U:
        return func(self.error)

    def expect(self, message: str) -> Never:
        raise self._unwrap_error(f"{message}: {describe(self.error)}")

    def expect_err(self, message: str) -> E:
        return self.error

    def map(self, func: Callable[[Any], object]) -> Failure[E]:
        return self

    def map_err[F](self, func: Callable[[E], F]) -> Failure[F]:
        return Failure(func(self.error))

    def flat_map(self, func: Callable[[Any], Outcome[Any, Any]]) -> Failure[E]:
        """Pass the original error through; ``func`` is never invoked."""
        return self

    def and_(self, other: Outcome[Any, Any]) -> Failure[E]:
        return self

    def or_[U, F](self, other: Outcome[U, F]) -> Outcome[U, F]:
        return other

    def match[U](
        self,
        *,
        success: Callable[[Any], U],
        failure: Callable[[E], U],
    ) -> U:
        return failure(self.error)

    def to_option(self) -> Option[Never]:
        from fallible.optional import ABSENT

        return ABSENT

    def error_option(self) -> Option[E]:
        from fallible.optional import from_nullable

        return from_nullable(self.error)

    def __iter__(self) -> Generator[Failure[E], Any, Any]:
        # The engine closes the procedure on this yield; resumption is only
        # reachable when a caller drives the generator by hand.
        return (yield self)

    def _unwrap_error(self, message: str) -> UnwrapError:
        exc = UnwrapError(message, payload=self.error)
        if isinstance(self.error, BaseException):
            exc.__cause__ = self.error
        return exc


Outcome = Success[_T] | Failure[_E]


def success[T](value: T) -> Success[T]:
    """Create a ``Success`` outcome."""
    return Success(value)


def failure[E](error: E) -> Failure[E]:
    """Create a ``Failure`` outcome."""
    return Failure(error)


def is_outcome(obj: object) -> TypeIs[Success[Any] | Failure[Any]]:
    """Return True when ``obj`` is either outcome variant."""
    return isinstance(obj, (Success, Failure))


__all__ = ["Failure", "Outcome", "Success", "failure", "is_outcome", "success"]
