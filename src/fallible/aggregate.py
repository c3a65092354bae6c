"""Combinators over collections of outcomes."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, NamedTuple

from fallible.outcome import Failure, Success

if TYPE_CHECKING:
    from collections.abc import Iterable

    from fallible.outcome import Outcome


class Partitioned[T, E](NamedTuple):
    """Success values and failure errors, each in input order."""

    successes: list[T]
    failures: list[E]


def combine[T, E](outcomes: Iterable[Outcome[T, E]]) -> Outcome[list[T], E]:
    """Collect success values, stopping at the first failure.

    Iteration is lazy: once a ``Failure`` is seen, later elements are never
    pulled from ``outcomes``. An empty input yields ``Success([])``.
    """
    values: list[Any] = []
    for outcome in outcomes:
        match outcome:
            case Success(value):
                values.append(value)
            case Failure():
                return outcome
            case _:
                raise TypeError(f"expected an outcome, got {type(outcome).__name__}")
    return Success(values)


def partition[T, E](outcomes: Iterable[Outcome[T, E]]) -> Partitioned[T, E]:
    """Split outcomes into success values and failure errors in one full pass."""
    successes: list[Any] = []
    failures: list[Any] = []
    for outcome in outcomes:
        match outcome:
            case Success(value):
                successes.append(value)
            case Failure(error):
                failures.append(error)
            case _:
                raise TypeError(f"expected an outcome, got {type(outcome).__name__}")
    return Partitioned(successes, failures)


__all__ = ["Partitioned", "combine", "partition"]
