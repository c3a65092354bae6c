"""Generator-driven early return over outcomes.

``gen`` turns a generator function into a plain function. Inside the
generator every fallible step is written ``value = yield from step()``:

    @gen
    def register(name: str, email: str):
        valid_name = yield from validate_name(name)
        valid_email = yield from validate_email(email)
        return success(User(valid_name, valid_email))

The driver resumes the generator with each unwrapped success value and
stops at the first ``Failure`` (or ``Absent``), returning it unchanged.
Remaining steps never run; the generator is closed so its ``finally``
blocks and context managers still unwind.
"""

from __future__ import annotations

import functools
import inspect
import logging
from typing import TYPE_CHECKING, Any

from fallible.optional import Absent, Present
from fallible.outcome import Failure, Success

if TYPE_CHECKING:
    from collections.abc import Callable, Generator

log = logging.getLogger(__name__)

_STOP = (Failure, Absent)
_RESUME = (Success, Present)


def gen[**P, R](procedure: Callable[P, Generator[Any, Any, R]]) -> Callable[P, R]:
    """Wrap a step-yielding generator function into a single-call function.

    The wrapped function keeps the procedure's signature and returns the
    procedure's final outcome, or the first failure a step produced. A
    procedure that is not a generator (it performs no steps) may return an
    outcome directly.

    Raises:
        TypeError: When a step or the final value is not an outcome/option.
    """
    name = getattr(procedure, "__qualname__", repr(procedure))

    @functools.wraps(procedure)
    def run(*args: P.args, **kwargs: P.kwargs) -> R:
        steps = procedure(*args, **kwargs)
        if isinstance(steps, _STOP + _RESUME):
            return steps
        if not inspect.isgenerator(steps):
            raise TypeError(
                f"{name} must be a generator function or return an outcome, "
                f"got {type(steps).__name__}"
            )
        return _drive(steps, name)

    return run


def _drive[R](steps: Generator[Any, Any, R], name: str) -> R:
    resumed = 0
    try:
        step = next(steps)
        while True:
            if isinstance(step, _STOP):
                log.debug("%s short-circuited after %d steps: %r", name, resumed, step)
                steps.close()
                return step  # type: ignore[return-value]
            if not isinstance(step, _RESUME):
                steps.close()
                raise TypeError(
                    f"{name} yielded {type(step).__name__}; "
                    "steps must be Success/Failure or Present/Absent"
                )
            resumed += 1
            step = steps.send(step.value)
    except StopIteration as stop:
        completion = stop.value

    if not isinstance(completion, _STOP + _RESUME):
        raise TypeError(
            f"{name} must return an outcome, got {type(completion).__name__}"
        )
    return completion


__all__ = ["gen"]
