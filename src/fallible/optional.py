"""Optional value container: ``Present`` or ``Absent``.

``Absent`` carries no payload and is a process-wide singleton (``ABSENT``).
``Present`` never wraps ``None`` or ``UNSET``; the only way to express "no
value" is ``Absent`` itself, so ``Present.map`` folds a ``None`` result
into ``ABSENT``.
"""

from __future__ import annotations

import dataclasses
from typing import TYPE_CHECKING, Any, Final, Never, Self, TypeIs, TypeVar

from fallible.errors import UnwrapError
from fallible.outcome import Failure, Success

if TYPE_CHECKING:
    from collections.abc import Callable, Generator

_T = TypeVar("_T")


class _Unset:
    """Marker for "no value was supplied", distinct from ``None``."""

    __slots__ = ()
    _instance: _Unset | None = None

    def __new__(cls) -> Self:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False

    def __reduce__(self) -> str:
        return "UNSET"


UNSET: Final = _Unset()


def _is_absence_marker(value: object) -> bool:
    return value is None or value is UNSET


@dataclasses.dataclass(frozen=True, slots=True)
class Present[T]:
    """An option holding ``value``."""

    value: T

    def __post_init__(self) -> None:
        if _is_absence_marker(self.value):
            raise ValueError(
                f"Present cannot hold {self.value!r}; use ABSENT or from_nullable()"
            )

    def is_present(self) -> bool:
        return True

    def is_absent(self) -> bool:
        return False

    def unwrap(self) -> T:
        return self.value

    def unwrap_or(self, default: object) -> T:
        return self.value

    def unwrap_or_else(self, func: Callable[[], object]) -> T:
        return self.value

    def expect(self, message: str) -> T:
        return self.value

    def map[U](self, func: Callable[[T], U | None]) -> Option[U]:
        return from_nullable(func(self.value))

    def flat_map[U](self, func: Callable[[T], Option[U]]) -> Option[U]:
        return func(self.value)

    def filter(self, predicate: Callable[[T], bool]) -> Option[T]:
        return self if predicate(self.value) else ABSENT

    def and_[U](self, other: Option[U]) -> Option[U]:
        return other

    def or_(self, other: Option[Any]) -> Present[T]:
        return self

    def match[U](
        self,
        *,
        present: Callable[[T], U],
        absent: Callable[[], U],
    ) -> U:
        return present(self.value)

    def to_outcome(self, error: object) -> Success[T]:
        return Success(self.value)

    def to_outcome_else(self, error_fn: Callable[[], object]) -> Success[T]:
        return Success(self.value)

    def __iter__(self) -> Generator[Never, object, T]:
        return self.value
        yield  # pragma: no cover - marks this as a generator


class Absent:
    """The empty option. ``Absent()`` always returns ``ABSENT``."""

    __slots__ = ()
    __match_args__ = ()
    _instance: Absent | None = None

    def __new__(cls) -> Self:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "Absent()"

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Absent)

    def __hash__(self) -> int:
        return hash(Absent)

    def __reduce__(self) -> tuple[type[Absent], tuple[()]]:
        return (Absent, ())

    def __setattr__(self, name: str, value: object) -> None:
        raise AttributeError("Absent is immutable")

    def is_present(self) -> bool:
        return False

    def is_absent(self) -> bool:
        return True

    def unwrap(self) -> Never:
        raise UnwrapError("called unwrap on an absent value")

    def unwrap_or[U](self, default: U) -> U:
        return default

    def unwrap_or_else[U](self, func: Callable[[], U]) -> U:
        return func()

    def expect(self, message: str) -> Never:
        raise UnwrapError(message)

    def map(self, func: Callable[[Any], object]) -> Absent:
        return self

    def flat_map(self, func: Callable[[Any], Option[Any]]) -> Absent:
        return self

    def filter(self, predicate: Callable[[Any], bool]) -> Absent:
        return self

    def and_(self, other: Option[Any]) -> Absent:
        return self

    def or_[U](self, other: Option[U]) -> Option[U]:
        return other

    def match[U](
        self,
        *,
        present: Callable[[Any], U],
        absent: Callable[[], U],
    ) -> U:
        return absent()

    def to_outcome[E](self, error: E) -> Failure[E]:
        return Failure(error)

    def to_outcome_else[E](self, error_fn: Callable[[], E]) -> Failure[E]:
        return Failure(error_fn())

    def __iter__(self) -> Generator[Absent, Any, Any]:
        return (yield self)


ABSENT: Final = Absent()

Option = Present[_T] | Absent


def present[T](value: T) -> Present[T]:
    """Create a ``Present`` option. Raises ``ValueError`` for ``None``."""
    return Present(value)


def absent() -> Absent:
    """Return the shared ``ABSENT`` value."""
    return ABSENT


def from_nullable[T](value: T | None) -> Option[T]:
    """Wrap ``value`` unless it is ``None`` or ``UNSET``.

    Falsy values such as ``0``, ``""``, ``False`` and empty containers are
    still values and map to ``Present``.
    """
    if _is_absence_marker(value):
        return ABSENT
    return Present(value)


def is_option(obj: object) -> TypeIs[Present[Any] | Absent]:
    """Return True when ``obj`` is either option variant."""
    return isinstance(obj, (Present, Absent))


__all__ = [
    "ABSENT",
    "UNSET",
    "Absent",
    "Option",
    "Present",
    "absent",
    "from_nullable",
    "is_option",
    "present",
]
