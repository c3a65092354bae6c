"""fallible: explicit success/failure and present/absent values.

Public API:
    - Success / Failure: binary outcome container (``success()``, ``failure()``)
    - Present / Absent: optional value container (``present()``, ``absent()``,
      ``from_nullable()``)
    - gen(): straight-line composition of fallible steps via ``yield from``
    - combine() / partition(): aggregate many outcomes
    - from_throwable() / from_awaitable() / try_async(): capture raised
      exceptions as failures, with optional retries
"""

from __future__ import annotations

import logging

from fallible.aggregate import Partitioned, combine, partition
from fallible.bridge import from_awaitable, from_throwable, try_async
from fallible.config import Settings, resolve_settings
from fallible.errors import ConfigurationError, FallibleError, UnwrapError
from fallible.optional import (
    ABSENT,
    UNSET,
    Absent,
    Option,
    Present,
    absent,
    from_nullable,
    is_option,
    present,
)
from fallible.outcome import Failure, Outcome, Success, failure, is_outcome, success
from fallible.propagate import gen
from fallible.retry import RetryPolicy

try:
    from importlib.metadata import PackageNotFoundError, version

    __version__ = version("fallible")
except PackageNotFoundError:
    __version__ = "0.0.0+unknown"

# Library-level NullHandler: stay silent unless the consumer configures logging.
logging.getLogger("fallible").addHandler(logging.NullHandler())

__all__ = [
    "ABSENT",
    "UNSET",
    "Absent",
    "ConfigurationError",
    "Failure",
    "FallibleError",
    "Option",
    "Outcome",
    "Partitioned",
    "Present",
    "RetryPolicy",
    "Settings",
    "Success",
    "UnwrapError",
    "absent",
    "combine",
    "failure",
    "from_awaitable",
    "from_nullable",
    "from_throwable",
    "gen",
    "is_option",
    "is_outcome",
    "partition",
    "present",
    "resolve_settings",
    "success",
    "try_async",
]
