"""Boundaries where raised exceptions become ``Failure`` values.

These are the only places fallible catches anything. Cancellation
(``asyncio.CancelledError``) and other ``BaseException``s that are not
``Exception`` subclasses always propagate untouched.
"""

from __future__ import annotations

import asyncio
from collections.abc import Mapping
import inspect
import logging
from typing import TYPE_CHECKING, Any

from fallible.errors import ConfigurationError
from fallible.outcome import Failure, Success
from fallible.retry import RetryPolicy

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from fallible.outcome import Outcome

log = logging.getLogger(__name__)


def from_throwable[T](
    fn: Callable[..., T],
    *args: Any,
    exceptions: tuple[type[BaseException], ...] = (Exception,),
    **kwargs: Any,
) -> Outcome[T, BaseException]:
    """Call ``fn(*args, **kwargs)``, capturing raised ``exceptions`` as ``Failure``.

    Example:
        port = from_throwable(int, raw_port).map_err(str)
    """
    try:
        value = fn(*args, **kwargs)
    except exceptions as exc:
        return Failure(exc)
    return Success(value)


async def from_awaitable[T](aw: Awaitable[T]) -> Outcome[T, Exception]:
    """Await ``aw``; its result becomes ``Success``, a raised exception ``Failure``.

    Raises:
        TypeError: When ``aw`` is not awaitable.
    """
    _require_awaitable(aw, "from_awaitable")
    try:
        value = await aw
    except Exception as exc:
        return Failure(exc)
    return Success(value)


async def try_async[T, E](
    fn: Callable[[], Awaitable[T]],
    *,
    catch: Callable[[Exception], E] | None = None,
    retry: RetryPolicy | Mapping[str, Any] | bool | None = None,
    should_retry: Callable[[Exception], bool] | None = None,
) -> Outcome[T, E | Exception]:
    """Run an async thunk with optional bounded retries.

    Args:
        fn: Zero-argument callable returning a fresh awaitable per attempt.
        catch: Maps the final exception to the failure value. Without it the
            exception itself is the failure value.
        retry: ``RetryPolicy``, a mapping of its fields, ``True`` for the
            configured default (see ``resolve_settings``), or ``None`` to run
            once.
        should_retry: Optional predicate; returning False makes the current
            attempt final.

    Returns:
        ``Success`` from the first attempt that completes, otherwise
        ``Failure`` built from the last exception.

    Raises:
        TypeError: When ``fn`` returns something that is not awaitable.

    Example:
        result = await try_async(
            lambda: client.get(url),
            catch=lambda exc: FetchError(url, exc),
            retry={"times": 2, "delay_ms": 100, "backoff": "exponential"},
        )
    """
    policy = _resolve_policy(retry)
    max_attempts = policy.max_attempts if policy is not None else 1

    for attempt in range(max_attempts):
        try:
            pending = fn()
        except Exception as exc:
            error = exc
        else:
            _require_awaitable(pending, "try_async thunk result")
            try:
                return Success(await pending)
            except Exception as exc:
                error = exc

        is_last = attempt >= max_attempts - 1
        if (
            policy is None
            or is_last
            or (should_retry is not None and not should_retry(error))
        ):
            return Failure(catch(error) if catch is not None else error)

        delay = policy.delay_s(attempt)
        log.debug(
            "Attempt %d/%d failed (%s); retrying in %.3fs",
            attempt + 1,
            max_attempts,
            type(error).__name__,
            delay,
        )
        await asyncio.sleep(delay)

    raise RuntimeError("try_async exhausted without an outcome")  # pragma: no cover


def _require_awaitable(candidate: object, what: str) -> None:
    if not inspect.isawaitable(candidate):
        raise TypeError(f"{what} must be awaitable, got {type(candidate).__name__}")


def _resolve_policy(
    retry: RetryPolicy | Mapping[str, Any] | bool | None,
) -> RetryPolicy | None:
    if retry is None or retry is False:
        return None
    if retry is True:
        from fallible.config import resolve_settings

        return resolve_settings().retry_policy()
    if isinstance(retry, RetryPolicy):
        return retry
    if isinstance(retry, Mapping):
        return RetryPolicy.from_mapping(retry)
    raise ConfigurationError(
        f"Unsupported retry option: {retry!r}",
        hint="Pass a RetryPolicy, a mapping of its fields, True, or None.",
    )


__all__ = ["from_awaitable", "from_throwable", "try_async"]
