"""Exception capture boundaries and the async retry helper."""

from __future__ import annotations

import asyncio
import json
from unittest.mock import call, patch

import pytest

from fallible import (
    ConfigurationError,
    Failure,
    RetryPolicy,
    Success,
    from_awaitable,
    from_throwable,
    try_async,
)

pytestmark = pytest.mark.unit


class _Flaky:
    """Async operation that fails a fixed number of times before succeeding."""

    def __init__(self, failures: int, value: str = "success") -> None:
        self.failures = failures
        self.value = value
        self.attempts = 0

    async def __call__(self) -> str:
        self.attempts += 1
        if self.attempts <= self.failures:
            raise ConnectionError(f"attempt {self.attempts} failed")
        return self.value


# --- from_throwable ---


def test_from_throwable_captures_return_value():
    assert from_throwable(lambda: 42) == Success(42)


def test_from_throwable_captures_raised_exception():
    result = from_throwable(json.loads, "{not json")

    assert result.is_failure()
    assert isinstance(result.error, json.JSONDecodeError)


def test_from_throwable_forwards_arguments():
    assert from_throwable(int, "ff", base=16) == Success(255)


def test_from_throwable_only_captures_listed_exceptions():
    def explode():
        raise KeyError("k")

    assert from_throwable(explode, exceptions=(KeyError,)).is_failure()
    with pytest.raises(KeyError):
        from_throwable(explode, exceptions=(ValueError,))


def test_from_throwable_lets_base_exceptions_through():
    def interrupt():
        raise KeyboardInterrupt

    with pytest.raises(KeyboardInterrupt):
        from_throwable(interrupt)


# --- from_awaitable ---


@pytest.mark.asyncio
async def test_from_awaitable_resolved():
    async def fetch():
        return 42

    assert await from_awaitable(fetch()) == Success(42)


@pytest.mark.asyncio
async def test_from_awaitable_rejected_preserves_error():
    error = RuntimeError("network down")

    async def fetch():
        raise error

    result = await from_awaitable(fetch())

    assert isinstance(result, Failure)
    assert result.error is error


@pytest.mark.asyncio
async def test_from_awaitable_accepts_futures():
    loop = asyncio.get_running_loop()
    fut: asyncio.Future[str] = loop.create_future()
    loop.call_soon(fut.set_result, "done")

    assert await from_awaitable(fut) == Success("done")


@pytest.mark.asyncio
async def test_from_awaitable_does_not_capture_cancellation():
    async def hang():
        await asyncio.sleep(10)

    task = asyncio.create_task(from_awaitable(hang()))
    await asyncio.sleep(0)
    task.cancel()

    with pytest.raises(asyncio.CancelledError):
        await task


@pytest.mark.asyncio
async def test_from_awaitable_rejects_non_awaitables():
    with pytest.raises(TypeError, match="must be awaitable"):
        await from_awaitable(42)  # type: ignore[arg-type]


# --- try_async ---


@pytest.mark.asyncio
async def test_try_async_success():
    async def op():
        return 42

    assert await try_async(op) == Success(42)


@pytest.mark.asyncio
async def test_try_async_failure_without_retry_runs_once():
    op = _Flaky(failures=5)

    result = await try_async(op)

    assert op.attempts == 1
    assert isinstance(result, Failure)
    assert isinstance(result.error, ConnectionError)


@pytest.mark.asyncio
async def test_try_async_maps_errors_with_catch():
    op = _Flaky(failures=1)

    result = await try_async(
        op,
        catch=lambda exc: {"type": "NETWORK_ERROR", "message": str(exc)},
    )

    assert result == Failure({"type": "NETWORK_ERROR", "message": "attempt 1 failed"})


@pytest.mark.asyncio
async def test_try_async_retries_with_linear_backoff():
    op = _Flaky(failures=2)

    with patch("asyncio.sleep") as sleep_mock:
        result = await try_async(
            op, retry=RetryPolicy(times=3, delay_ms=10, backoff="linear")
        )

    assert result == Success("success")
    assert op.attempts == 3
    assert sleep_mock.await_args_list == [call(0.01), call(0.01)]


@pytest.mark.asyncio
async def test_try_async_retries_with_exponential_backoff():
    op = _Flaky(failures=2)

    with patch("asyncio.sleep") as sleep_mock:
        result = await try_async(
            op, retry={"times": 2, "delay_ms": 10, "backoff": "exponential"}
        )

    assert result == Success("success")
    assert op.attempts == 3
    assert sleep_mock.await_args_list == [call(0.01), call(0.02)]


@pytest.mark.asyncio
async def test_try_async_exhausted_retries_maps_last_error():
    op = _Flaky(failures=10)

    with patch("asyncio.sleep") as sleep_mock:
        result = await try_async(
            op,
            catch=str,
            retry={"times": 2, "delay_ms": 5},
        )

    assert result == Failure("attempt 3 failed")
    assert op.attempts == 3
    assert sleep_mock.await_count == 2


@pytest.mark.asyncio
async def test_try_async_should_retry_can_stop_early():
    op = _Flaky(failures=10)

    with patch("asyncio.sleep") as sleep_mock:
        result = await try_async(
            op,
            retry=RetryPolicy(times=5, delay_ms=1),
            should_retry=lambda exc: "1" in str(exc),
        )

    assert op.attempts == 2
    assert isinstance(result, Failure)
    assert str(result.error) == "attempt 2 failed"
    assert sleep_mock.await_count == 1


@pytest.mark.asyncio
async def test_try_async_zero_retries_runs_once():
    op = _Flaky(failures=1)

    result = await try_async(op, retry=RetryPolicy(times=0))

    assert op.attempts == 1
    assert result.is_failure()


@pytest.mark.asyncio
async def test_try_async_uses_configured_default_policy(monkeypatch):
    monkeypatch.setenv("FALLIBLE_RETRY_TIMES", "2")
    monkeypatch.setenv("FALLIBLE_RETRY_DELAY_MS", "4")
    monkeypatch.setenv("FALLIBLE_RETRY_BACKOFF", "exponential")
    op = _Flaky(failures=2)

    with patch("asyncio.sleep") as sleep_mock:
        result = await try_async(op, retry=True)

    assert result == Success("success")
    assert sleep_mock.await_args_list == [call(0.004), call(0.008)]


@pytest.mark.asyncio
async def test_try_async_rejects_invalid_retry_options():
    async def op():
        return 1

    with pytest.raises(ConfigurationError, match="Unknown retry option"):
        await try_async(op, retry={"attempts": 3})
    with pytest.raises(ConfigurationError, match="Unsupported retry option"):
        await try_async(op, retry=3)  # type: ignore[arg-type]


@pytest.mark.asyncio
async def test_try_async_delay_does_not_block_other_tasks():
    events: list[str] = []
    op = _Flaky(failures=1)

    async def tracked():
        events.append("attempt")
        return await op()

    async def ticker():
        for _ in range(3):
            events.append("tick")
            await asyncio.sleep(0)

    result, _ = await asyncio.gather(
        try_async(tracked, retry=RetryPolicy(times=1, delay_ms=20)),
        ticker(),
    )

    assert result == Success("success")
    assert events == ["attempt", "tick", "tick", "tick", "attempt"]


@pytest.mark.asyncio
async def test_try_async_logs_retries(debug_logs):
    op = _Flaky(failures=1)

    with patch("asyncio.sleep"):
        await try_async(op, retry=RetryPolicy(times=1, delay_ms=1))

    messages = [
        r.getMessage() for r in debug_logs.records if r.name == "fallible.bridge"
    ]
    assert any("retrying" in m for m in messages)


@pytest.mark.asyncio
async def test_try_async_rejects_non_awaitable_thunk_result():
    with pytest.raises(TypeError, match="must be awaitable"):
        await try_async(lambda: 42)  # type: ignore[arg-type, return-value]


@pytest.mark.asyncio
async def test_try_async_captures_synchronous_raise_from_thunk():
    def broken():
        raise ValueError("bad request")

    result = await try_async(broken, catch=str)

    assert result == Failure("bad request")


@pytest.mark.asyncio
async def test_try_async_captures_timeout_inside_thunk():
    async def slow():
        await asyncio.sleep(1)
        return "late"

    result = await try_async(lambda: asyncio.wait_for(slow(), 0.01))

    assert isinstance(result, Failure)
    assert isinstance(result.error, TimeoutError)


@pytest.mark.asyncio
async def test_try_async_outer_timeout_cancels_retry_delay():
    op = _Flaky(failures=10)

    with pytest.raises(TimeoutError):
        await asyncio.wait_for(
            try_async(op, retry=RetryPolicy(times=3, delay_ms=500)), 0.05
        )

    assert op.attempts == 1


@pytest.mark.asyncio
async def test_try_async_does_not_capture_cancellation():
    op = _Flaky(failures=10)
    task = asyncio.create_task(
        try_async(op, retry=RetryPolicy(times=3, delay_ms=500))
    )
    await asyncio.sleep(0.01)
    task.cancel()

    with pytest.raises(asyncio.CancelledError):
        await task

    assert op.attempts == 1
