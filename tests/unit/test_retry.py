"""Unit tests for RetryPolicy, poll_until and retry_async."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from tenant_rag.utils.errors import IndexNotReadyError, InvalidResponseFormat, TransportError
from tenant_rag.utils.retry import RetryPolicy, poll_until, retry_async


class _SleepRecorder:
    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


class TestRetryPolicy:
    def test_defaults_are_fixed_two_second_interval(self) -> None:
        policy = RetryPolicy()
        assert list(policy.delays()) == [2.0] * 9

    def test_exponential_backoff(self) -> None:
        policy = RetryPolicy(base_delay=1.0, multiplier=2.0, max_attempts=4)
        assert list(policy.delays()) == [1.0, 2.0, 4.0]

    def test_total_wait_cap_trims_last_delay(self) -> None:
        policy = RetryPolicy(base_delay=1.0, multiplier=2.0, max_attempts=10, max_total_wait=5.0)
        assert list(policy.delays()) == [1.0, 2.0, 2.0]

    def test_no_retry(self) -> None:
        policy = RetryPolicy.no_retry()
        assert policy.max_attempts == 1
        assert list(policy.delays()) == []

    def test_frozen(self) -> None:
        policy = RetryPolicy()
        with pytest.raises(Exception):
            policy.max_attempts = 3  # type: ignore[misc]


class TestPollUntil:
    @pytest.mark.asyncio
    async def test_ready_on_first_check(self) -> None:
        sleep = _SleepRecorder()
        check = AsyncMock(return_value=True)
        attempts = await poll_until(check, RetryPolicy(), index_name="idx", sleep=sleep)
        assert attempts == 1
        assert sleep.delays == []

    @pytest.mark.asyncio
    async def test_ready_after_several_checks(self) -> None:
        sleep = _SleepRecorder()
        check = AsyncMock(side_effect=[False, False, True])
        attempts = await poll_until(check, RetryPolicy(base_delay=2.0), index_name="idx", sleep=sleep)
        assert attempts == 3
        assert sleep.delays == [2.0, 2.0]

    @pytest.mark.asyncio
    async def test_exceptions_count_as_not_ready(self) -> None:
        sleep = _SleepRecorder()
        check = AsyncMock(side_effect=[TransportError("boom"), True])
        attempts = await poll_until(check, RetryPolicy(), index_name="idx", sleep=sleep)
        assert attempts == 2

    @pytest.mark.asyncio
    async def test_exhaustion_raises_index_not_ready(self) -> None:
        sleep = _SleepRecorder()
        check = AsyncMock(return_value=False)
        with pytest.raises(IndexNotReadyError) as exc_info:
            await poll_until(check, RetryPolicy(base_delay=2.0, max_attempts=10), index_name="docs", sleep=sleep)
        assert exc_info.value.attempts == 10
        assert exc_info.value.index_name == "docs"
        assert check.await_count == 10
        assert sum(sleep.delays) == pytest.approx(18.0)


class TestRetryAsync:
    @pytest.mark.asyncio
    async def test_returns_first_success(self) -> None:
        operation = AsyncMock(return_value="ok")
        assert await retry_async(operation, RetryPolicy(max_attempts=3)) == "ok"
        assert operation.await_count == 1

    @pytest.mark.asyncio
    async def test_retries_transport_errors(self) -> None:
        sleep = _SleepRecorder()
        operation = AsyncMock(side_effect=[TransportError("down"), TransportError("down"), "ok"])
        policy = RetryPolicy(base_delay=0.5, multiplier=2.0, max_attempts=3)
        assert await retry_async(operation, policy, sleep=sleep) == "ok"
        assert sleep.delays == [0.5, 1.0]

    @pytest.mark.asyncio
    async def test_reraises_after_last_attempt(self) -> None:
        operation = AsyncMock(side_effect=TransportError("down"))
        with pytest.raises(TransportError):
            await retry_async(operation, RetryPolicy(base_delay=0.0, max_attempts=2), sleep=_SleepRecorder())
        assert operation.await_count == 2

    @pytest.mark.asyncio
    async def test_other_errors_are_not_retried(self) -> None:
        operation = AsyncMock(side_effect=InvalidResponseFormat("bad payload"))
        with pytest.raises(InvalidResponseFormat):
            await retry_async(operation, RetryPolicy(max_attempts=5), sleep=_SleepRecorder())
        assert operation.await_count == 1
