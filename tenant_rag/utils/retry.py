"""One retry/backoff policy shared by readiness polling and external calls.

A :class:`RetryPolicy` describes *when* to try again (base delay,
multiplier, attempt cap, total-wait cap).  Two helpers apply it:

- :func:`poll_until` -- call an async readiness check until it returns
  ``True`` (index creation is asynchronous on hosted stores).
- :func:`retry_async` -- re-run an async operation that raised one of the
  listed exception types (transient HTTP failures).

A multiplier of ``1.0`` gives a fixed interval; anything above gives
exponential backoff.  ``max_attempts=1`` disables retry entirely.
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, Iterator, TypeVar

import structlog
from pydantic import BaseModel, ConfigDict, Field

from tenant_rag.utils.errors import IndexNotReadyError, TransportError
from tenant_rag.utils.logging import get_logger

_T = TypeVar("_T")

_logger: structlog.BoundLogger = get_logger(__name__)


class RetryPolicy(BaseModel):
    """Backoff schedule: ``base_delay * multiplier ** n`` seconds between attempts."""

    model_config = ConfigDict(frozen=True)

    base_delay: float = Field(default=2.0, ge=0.0, description="Seconds to wait before the 2nd attempt.")
    multiplier: float = Field(default=1.0, ge=1.0, description="Growth factor applied to each successive delay.")
    max_attempts: int = Field(default=10, ge=1, description="Total attempts including the first.")
    max_total_wait: float | None = Field(
        default=None, ge=0.0, description="Cap on cumulative sleep; None means uncapped."
    )

    def delays(self) -> Iterator[float]:
        """Yield the sleep before attempts 2..max_attempts.

        Stops early once the cumulative wait would exceed ``max_total_wait``;
        the last delay is trimmed so the cap is hit exactly.
        """
        waited = 0.0
        delay = self.base_delay
        for _ in range(self.max_attempts - 1):
            if self.max_total_wait is not None and waited + delay > self.max_total_wait:
                delay = self.max_total_wait - waited
                if delay <= 0:
                    return
            yield delay
            waited += delay
            delay *= self.multiplier

    @classmethod
    def no_retry(cls) -> "RetryPolicy":
        return cls(base_delay=0.0, max_attempts=1)


async def poll_until(
    check: Callable[[], Awaitable[bool]],
    policy: RetryPolicy,
    *,
    index_name: str,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> int:
    """Run *check* until it returns ``True``; return the attempt that succeeded.

    Exceptions raised by *check* count as "not ready yet".  When the
    schedule is exhausted :class:`IndexNotReadyError` names the index and
    the number of attempts made.
    """
    delays = policy.delays()
    attempt = 0
    while True:
        attempt += 1
        try:
            if await check():
                return attempt
            _logger.info("index_not_ready", index=index_name, attempt=attempt, max_attempts=policy.max_attempts)
        except Exception as exc:
            _logger.info(
                "index_readiness_check_failed",
                index=index_name,
                attempt=attempt,
                error=str(exc),
            )
        delay = next(delays, None)
        if delay is None:
            raise IndexNotReadyError(index_name=index_name, attempts=attempt, stage="ensure_ready")
        await sleep(delay)


async def retry_async(
    operation: Callable[[], Awaitable[_T]],
    policy: RetryPolicy,
    *,
    retry_on: tuple[type[BaseException], ...] = (TransportError,),
    operation_name: str = "operation",
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> _T:
    """Await *operation*, retrying on *retry_on* per *policy*; re-raise the last failure."""
    delays = policy.delays()
    attempt = 0
    while True:
        attempt += 1
        try:
            return await operation()
        except retry_on as exc:
            delay = next(delays, None)
            if delay is None:
                raise
            _logger.warning(
                "retrying_after_failure",
                operation=operation_name,
                attempt=attempt,
                delay=delay,
                error=str(exc),
            )
            await sleep(delay)
