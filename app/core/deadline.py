"""
Per-request deadline clock and budget-bounded calls.

Every outbound call runs through call_with_budget so a slow backend costs at most
its sub-budget. Timeouts and failures come back as CallOutcome values, never as
exceptions, so callers can treat them the same as "no data".
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class CallOutcome(Generic[T]):
    """Result of a bounded call: exactly one of value / error / timed_out is meaningful."""

    value: T | None = None
    error: BaseException | None = None
    timed_out: bool = False

    @property
    def ok(self) -> bool:
        return not self.timed_out and self.error is None


async def call_with_budget(operation: Awaitable[T], budget_s: float, label: str = "call") -> CallOutcome[T]:
    """
    Await operation for at most budget_s seconds.

    On timeout the operation's task is cancelled (closing its HTTP request) and
    CallOutcome(timed_out=True) is returned at once, without waiting for the task
    to finish unwinding. Errors raised by the operation are returned as
    CallOutcome(error=...). Cancellation of the caller still propagates.
    """
    if budget_s <= 0:
        close = getattr(operation, "close", None)
        if callable(close):
            close()
        logger.info("[deadline:%s] no budget left; skipped", label)
        return CallOutcome(timed_out=True)
    start = time.perf_counter()
    task = asyncio.ensure_future(operation)
    try:
        done, _ = await asyncio.wait({task}, timeout=budget_s)
    except asyncio.CancelledError:
        task.cancel()
        raise
    if not done:
        # Request cancellation but do not wait for the operation to unwind.
        task.cancel()
        task.add_done_callback(_consume_result)
        logger.warning("[deadline:%s] timed out after %.0fms", label, budget_s * 1000)
        return CallOutcome(timed_out=True)
    if task.cancelled():
        logger.warning("[deadline:%s] cancelled by the operation itself", label)
        return CallOutcome(error=asyncio.CancelledError())
    error = task.exception()
    if error is not None:
        logger.warning("[deadline:%s] failed: %s", label, error)
        return CallOutcome(error=error)
    elapsed_ms = (time.perf_counter() - start) * 1000
    logger.info("[deadline:%s] OUT ok in %.0fms", label, elapsed_ms)
    return CallOutcome(value=task.result())


def _consume_result(task: asyncio.Future) -> None:
    """Retrieve the outcome of an abandoned call so asyncio does not log it as never retrieved."""
    if not task.cancelled() and task.exception() is not None:
        logger.debug("[deadline] abandoned call finished with %r", task.exception())


class RequestDeadline:
    """
    One wall-clock budget per request. Sub-budgets for each backend call are
    derived from what is left, minus headroom for transport latency.
    """

    def __init__(self, total_s: float, headroom_s: float = 0.0, clock: Any = time.monotonic) -> None:
        self._clock = clock
        self._total_s = total_s
        self._headroom_s = headroom_s
        self._started = clock()

    @property
    def total(self) -> float:
        return self._total_s

    def elapsed(self) -> float:
        return self._clock() - self._started

    def remaining(self) -> float:
        return max(0.0, self._total_s - self.elapsed())

    def budget_for(self, cap_s: float) -> float:
        """Return min(cap_s, remaining - headroom), never negative."""
        return max(0.0, min(cap_s, self.remaining() - self._headroom_s))
