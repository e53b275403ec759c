"""
Unit tests for call_with_budget and RequestDeadline.
"""

import asyncio
import time

import pytest

from app.core.deadline import CallOutcome, RequestDeadline, call_with_budget


class TestCallWithBudget:
    """Tests for call_with_budget()."""

    @pytest.mark.asyncio
    async def test_returns_value_when_fast(self) -> None:
        async def op() -> str:
            return "done"

        outcome = await call_with_budget(op(), 1.0)
        assert outcome == CallOutcome(value="done")
        assert outcome.ok

    @pytest.mark.asyncio
    async def test_backend_error_is_returned_not_raised(self) -> None:
        async def op() -> str:
            raise ConnectionError("connection refused")

        outcome = await call_with_budget(op(), 1.0)
        assert not outcome.ok
        assert not outcome.timed_out
        assert isinstance(outcome.error, ConnectionError)

    @pytest.mark.asyncio
    async def test_times_out_without_waiting_for_slow_operation(self) -> None:
        async def op() -> str:
            await asyncio.sleep(2.0)
            return "late"

        start = time.perf_counter()
        outcome = await call_with_budget(op(), 0.05)
        elapsed = time.perf_counter() - start
        assert outcome.timed_out
        assert outcome.value is None
        assert elapsed < 0.5

    @pytest.mark.asyncio
    async def test_timed_out_operation_is_cancelled(self) -> None:
        cancelled = asyncio.Event()

        async def op() -> None:
            try:
                await asyncio.sleep(2.0)
            except asyncio.CancelledError:
                cancelled.set()
                raise

        outcome = await call_with_budget(op(), 0.02)
        assert outcome.timed_out
        await asyncio.wait_for(cancelled.wait(), timeout=1.0)

    @pytest.mark.asyncio
    async def test_slow_cancellation_cleanup_does_not_extend_budget(self) -> None:
        finished = asyncio.Event()

        async def op() -> None:
            try:
                await asyncio.sleep(2.0)
            except asyncio.CancelledError:
                # e.g. a slow connection close
                await asyncio.sleep(0.3)
                finished.set()
                raise

        start = time.perf_counter()
        outcome = await call_with_budget(op(), 0.05)
        elapsed = time.perf_counter() - start
        assert outcome.timed_out
        assert elapsed < 0.25
        await asyncio.wait_for(finished.wait(), timeout=2.0)

    @pytest.mark.asyncio
    async def test_no_budget_skips_operation(self) -> None:
        started = False

        async def op() -> None:
            nonlocal started
            started = True

        outcome = await call_with_budget(op(), 0.0)
        assert outcome.timed_out
        assert started is False


class FakeClock:
    def __init__(self) -> None:
        self.now = 100.0

    def __call__(self) -> float:
        return self.now


class TestRequestDeadline:
    """Tests for RequestDeadline."""

    def test_budget_capped_by_call_limit(self) -> None:
        deadline = RequestDeadline(3.0, headroom_s=0.2, clock=FakeClock())
        assert deadline.budget_for(1.2) == pytest.approx(1.2)

    def test_budget_shrinks_as_time_passes(self) -> None:
        clock = FakeClock()
        deadline = RequestDeadline(3.0, headroom_s=0.2, clock=clock)
        clock.now += 2.0
        assert deadline.remaining() == pytest.approx(1.0)
        assert deadline.budget_for(1.4) == pytest.approx(0.8)

    def test_budget_never_negative(self) -> None:
        clock = FakeClock()
        deadline = RequestDeadline(3.0, headroom_s=0.2, clock=clock)
        clock.now += 5.0
        assert deadline.remaining() == 0.0
        assert deadline.budget_for(1.2) == 0.0

    def test_sub_budget_strictly_below_total(self) -> None:
        deadline = RequestDeadline(1.0, headroom_s=0.2, clock=FakeClock())
        assert deadline.budget_for(5.0) == pytest.approx(0.8)
        assert deadline.budget_for(5.0) < deadline.total
