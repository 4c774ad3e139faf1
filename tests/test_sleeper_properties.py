"""
Property-based tests for the interruptible sleeper.
"""

import asyncio
import time

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from domain_binder.exceptions import WorkflowCancelledError
from domain_binder.sleeper import RecordingSleeper, Sleeper


class TestSleeper:
    """Real waits, kept short."""

    def test_short_sleep_completes(self) -> None:
        sleeper = Sleeper()
        start = time.perf_counter()

        asyncio.run(sleeper.sleep(0.05))

        assert time.perf_counter() - start >= 0.04
        assert not sleeper.cancelled

    @pytest.mark.parametrize("seconds", [0, -1, 0.0])
    def test_non_positive_sleep_returns_immediately(self, seconds: float) -> None:
        asyncio.run(Sleeper().sleep(seconds))

    def test_cancel_interrupts_pending_wait(self) -> None:
        sleeper = Sleeper()

        async def run():
            task = asyncio.ensure_future(sleeper.sleep(600))
            await asyncio.sleep(0.01)
            sleeper.cancel()
            return await task

        start = time.perf_counter()
        with pytest.raises(WorkflowCancelledError) as exc_info:
            asyncio.run(run())

        assert time.perf_counter() - start < 5
        assert exc_info.value.details["seconds"] == 600
        assert sleeper.cancelled

    def test_reused_across_event_loops(self) -> None:
        sleeper = Sleeper()

        async def wait_then_cancel():
            task = asyncio.ensure_future(sleeper.sleep(600))
            await asyncio.sleep(0.01)
            sleeper.cancel()
            return await task

        asyncio.run(sleeper.sleep(0.01))
        asyncio.run(sleeper.sleep(0.01))
        with pytest.raises(WorkflowCancelledError):
            asyncio.run(wait_then_cancel())
        with pytest.raises(WorkflowCancelledError):
            asyncio.run(sleeper.sleep(0.01))

    def test_cancel_before_wait_fails_immediately(self) -> None:
        sleeper = Sleeper()
        sleeper.cancel()

        with pytest.raises(WorkflowCancelledError):
            asyncio.run(sleeper.sleep(600))


class TestRecordingSleeperProperty:
    """
    Property-based tests for the recording sleeper.
    """

    @given(delays=st.lists(st.floats(min_value=0, max_value=10_000), max_size=20))
    @settings(max_examples=100)
    def test_records_every_delay_without_waiting(self, delays: list) -> None:
        """
        *For any* sequence of delays, the recording sleeper SHALL record them
        in order and report their sum.
        """
        sleeper = RecordingSleeper()

        async def run():
            for delay in delays:
                await sleeper.sleep(delay)

        asyncio.run(run())

        assert sleeper.calls == delays
        assert sleeper.total_seconds == pytest.approx(sum(delays))

    def test_cancelled_recording_sleeper_raises(self) -> None:
        sleeper = RecordingSleeper()
        sleeper.cancel()

        with pytest.raises(WorkflowCancelledError):
            asyncio.run(sleeper.sleep(1))

        assert sleeper.calls == []
