"""
Interruptible waits for the validation workflow.

Every delay in the workflow goes through a Sleeper: the settling delay after
deleting a hosting resource, the token poller's delays and the optional DNS
propagation wait. ``cancel()`` interrupts a pending wait and makes every later
wait fail immediately.
"""

import asyncio
from typing import Optional

from .exceptions import WorkflowCancelledError


class Sleeper:
    """
    asyncio-based wait that can be cancelled from another task.

    A Sleeper may be reused across event loops; the wake-up event is
    recreated for each loop, the cancelled flag is kept.
    """

    def __init__(self) -> None:
        self._cancelled = False
        self._wakeup: Optional[asyncio.Event] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None

    def _wakeup_event(self) -> asyncio.Event:
        loop = asyncio.get_running_loop()
        if self._wakeup is None or self._loop is not loop:
            self._wakeup = asyncio.Event()
            self._loop = loop
            if self._cancelled:
                self._wakeup.set()
        return self._wakeup

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        """Interrupt the pending wait, if any, and all later ones."""
        self._cancelled = True
        if self._wakeup is not None:
            self._wakeup.set()

    async def sleep(self, seconds: float) -> None:
        """
        Wait for the given number of seconds.

        Raises:
            WorkflowCancelledError: If cancel() was called before or during the wait
        """
        if self._cancelled:
            raise WorkflowCancelledError(
                code="cancelled",
                message="Workflow was cancelled",
                details={"seconds": seconds},
            )
        if seconds <= 0:
            return
        try:
            await asyncio.wait_for(self._wakeup_event().wait(), timeout=seconds)
        except asyncio.TimeoutError:
            return
        raise WorkflowCancelledError(
            code="cancelled",
            message=f"Wait of {seconds}s was interrupted",
            details={"seconds": seconds},
        )


class RecordingSleeper(Sleeper):
    """Sleeper that records requested delays without waiting (simulation and tests)."""

    def __init__(self) -> None:
        super().__init__()
        self.calls: list[float] = []

    async def sleep(self, seconds: float) -> None:
        if self.cancelled:
            raise WorkflowCancelledError(
                code="cancelled",
                message="Workflow was cancelled",
                details={"seconds": seconds},
            )
        self.calls.append(seconds)

    @property
    def total_seconds(self) -> float:
        return sum(self.calls)
