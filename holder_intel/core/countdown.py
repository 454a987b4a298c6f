"""Countdown shown to users while an analysis is running."""

import asyncio
from typing import Callable, Optional

import structlog

logger = structlog.get_logger(__name__)


def format_countdown(seconds: int) -> str:
    """Render seconds as m:ss."""
    minutes, secs = divmod(max(seconds, 0), 60)
    return f"{minutes}:{secs:02d}"


class CountdownTimer:
    """
    Periodic estimate that ticks independently of network progress.

    Ticks once per interval down to 0, then goes quiet even if the run
    outlasts the estimate.

    The tick task must be stopped on every terminal state of a run.
    """

    def __init__(self, seconds: int, interval: float = 1.0):
        self.initial = seconds
        self.interval = interval
        self.remaining = seconds
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self, on_tick: Callable[[int], None]) -> None:
        """Reset the countdown and start ticking on the running event loop."""
        self.stop()
        self.remaining = self.initial
        self._task = asyncio.get_running_loop().create_task(self._run(on_tick))

    def stop(self) -> None:
        if self._task is not None:
            if not self._task.done():
                self._task.cancel()
            self._task = None

    async def _run(self, on_tick: Callable[[int], None]) -> None:
        while self.remaining > 0:
            await asyncio.sleep(self.interval)
            self.remaining -= 1
            on_tick(self.remaining)
