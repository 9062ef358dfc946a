"""
Single-slot, trailing-edge debounce scheduler.

The scheduler is the only mutual exclusion the autosave pipeline needs:

- at most one job is *pending* (``schedule`` cancels the previous timer, so
  only the last value ever reaches the store);
- at most one job is *running*; a timer that fires while the previous job is
  still in flight waits for it before starting.

``sleep`` is injectable so tests can drive the timer with a simulated clock
instead of real time.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable

Sleep = Callable[[float], Awaitable[None]]
Job = Callable[[], Awaitable[None]]


class DebounceScheduler:
    """Cancel-and-reschedule timer that runs at most one job at a time."""

    def __init__(self, delay_seconds: float, *, sleep: Sleep = asyncio.sleep) -> None:
        self.delay_seconds = delay_seconds
        self._sleep = sleep
        self._job: Job | None = None
        self._timer: asyncio.Task[None] | None = None
        self._running: asyncio.Task[None] | None = None

    @property
    def pending(self) -> bool:
        """A job is waiting for its timer (or for the previous job)."""
        return self._timer is not None and not self._timer.done()

    @property
    def running(self) -> bool:
        """A job is in flight."""
        return self._running is not None and not self._running.done()

    def schedule(self, job: Job) -> None:
        """Replace any pending job with ``job`` and restart the timer.

        Must be called from inside a running event loop.
        """
        self.cancel()
        self._job = job
        self._timer = asyncio.get_running_loop().create_task(self._fire_later())

    def cancel(self) -> None:
        """Drop the pending job. A job already in flight is not interrupted."""
        if self._timer is not None and not self._timer.done():
            self._timer.cancel()
        self._timer = None
        self._job = None

    async def flush(self) -> None:
        """Start the pending job now, then wait until nothing is in flight."""
        timer = self._timer
        if timer is not None and not timer.done():
            timer.cancel()
            self._timer = None
            await self._start_job()
        await self._wait_running()

    async def wait_idle(self) -> None:
        """Wait until no job is pending or running (timers fire normally)."""
        while True:
            tasks = {t for t in (self._timer, self._running) if t is not None and not t.done()}
            if not tasks:
                return
            await asyncio.wait(tasks)

    async def close(self) -> None:
        """Cancel the pending job and let an in-flight one settle."""
        self.cancel()
        await self._wait_running()

    # ------------------------------- Internals ------------------------------

    async def _fire_later(self) -> None:
        await self._sleep(self.delay_seconds)
        await self._start_job()

    async def _start_job(self) -> None:
        await self._wait_running()
        job, self._job = self._job, None
        if job is None:
            return
        self._running = asyncio.get_running_loop().create_task(job())

    async def _wait_running(self) -> None:
        while self._running is not None and not self._running.done():
            await asyncio.wait({self._running})


__all__ = ["DebounceScheduler", "Job", "Sleep"]
