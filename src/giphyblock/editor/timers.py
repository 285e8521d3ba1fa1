"""Single-slot cancellable timers for debounced editor actions."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable

log = logging.getLogger(__name__)

Action = Callable[[], Awaitable[None]]


class Debouncer:
    """Runs *action* once *delay* seconds have passed since the last ``schedule()``.

    Re-scheduling cancels the pending wait, never an action that already
    started, so two slow actions can still overlap.  ``close()`` cancels both
    the pending wait and any running actions.
    """

    def __init__(self, delay: float, action: Action, *, name: str = "debounce") -> None:
        self.delay = delay
        self.name = name
        self._action = action
        self._pending: asyncio.Task | None = None
        self._running: set[asyncio.Task] = set()
        self._closed = False

    @property
    def pending(self) -> bool:
        return self._pending is not None and not self._pending.done()

    def schedule(self) -> None:
        if self._closed:
            return
        self.cancel()
        task = asyncio.get_running_loop().create_task(self._wait(), name=f"{self.name}-timer")
        task.add_done_callback(self._running.discard)
        self._pending = task

    def cancel(self) -> None:
        """Drop the pending wait, if any."""
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None

    async def close(self) -> None:
        self._closed = True
        self.cancel()
        tasks = list(self._running)
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)

    async def _wait(self) -> None:
        await asyncio.sleep(self.delay)
        # From here on this task is a running action, out of reach of cancel()
        self._pending = None
        task = asyncio.current_task()
        if task is not None:
            self._running.add(task)
        try:
            await self._action()
        except Exception:
            log.exception("Debounced action %s failed", self.name)
