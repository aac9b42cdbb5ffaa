"""
Debounce Timer

trigger() (re)starts a quiet-period timer; when it expires without
another trigger, the callback runs. A callback that has started is
never cancelled, only the waiting period is.
"""

import asyncio
from typing import Any, Awaitable, Callable, Optional

from fintrack.audit import AuditLogger


class Debouncer:
    """Run an async callback once things have been quiet for `delay` seconds."""

    def __init__(
        self,
        delay: float,
        callback: Callable[[], Awaitable[Any]],
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._delay = delay
        self._callback = callback
        self._audit_logger = audit_logger or AuditLogger()
        self._pending: Optional[asyncio.Task] = None
        self._running: set[asyncio.Task] = set()

    @property
    def delay(self) -> float:
        return self._delay

    @property
    def pending(self) -> bool:
        """True while a timer is waiting to fire."""
        return self._pending is not None and not self._pending.done()

    def trigger(self) -> None:
        """Supersede any waiting timer with a fresh one. Needs a running loop."""
        self.cancel()
        task = asyncio.get_running_loop().create_task(self._wait_then_run())
        self._pending = task

    def cancel(self) -> None:
        """Drop the waiting timer, if any. A running callback is left alone."""
        if self._pending is not None and not self._pending.done():
            self._pending.cancel()
        self._pending = None

    async def _wait_then_run(self) -> None:
        await asyncio.sleep(self._delay)

        # From here on this task is a running callback, not a pending timer
        task = asyncio.current_task()
        if self._pending is task:
            self._pending = None
        if task is not None:
            self._running.add(task)

        try:
            await self._callback()
        except Exception as e:
            self._audit_logger.log_error(
                error_type="debounced_callback_failed",
                error_message=str(e),
            )
        finally:
            if task is not None:
                self._running.discard(task)

    async def drain(self) -> None:
        """Wait for the pending timer (if any) and all running callbacks."""
        while self.pending or self._running:
            tasks = list(self._running)
            if self._pending is not None:
                tasks.append(self._pending)
            await asyncio.gather(*tasks, return_exceptions=True)
