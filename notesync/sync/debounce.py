"""
Debounce Scheduler.

Coalesces a burst of "intent to save" events into one call of the save
action, fired `delay` seconds after the most recent event and carrying
only that event's data. Intermediate values are dropped.

cancel() discards a pending invocation so nothing stale fires after the
edited note is closed or switched. An action that has already started is
left to finish.
"""

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any, Generic, TypeVar

from notesync.core.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


class DebounceScheduler(Generic[T]):
    """Single-slot debounced invoker for an async action."""

    def __init__(self, delay: float, action: Callable[[T], Awaitable[Any]]) -> None:
        if delay < 0:
            raise ValueError("delay must be >= 0")
        self.delay = delay
        self._action = action
        self._timer: asyncio.Task | None = None
        self._pending_value: T | None = None
        self._has_pending = False
        self._running: asyncio.Task | None = None
        self.last_result: Any = None
        self.last_error: BaseException | None = None

    @property
    def pending(self) -> bool:
        """True while an invocation is scheduled but has not started."""
        return self._has_pending

    def schedule(self, value: T) -> None:
        """(Re)arm the timer with the latest value."""
        self._cancel_timer()
        self._pending_value = value
        self._has_pending = True
        self._timer = asyncio.create_task(self._fire_later(), name="debounce-timer")

    def cancel(self) -> bool:
        """
        Drop the pending invocation, if any.

        Returns:
            True if something was pending
        """
        had_pending = self._has_pending
        self._cancel_timer()
        self._clear_pending()
        return had_pending

    async def flush(self) -> Any:
        """
        Fire the pending invocation now and return its result.

        Unlike timer-driven invocations, an exception raised by the action
        is re-raised to the caller.
        """
        if not self._has_pending:
            await self.wait()
            return None
        self._cancel_timer()
        result = await self._fire()
        if self.last_error is not None:
            raise self.last_error
        return result

    async def wait(self) -> None:
        """Wait for an action that is already running."""
        if self._running is not None:
            await asyncio.shield(self._running)

    def _cancel_timer(self) -> None:
        if self._timer is not None and not self._timer.done():
            self._timer.cancel()
        self._timer = None

    def _clear_pending(self) -> None:
        self._pending_value = None
        self._has_pending = False

    async def _fire_later(self) -> None:
        await asyncio.sleep(self.delay)
        self._timer = None
        await self._fire()

    async def _fire(self) -> Any:
        value = self._pending_value
        self._clear_pending()
        # The action runs in its own task so cancel() on a newer timer
        # cannot interrupt a save that has already started.
        self._running = asyncio.ensure_future(self._invoke(value))
        try:
            return await asyncio.shield(self._running)
        finally:
            if self._running is not None and self._running.done():
                self._running = None

    async def _invoke(self, value: Any) -> Any:
        try:
            self.last_result = await self._action(value)
            self.last_error = None
            return self.last_result
        except Exception as e:
            self.last_error = e
            logger.error("Debounced action failed", extra={"error": str(e)})
            return None
