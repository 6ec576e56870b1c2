"""
Connectivity Monitor.

Process-wide, best-effort network reachability signal. Holds a single
boolean and notifies subscribers on reachable↔unreachable transitions.

Being online is not a promise that a remote call will succeed; the sync
reconciler still handles every per-call failure.

The signal comes either from the embedding application (set_online) or
from periodic probing of the remote service (start/stop), using the
remote client's ping().
"""

import asyncio
import inspect
from collections.abc import Awaitable, Callable
from typing import Any

from notesync.core.logging import get_logger, log_with_source

logger = get_logger(__name__)

Listener = Callable[[bool], Any]
Probe = Callable[[], Awaitable[bool]]


class ConnectivityMonitor:
    """Observable online/offline flag with optional background probing."""

    def __init__(
        self,
        initial: bool = False,
        probe: Probe | None = None,
        interval: float = 15.0,
    ) -> None:
        self._online = initial
        self._probe = probe
        self._interval = interval
        self._listeners: list[Listener] = []
        self._task: asyncio.Task | None = None
        self._listener_tasks: set[asyncio.Task] = set()

    @property
    def online(self) -> bool:
        """Current reachability."""
        return self._online

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Register a transition listener.

        The listener receives the new state. Coroutine listeners are
        scheduled on the running loop.

        Returns:
            Callable that removes the listener
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def set_online(self, value: bool) -> bool:
        """
        Record a reachability signal.

        Returns:
            True if the state changed (and listeners were notified)
        """
        value = bool(value)
        if value == self._online:
            return False

        self._online = value
        log_with_source(
            logger,
            "sync",
            "info",
            "Connectivity changed",
            online=value,
        )
        for listener in list(self._listeners):
            self._notify(listener, value)
        return True

    def _notify(self, listener: Listener, value: bool) -> None:
        try:
            result = listener(value)
        except Exception as e:
            logger.error("Connectivity listener failed", extra={"error": str(e)})
            return
        if inspect.isawaitable(result):
            task = asyncio.ensure_future(result)
            self._listener_tasks.add(task)
            task.add_done_callback(self._listener_done)

    def _listener_done(self, task: asyncio.Task) -> None:
        self._listener_tasks.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.error(
                "Connectivity listener failed",
                extra={"error": str(task.exception())},
            )

    async def probe(self) -> bool:
        """
        Probe the remote service once and record the result.

        A probe that raises counts as offline. Without a probe configured
        the current state is returned unchanged.
        """
        if self._probe is None:
            return self._online
        try:
            reachable = bool(await self._probe())
        except Exception as e:
            logger.debug("Connectivity probe failed", extra={"error": str(e)})
            reachable = False
        self.set_online(reachable)
        return reachable

    async def _run(self) -> None:
        while True:
            await self.probe()
            await asyncio.sleep(self._interval)

    def start(self) -> None:
        """Start periodic probing on the running event loop."""
        if self.running:
            return
        if self._probe is None:
            raise RuntimeError("ConnectivityMonitor.start() needs a probe")
        self._task = asyncio.create_task(self._run(), name="connectivity-monitor")
        logger.info("Connectivity monitor started", extra={"interval": self._interval})

    async def stop(self) -> None:
        """Stop probing and wait for pending listener tasks."""
        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        if self._listener_tasks:
            await asyncio.gather(*self._listener_tasks, return_exceptions=True)
