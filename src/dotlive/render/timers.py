"""Timer seam shared by the debounce scheduler and the status display."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
import logging
from typing import Any, Protocol


logger = logging.getLogger(__name__)


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class Timer(Protocol):
    """Subset of the event loop API used to arm delayed callbacks."""

    def call_later(self, delay: float, callback: Callable[..., Any], *args: Any) -> TimerHandle: ...


class DeferredCall:
    """A ``call_later`` request waiting for an event loop to start."""

    def __init__(self, delay: float, callback: Callable[..., Any], args: tuple[Any, ...]) -> None:
        self.delay = delay
        self.callback = callback
        self.args = args
        self.cancelled = False
        self._handle: asyncio.TimerHandle | None = None

    @property
    def armed(self) -> bool:
        return self._handle is not None

    def arm(self, loop: asyncio.AbstractEventLoop) -> None:
        if self.cancelled or self._handle is not None:
            return
        self._handle = loop.call_later(self.delay, self.callback, *self.args)

    def cancel(self) -> None:
        self.cancelled = True
        if self._handle is not None:
            self._handle.cancel()


class LoopTimer:
    """Timer bound lazily to the running asyncio loop.

    Synchronous callers (an edit or a history step made before any loop runs)
    get a :class:`DeferredCall`; it is armed, timed from that moment, by
    :meth:`resume` or by the next ``call_later`` made inside a running loop.
    """

    def __init__(self) -> None:
        self._deferred: list[DeferredCall] = []

    @property
    def deferred(self) -> list[DeferredCall]:
        return [call for call in self._deferred if not call.cancelled]

    def call_later(self, delay: float, callback: Callable[..., Any], *args: Any) -> TimerHandle:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            call = DeferredCall(delay, callback, args)
            self._deferred.append(call)
            logger.debug("no running loop; deferring %s by %.3fs", callback, delay)
            return call
        self._arm_deferred(loop)
        return loop.call_later(delay, callback, *args)

    def resume(self) -> int:
        """Arm deferred calls on the running loop; returns how many were armed."""
        return self._arm_deferred(asyncio.get_running_loop())

    def _arm_deferred(self, loop: asyncio.AbstractEventLoop) -> int:
        pending = self.deferred
        self._deferred = []
        for call in pending:
            call.arm(loop)
        return len(pending)


__all__ = ["DeferredCall", "LoopTimer", "Timer", "TimerHandle"]
