"""Debounce scheduler coalescing bursts of change notifications."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
import inspect
import logging
from typing import Any

from .timers import LoopTimer, Timer, TimerHandle


logger = logging.getLogger(__name__)

Trigger = Callable[[], Any]

EDIT_CHANNEL = "edit"


class DebounceScheduler:
    """Fire the latest trigger of a channel once its quiet period elapses.

    Every call to :meth:`schedule` cancels the timer previously armed for the
    same channel, so N triggers inside the quiet period yield exactly one call,
    timed from the last trigger.
    """

    def __init__(self, delay: float, *, timer: Timer | None = None) -> None:
        self.delay = delay
        self._timer = timer or LoopTimer()
        self._handles: dict[str, TimerHandle] = {}
        self._triggers: dict[str, Trigger] = {}
        self._tasks: set[asyncio.Future[Any]] = set()

    def schedule(self, trigger: Trigger, *, channel: str = EDIT_CHANNEL) -> None:
        """Record ``trigger`` and (re)arm the channel timer."""
        self.cancel(channel)
        self._triggers[channel] = trigger
        self._handles[channel] = self._timer.call_later(self.delay, self._fire, channel)

    def cancel(self, channel: str = EDIT_CHANNEL) -> bool:
        """Disarm a pending timer, returning True when one was pending."""
        handle = self._handles.pop(channel, None)
        self._triggers.pop(channel, None)
        if handle is None:
            return False
        handle.cancel()
        return True

    def pending(self, channel: str = EDIT_CHANNEL) -> bool:
        return channel in self._handles

    def _fire(self, channel: str) -> None:
        self._handles.pop(channel, None)
        trigger = self._triggers.pop(channel, None)
        if trigger is None:
            return
        logger.debug("debounce channel '%s' fired", channel)
        result = trigger()
        if inspect.isawaitable(result):
            task = asyncio.ensure_future(result)
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)


__all__ = ["EDIT_CHANNEL", "DebounceScheduler", "Trigger"]
