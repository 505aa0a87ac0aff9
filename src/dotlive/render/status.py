"""Transient status text with auto-clear."""

from __future__ import annotations

from .timers import LoopTimer, Timer, TimerHandle


RENDERING = "rendering..."
DONE = "done"
ERROR = "error"


class StatusDisplay:
    """Single status element; a fresh message always cancels a pending clear."""

    def __init__(self, *, timer: Timer | None = None) -> None:
        self._timer = timer or LoopTimer()
        self._handle: TimerHandle | None = None
        self.text = ""

    def show(self, text: str, hide_ms: int = 0) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
        self.text = text
        if hide_ms:
            self._handle = self._timer.call_later(hide_ms / 1000, self._clear)

    def _clear(self) -> None:
        self._handle = None
        self.text = ""


__all__ = ["DONE", "ERROR", "RENDERING", "StatusDisplay"]
