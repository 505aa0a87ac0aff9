"""In-memory text source with change notifications."""

from __future__ import annotations

from collections.abc import Callable
import logging
from typing import Protocol, runtime_checkable


logger = logging.getLogger(__name__)

ChangeListener = Callable[[str], object]


@runtime_checkable
class TextSource(Protocol):
    """Provider of the current document text."""

    def get_text(self) -> str: ...

    def set_text(self, text: str) -> None: ...

    def on_change(self, listener: ChangeListener) -> None: ...

    def remove_listener(self, listener: ChangeListener) -> None: ...


class DocumentBuffer:
    """Holds the graph source and notifies listeners whenever it changes."""

    def __init__(self, text: str = "") -> None:
        self._text = text
        self._listeners: list[ChangeListener] = []

    def get_text(self) -> str:
        return self._text

    def set_text(self, text: str) -> None:
        """Replace the document and notify listeners when the content differs."""
        if text == self._text:
            return
        self._text = text
        for listener in list(self._listeners):
            listener(text)

    def on_change(self, listener: ChangeListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: ChangeListener) -> None:
        try:
            self._listeners.remove(listener)
        except ValueError:
            logger.debug("listener %r was not registered", listener)


__all__ = ["ChangeListener", "DocumentBuffer", "TextSource"]
