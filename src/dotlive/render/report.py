"""User-visible error reporting shared by the pipeline and the URL state layer."""

from __future__ import annotations

from dotlive.core.diagnostics import DiagnosticEmitter, NullEmitter

from .display import DisplayArea
from .status import ERROR, StatusDisplay


DEFAULT_ERROR_MESSAGE = "An error occurred while processing the graph input."


class ErrorReporter:
    """Show a failure in the display area and flash the status line."""

    def __init__(
        self,
        display: DisplayArea,
        status: StatusDisplay,
        *,
        emitter: DiagnosticEmitter | None = None,
        hide_ms: int = 500,
    ) -> None:
        self.display = display
        self.status = status
        self.emitter = emitter or NullEmitter()
        self.hide_ms = hide_ms

    def report(
        self, exc: BaseException, *, title: str | None = None, notice: str | None = None
    ) -> str:
        """Surface ``exc`` and return the message that was displayed.

        With ``notice``, the message is also kept as a display notice under that key.
        """
        message = str(exc).strip() or DEFAULT_ERROR_MESSAGE
        if title:
            message = f"{title}: {message}"
        if notice:
            self.display.add_notice(notice, message)
        self.display.show_error(message)
        self.status.show(ERROR, self.hide_ms)
        self.emitter.error(message, exc)
        return message


__all__ = ["DEFAULT_ERROR_MESSAGE", "ErrorReporter"]
