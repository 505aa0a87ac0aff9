"""Workspace diagnostics rendered on the CLI's stderr console."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from dotlive.core.diagnostics import format_event_message

from .state import CLIState, get_cli_state, render_message


class CliEmitter:
    """Print warnings and errors; keep events quiet unless ``-v`` was given."""

    def __init__(self, state: CLIState | None = None) -> None:
        self.state = state or get_cli_state()

    @property
    def debug_enabled(self) -> bool:
        return self.state.show_tracebacks

    def warning(self, message: str, exc: BaseException | None = None) -> None:
        render_message("warning", message, exception=exc, state=self.state)

    def error(self, message: str, exc: BaseException | None = None) -> None:
        render_message("error", message, exception=exc, state=self.state)

    def event(self, name: str, payload: Mapping[str, Any]) -> None:
        self.state.record_event(name, payload)
        if self.state.verbosity < 1:
            return
        message = format_event_message(name, payload)
        if message:
            render_message("info", message, state=self.state)


__all__ = ["CliEmitter"]
