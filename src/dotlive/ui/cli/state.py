"""Per-invocation CLI state: verbosity, configuration, and the stderr console.

Artifacts are the only thing written to stdout; every message produced here
goes to stderr so that ``dotlive render --stdout | ...`` stays pipeable.
"""

from __future__ import annotations

from collections.abc import Mapping
from contextvars import ContextVar
from dataclasses import dataclass, field
from pathlib import Path
import sys
from typing import TYPE_CHECKING, Any

import click
import typer

from dotlive.core.config import DotliveConfig, load_config
from dotlive.core.exceptions import exception_messages


if TYPE_CHECKING:
    from rich.console import Console

__all__ = [
    "CLIState",
    "debug_enabled",
    "emit_error",
    "emit_warning",
    "get_cli_state",
    "render_message",
    "set_cli_state",
]

_STYLES = {"warning": "yellow", "error": "red"}


@dataclass(slots=True)
class CLIState:
    """Options shared by every dotlive subcommand."""

    verbosity: int = 0
    show_tracebacks: bool = False
    config_path: Path | None = None
    events: list[tuple[str, dict[str, Any]]] = field(default_factory=list, init=False)
    _config: DotliveConfig | None = field(default=None, init=False, repr=False)
    _err_console: Console | None = field(default=None, init=False, repr=False)

    @property
    def err_console(self) -> Console:
        """Rich console bound to the current ``sys.stderr``."""
        from rich.console import Console

        # CliRunner swaps sys.stderr per invocation.
        if self._err_console is None or self._err_console.file is not sys.stderr:
            self._err_console = Console(file=sys.stderr, highlight=False)
        return self._err_console

    @property
    def config(self) -> DotliveConfig:
        if self._config is None:
            self._config = load_config(self.config_path)
        return self._config

    @config.setter
    def config(self, value: DotliveConfig) -> None:
        self._config = value

    def record_event(self, name: str, payload: Mapping[str, Any] | None = None) -> None:
        self.events.append((name, dict(payload or {})))

    def consume_events(self, name: str) -> list[dict[str, Any]]:
        """Remove and return the payloads recorded under ``name``, oldest first."""
        matched = [payload for event, payload in self.events if event == name]
        self.events = [entry for entry in self.events if entry[0] != name]
        return matched


_STATE_VAR: ContextVar[CLIState | None] = ContextVar("dotlive_cli_state", default=None)


def get_cli_state(
    ctx: typer.Context | click.Context | None = None,
    *,
    create: bool = True,
) -> CLIState:
    """Return the state attached to ``ctx`` (or the active click context)."""
    if ctx is None:
        ctx = click.get_current_context(silent=True)

    if ctx is not None:
        state = ctx.find_object(CLIState)
        if state is None and create:
            state = ctx.ensure_object(CLIState)
        if state is not None:
            _STATE_VAR.set(state)
            return state

    state = _STATE_VAR.get()
    if state is None:
        if not create:
            raise RuntimeError("CLI state is not initialised for this context.")
        state = CLIState()
        _STATE_VAR.set(state)
    return state


def set_cli_state(
    *,
    ctx: typer.Context | None = None,
    verbosity: int | None = None,
    debug: bool | None = None,
    config_path: Path | None = None,
) -> CLIState:
    """Apply the global options, returning the current state."""
    state = get_cli_state(ctx)
    if verbosity is not None:
        state.verbosity = max(0, verbosity)
    if debug is not None:
        state.show_tracebacks = debug
    if config_path is not None:
        state.config_path = config_path
        state._config = None
    return state


def _details(message: str, exception: BaseException, verbosity: int) -> list[str]:
    chain = exception_messages(exception)
    lines = [entry for entry in chain[:1] if entry not in message]
    lines.append(f"type: {type(exception).__name__}")
    kind = getattr(exception, "kind", None)
    if kind:
        lines.append(f"kind: {kind}")
    if verbosity >= 2 and len(chain) > 1:
        lines.append("caused by:")
        lines.extend(f"  {entry}" for entry in chain[1:])
    return lines


def render_message(
    level: str,
    message: str,
    *,
    exception: BaseException | None = None,
    state: CLIState | None = None,
) -> None:
    """Print ``message`` to stderr; ``-v`` adds exception details."""
    state = state or get_cli_state()

    if level == "info":
        state.err_console.log(message)
        return

    from rich.text import Text

    style = _STYLES.get(level, "yellow")
    text = Text.assemble((f"{level}: ", f"bold {style}"), (message, style))
    if exception is not None and state.verbosity >= 1:
        text.append("\n")
        text.append("\n".join(_details(message, exception, state.verbosity)), style=style)
    state.err_console.print(text)


def emit_warning(message: str, *, exception: BaseException | None = None) -> None:
    render_message("warning", message, exception=exception)


def emit_error(message: str, *, exception: BaseException | None = None) -> None:
    render_message("error", message, exception=exception)


def debug_enabled() -> bool:
    """Whether ``--debug`` asked for full tracebacks."""
    try:
        return get_cli_state(create=False).show_tracebacks
    except RuntimeError:
        return False
