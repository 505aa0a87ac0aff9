"""Implementation of the ``dotlive watch`` command."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Annotated

import typer

from dotlive.core.models import RenderRequest
from dotlive.render.display import Artifact
from dotlive.workspace import Workspace

from .._options import (
    INPUTS_PANEL,
    EngineOption,
    FormatOption,
    MathOption,
    RawOption,
)
from ..state import get_cli_state
from ..utils import apply_selection, artifact_payload, build_workspace, write_output


logger = logging.getLogger(__name__)


def _mtime(path: Path) -> int | None:
    try:
        return path.stat().st_mtime_ns
    except OSError:
        return None


async def watch_file(
    workspace: Workspace,
    source: Path,
    output: Path,
    *,
    interval: float = 0.5,
    stop: asyncio.Event | None = None,
    max_renders: int | None = None,
) -> int:
    """Re-render ``source`` into ``output`` after each debounced change.

    Returns the number of successful renders written before ``stop`` was set or
    ``max_renders`` was reached.
    """
    stop = stop or asyncio.Event()
    written = 0

    def _write(request: RenderRequest, artifact: Artifact) -> None:
        nonlocal written
        data, _ = artifact_payload(workspace)
        write_output(data, output=output, stdout=False, default_name=None)
        written += 1
        logger.info("rendered %s -> %s", source, output)
        if max_renders is not None and written >= max_renders:
            stop.set()

    workspace.on_rendered(_write)
    workspace.edit(source.read_text(encoding="utf-8"))
    await workspace.render()

    last_seen = _mtime(source)
    while not stop.is_set():
        try:
            await asyncio.wait_for(stop.wait(), timeout=interval)
        except asyncio.TimeoutError:
            pass
        current = _mtime(source)
        if current is None or current == last_seen:
            continue
        last_seen = current
        workspace.edit(source.read_text(encoding="utf-8"))
    workspace.close()
    return written


def watch(
    ctx: typer.Context,
    input_path: Annotated[
        Path,
        typer.Argument(
            metavar="INPUT",
            help="DOT source file to watch.",
            exists=True,
            dir_okay=False,
            readable=True,
            resolve_path=True,
            rich_help_panel=INPUTS_PANEL,
        ),
    ],
    output: Annotated[
        Path,
        typer.Option("--output", "-o", help="File rewritten after every render.", dir_okay=False),
    ],
    engine: EngineOption = None,
    output_format: FormatOption = None,
    raw: RawOption = False,
    math: MathOption = None,
    interval: Annotated[
        float,
        typer.Option("--interval", min=0.05, help="Seconds between file checks."),
    ] = 0.5,
) -> None:
    """Watch a DOT file and re-render it after edits settle."""
    state = get_cli_state(ctx)
    workspace = build_workspace(state, math=math)
    apply_selection(workspace, engine=engine, output_format=output_format, raw=raw)
    state.err_console.print(f"Watching [bold]{input_path}[/] (Ctrl+C to stop)")
    try:
        asyncio.run(watch_file(workspace, input_path, output, interval=interval))
    except KeyboardInterrupt:
        raise typer.Exit(code=0) from None


__all__ = ["watch", "watch_file"]
