"""Implementation of the ``dotlive open`` command."""

from __future__ import annotations

import asyncio
from typing import Annotated

import typer

from dotlive.state.sync import StartupSource
from dotlive.workspace import Workspace

from .._options import MathOption, OutputPathOption, StdoutOption
from ..state import get_cli_state
from ..utils import build_workspace
from .render import emit_artifact


async def open_link(workspace: Workspace, url: str) -> str:
    """Resolve ``url`` like a page load, rendering whatever it provides."""
    branch = await workspace.start(url)
    if workspace.scheduler.pending():
        await workspace.render()
    return branch


def open_url(
    ctx: typer.Context,
    url: Annotated[str, typer.Argument(help="Share link or page address to open.")],
    math: MathOption = None,
    output: OutputPathOption = None,
    stdout: StdoutOption = False,
) -> None:
    """Load a share link (raw, compressed, url or fragment) and write the result."""
    state = get_cli_state(ctx)
    workspace = build_workspace(state, math=math)

    branch = asyncio.run(open_link(workspace, url))
    if branch == StartupSource.EMPTY:
        raise typer.BadParameter("The address carries no graph source.")
    if workspace.artifact is None or workspace.display.failed:
        raise typer.Exit(code=1)
    if workspace.presentation:
        state.record_event("presentation", {"url": url})
    emit_artifact(workspace, output=output, stdout=stdout)


__all__ = ["open_link", "open_url"]
