"""Implementation of the ``dotlive share`` command."""

from __future__ import annotations

import asyncio
from typing import Annotated

import typer

from dotlive.workspace import Workspace

from .._options import OUTPUT_PANEL, EngineOption, FormatOption, InputPathArgument, TextOption
from ..state import get_cli_state
from ..utils import apply_selection, build_workspace, read_source


async def share_link(workspace: Workspace, source: str) -> str | None:
    workspace.edit(source)
    # Sharing never renders; drop the debounced render armed by the edit.
    workspace.scheduler.cancel()
    return workspace.share()


def share(
    ctx: typer.Context,
    input_path: InputPathArgument = None,
    text: TextOption = None,
    engine: EngineOption = None,
    output_format: FormatOption = None,
    base_url: Annotated[
        str | None,
        typer.Option(
            "--base-url",
            help="Page address the share link points to.",
            rich_help_panel=OUTPUT_PANEL,
        ),
    ] = None,
) -> None:
    """Print a share link carrying the compressed source, engine and format."""
    state = get_cli_state(ctx)
    source = read_source(input_path, text)
    workspace = build_workspace(state, math=False, base_url=base_url)
    apply_selection(workspace, engine=engine, output_format=output_format)

    url = asyncio.run(share_link(workspace, source))
    if url is None:
        raise typer.Exit(code=1)
    typer.echo(url)


__all__ = ["share", "share_link"]
