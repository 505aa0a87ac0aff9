"""Implementation of the ``dotlive render`` command."""

from __future__ import annotations

import asyncio
from pathlib import Path

import typer

from dotlive.core.exceptions import DotliveError
from dotlive.core.models import Failure, RenderOutcome
from dotlive.workspace import Workspace

from .._options import (
    EngineOption,
    FormatOption,
    InputPathArgument,
    MathOption,
    OutputPathOption,
    RawOption,
    StdoutOption,
    TextOption,
)
from ..state import emit_error, get_cli_state
from ..utils import apply_selection, artifact_payload, build_workspace, read_source, write_output


async def render_once(workspace: Workspace, source: str) -> RenderOutcome | None:
    """Load ``source`` into the workspace and render it immediately."""
    workspace.edit(source)
    return await workspace.render()


def emit_artifact(workspace: Workspace, *, output: Path | None, stdout: bool) -> None:
    """Write the presented artifact or exit with the reported failure."""
    try:
        data, default_name = artifact_payload(workspace)
    except DotliveError as exc:
        emit_error(str(exc), exception=exc)
        raise typer.Exit(code=1) from exc
    target = write_output(data, output=output, stdout=stdout, default_name=default_name)
    if target is not None:
        get_cli_state().err_console.print(f"[green]Wrote[/] {target}")


def render(
    ctx: typer.Context,
    input_path: InputPathArgument = None,
    text: TextOption = None,
    engine: EngineOption = None,
    output_format: FormatOption = None,
    raw: RawOption = False,
    math: MathOption = None,
    output: OutputPathOption = None,
    stdout: StdoutOption = False,
) -> None:
    """Compile a DOT graph and write the rendered artifact."""
    state = get_cli_state(ctx)
    source = read_source(input_path, text)
    workspace = build_workspace(state, math=math)
    apply_selection(workspace, engine=engine, output_format=output_format, raw=raw)

    outcome = asyncio.run(render_once(workspace, source))
    if outcome is None or isinstance(outcome, Failure):
        raise typer.Exit(code=1)
    emit_artifact(workspace, output=output, stdout=stdout)


__all__ = ["emit_artifact", "render", "render_once"]
