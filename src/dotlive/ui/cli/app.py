"""Typer application wiring for the dotlive CLI."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer

from dotlive.core.exceptions import DotliveError
from dotlive.version import get_version

from .commands import open_url, render, share, watch
from .state import debug_enabled, emit_error, get_cli_state, set_cli_state


DIAGNOSTICS_PANEL = "Diagnostics"

app = typer.Typer(
    help="Render Graphviz DOT graphs and build shareable editor links.",
    context_settings={"help_option_names": ["--help"]},
    no_args_is_help=True,
)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"dotlive {get_version()}")
        raise typer.Exit()


@app.callback()
def configure(
    ctx: typer.Context,
    verbose: Annotated[
        int,
        typer.Option(
            "--verbose",
            "-v",
            count=True,
            help="Increase CLI verbosity. Combine multiple times for additional diagnostics.",
            rich_help_panel=DIAGNOSTICS_PANEL,
        ),
    ] = 0,
    debug: Annotated[
        bool,
        typer.Option(
            "--debug",
            help="Show full tracebacks when an unexpected error occurs.",
            rich_help_panel=DIAGNOSTICS_PANEL,
        ),
    ] = False,
    config: Annotated[
        Path | None,
        typer.Option(
            "--config",
            help="YAML configuration file (defaults to $DOTLIVE_CONFIG).",
            dir_okay=False,
            rich_help_panel=DIAGNOSTICS_PANEL,
        ),
    ] = None,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            callback=_version_callback,
            is_eager=True,
            help="Print the version and exit.",
        ),
    ] = False,
) -> None:
    """Global options shared by every command."""
    state = set_cli_state(ctx=ctx, verbosity=verbose, debug=debug, config_path=config)
    try:
        _ = state.config
    except DotliveError as exc:
        emit_error(str(exc), exception=exc)
        raise typer.Exit(code=1) from exc


app.command("render")(render)
app.command("share")(share)
app.command("open")(open_url)
app.command("watch")(watch)


def main() -> None:
    """Entry point compatible with console scripts."""
    try:
        app()
    except typer.Exit:
        raise
    except KeyboardInterrupt as exc:
        if debug_enabled():
            raise
        emit_error("Operation cancelled by user.", exception=exc)
        raise typer.Exit(code=1) from exc
    except SystemExit:
        raise
    except Exception as exc:  # pragma: no cover
        state = get_cli_state()
        if state.show_tracebacks:
            from rich.traceback import Traceback

            tb = Traceback.from_exception(
                type(exc),
                exc,
                exc.__traceback__,
                show_locals=state.verbosity >= 2,
            )
            state.err_console.print(tb)
        else:
            emit_error(str(exc), exception=exc)
        raise typer.Exit(code=1) from exc


__all__ = ["app", "main"]
