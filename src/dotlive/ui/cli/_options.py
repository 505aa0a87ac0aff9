"""Shared Typer option definitions for CLI commands."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer


INPUTS_PANEL = "Input Handling"
RENDERING_PANEL = "Rendering"
OUTPUT_PANEL = "Output"

InputPathArgument = Annotated[
    Path | None,
    typer.Argument(
        metavar="INPUT",
        help="DOT source file. Reads stdin when omitted and --text is not given.",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
        resolve_path=True,
        rich_help_panel=INPUTS_PANEL,
    ),
]

TextOption = Annotated[
    str | None,
    typer.Option(
        "--text",
        help="DOT source passed inline instead of a file.",
        rich_help_panel=INPUTS_PANEL,
    ),
]

EngineOption = Annotated[
    str | None,
    typer.Option(
        "--engine",
        "-K",
        help="Layout engine (circo, dot, fdp, sfdp, neato, osage, patchwork, twopi, nop, nop2).",
        rich_help_panel=RENDERING_PANEL,
    ),
]

FormatOption = Annotated[
    str | None,
    typer.Option(
        "--format",
        "-T",
        help="Output format (svg, png, json, json0, dot_json, xdot_json, xdot, plain, "
        "plain-ext, canon, dot, ps).",
        rich_help_panel=RENDERING_PANEL,
    ),
]

RawOption = Annotated[
    bool,
    typer.Option(
        "--raw",
        help="Emit the SVG markup as produced by the compiler, without viewer adjustments.",
        rich_help_panel=RENDERING_PANEL,
    ),
]

MathOption = Annotated[
    bool | None,
    typer.Option(
        "--math/--no-math",
        help="Typeset $...$, \\(...\\) and \\[...\\] labels. Defaults to the configuration.",
        rich_help_panel=RENDERING_PANEL,
    ),
]

OutputPathOption = Annotated[
    Path | None,
    typer.Option(
        "--output",
        "-o",
        help="Output file. Defaults to the download name for images, stdout for text.",
        dir_okay=False,
        resolve_path=True,
        rich_help_panel=OUTPUT_PANEL,
    ),
]

StdoutOption = Annotated[
    bool,
    typer.Option(
        "--stdout",
        help="Write the artifact to stdout.",
        rich_help_panel=OUTPUT_PANEL,
    ),
]
