"""Auxiliary helpers used by CLI commands."""

from __future__ import annotations

import base64
from pathlib import Path
from typing import Any

import typer

from dotlive.core.exceptions import ConversionError, ParameterError
from dotlive.core.urls import decode_uri_component
from dotlive.render.display import TextArtifact
from dotlive.workspace import Workspace

from .diagnostics import CliEmitter
from .state import CLIState


def read_source(input_path: Path | None, text: str | None) -> str:
    """Return DOT source from ``--text``, a file, or stdin, in that order."""
    if text is not None:
        return text
    if input_path is not None:
        try:
            return input_path.read_text(encoding="utf-8")
        except OSError as exc:
            raise typer.BadParameter(f"Unable to read '{input_path}': {exc}") from exc
    return typer.get_text_stream("stdin").read()


def build_workspace(
    state: CLIState,
    *,
    math: bool | None = None,
    base_url: str | None = None,
    **kwargs: Any,
) -> Workspace:
    """Create a workspace from the CLI configuration and overrides."""
    config = state.config
    if math is not None:
        config = config.model_copy(
            update={"math": config.math.model_copy(update={"enabled": math})}
        )
    if base_url is not None:
        config = config.model_copy(
            update={"share": config.share.model_copy(update={"base_url": base_url})}
        )
    return Workspace.from_config(config, emitter=CliEmitter(state), **kwargs)


def apply_selection(
    workspace: Workspace,
    *,
    engine: str | None = None,
    output_format: str | None = None,
    raw: bool = False,
) -> None:
    """Apply command-line selections, turning invalid values into usage errors."""
    selection = workspace.selection
    try:
        if engine is not None:
            selection.select_engine(engine)
        if output_format is not None:
            selection.select_format(output_format)
    except ParameterError as exc:
        raise typer.BadParameter(str(exc)) from exc
    if raw and selection.format.value != "svg":
        raise typer.BadParameter("--raw is only available for the 'svg' format.")
    selection.raw_mode = raw


def decode_data_uri(href: str) -> bytes:
    """Decode ``data:`` URIs produced for downloads (base64 or percent-encoded)."""
    header, sep, payload = href.partition(",")
    if not sep or not header.startswith("data:"):
        raise ConversionError(f"Unsupported download reference: {href[:32]}")
    if header.endswith(";base64"):
        return base64.b64decode(payload)
    return decode_uri_component(payload).encode("utf-8")


def artifact_payload(workspace: Workspace) -> tuple[bytes, str | None]:
    """Return the presented artifact as bytes plus its download file name."""
    download = workspace.display.download
    if download is not None:
        return decode_data_uri(download.href), download.filename
    artifact = workspace.artifact
    if isinstance(artifact, TextArtifact):
        return artifact.text.encode("utf-8"), None
    raise ConversionError("Nothing was rendered.")


def write_output(
    data: bytes,
    *,
    output: Path | None,
    stdout: bool,
    default_name: str | None,
) -> Path | None:
    """Persist ``data`` and return the written path, or ``None`` for stdout."""
    target = output
    if target is None and not stdout and default_name is not None:
        target = Path.cwd() / default_name
    if target is None:
        stream = typer.get_binary_stream("stdout")
        stream.write(data)
        if default_name is None and not data.endswith(b"\n"):
            stream.write(b"\n")
        stream.flush()
        return None
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(data)
    except OSError as exc:  # pragma: no cover - filesystem errors
        raise OSError(f"Failed to write output to '{target}': {exc}") from exc
    return target


__all__ = [
    "apply_selection",
    "artifact_payload",
    "build_workspace",
    "decode_data_uri",
    "read_source",
    "write_output",
]
