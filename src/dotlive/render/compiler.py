"""Graph compiler seam and the Graphviz command-line implementation."""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
import logging
from pathlib import Path
import shutil
from typing import Protocol, runtime_checkable

from dotlive.core.exceptions import CompileError
from dotlive.core.options import Engine


logger = logging.getLogger(__name__)

DOT_CLI_HINT_PATHS: tuple[Path, ...] = (
    Path("/usr/local/bin/dot"),
    Path("/opt/homebrew/bin/dot"),
    Path("/snap/bin/dot"),
)

_MAX_DETAIL = 480


@runtime_checkable
class GraphCompiler(Protocol):
    """Turns DOT source into SVG markup or a format-specific text payload."""

    async def compile(self, source: str, *, engine: Engine, format: str = "svg") -> str: ...


def _resolve_cli(names: Sequence[str], hints: Sequence[Path]) -> str | None:
    for name in names:
        resolved = shutil.which(name)
        if resolved:
            return resolved
    for candidate in hints:
        if candidate.exists():
            return str(candidate)
    return None


def _trim(detail: str) -> str:
    detail = detail.strip()
    if len(detail) > _MAX_DETAIL:
        return detail[:_MAX_DETAIL] + "..."
    return detail


class GraphvizCompiler:
    """Run ``dot -K<engine> -T<format>`` in a subprocess."""

    def __init__(self, binary: str | None = None, *, timeout: float = 30.0) -> None:
        self._binary = binary
        self.timeout = timeout

    @property
    def binary(self) -> str:
        if self._binary is None:
            resolved = _resolve_cli(["dot"], DOT_CLI_HINT_PATHS)
            if resolved is None:
                raise CompileError(
                    "Graphviz 'dot' executable could not be located. "
                    "Install Graphviz or set graphviz.binary in the configuration."
                )
            self._binary = resolved
        return self._binary

    async def compile(self, source: str, *, engine: Engine, format: str = "svg") -> str:
        command = [self.binary, f"-K{Engine(engine).value}", f"-T{format}"]
        logger.debug("running %s", " ".join(command))
        try:
            process = await asyncio.create_subprocess_exec(
                *command,
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as exc:
            raise CompileError(f"Failed to execute Graphviz: {exc}") from exc

        try:
            stdout, stderr = await asyncio.wait_for(
                process.communicate(source.encode("utf-8")), timeout=self.timeout
            )
        except asyncio.TimeoutError as exc:
            process.kill()
            await process.wait()
            raise CompileError(f"Graphviz timed out after {self.timeout:g}s") from exc

        errors = stderr.decode("utf-8", errors="replace")
        if process.returncode != 0:
            raise CompileError(_trim(errors) or f"Graphviz exited with status {process.returncode}")
        if errors.strip():
            logger.warning("graphviz: %s", _trim(errors))
        return stdout.decode("utf-8", errors="replace")


__all__ = ["DOT_CLI_HINT_PATHS", "GraphCompiler", "GraphvizCompiler"]
