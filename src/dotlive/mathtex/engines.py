"""TeX to SVG conversion backends."""

from __future__ import annotations

import asyncio
import io
import json
import logging
from pathlib import Path
import shutil
from typing import Protocol, runtime_checkable

from dotlive.core.config import MathConfig
from dotlive.core.exceptions import ConversionError


logger = logging.getLogger(__name__)

MATH_FONT_SIZE = 12.0


@runtime_checkable
class MathEngine(Protocol):
    """Converts a TeX expression into standalone SVG markup."""

    async def ready(self) -> bool: ...

    async def tex_to_svg(self, tex: str) -> str: ...


class MatplotlibMathEngine:
    """Render expressions with matplotlib's built-in mathtext parser."""

    def __init__(self, *, font_size: float = MATH_FONT_SIZE, fontset: str = "cm") -> None:
        self.font_size = font_size
        self.fontset = fontset

    async def ready(self) -> bool:
        try:
            import matplotlib  # noqa: F401
        except ImportError:
            logger.debug("matplotlib is not installed; math labels stay as text")
            return False
        return True

    async def tex_to_svg(self, tex: str) -> str:
        return await asyncio.to_thread(self._render, tex)

    def _render(self, tex: str) -> str:
        try:
            from matplotlib.figure import Figure
        except ImportError as exc:
            raise ConversionError(
                "matplotlib is required for math typesetting. Install 'dotlive[math]'."
            ) from exc

        figure = Figure()
        figure.text(0, 0, f"${tex}$", fontsize=self.font_size, math_fontfamily=self.fontset)
        buffer = io.StringIO()
        try:
            figure.savefig(
                buffer, format="svg", bbox_inches="tight", pad_inches=0, transparent=True
            )
        except ValueError as exc:
            raise ConversionError(f"Invalid TeX expression '{tex}': {exc}") from exc
        return buffer.getvalue()


class MathJaxNodeEngine:
    """Render expressions through a Node.js MathJax script printing ``{"svg": ...}``."""

    def __init__(self, script: Path, *, node: str = "node", timeout: float = 30.0) -> None:
        self.script = Path(script)
        self.node = node
        self.timeout = timeout

    async def ready(self) -> bool:
        if shutil.which(self.node) is None:
            logger.debug("node executable '%s' not found", self.node)
            return False
        return self.script.is_file()

    async def tex_to_svg(self, tex: str) -> str:
        command = [self.node, str(self.script), "-"]
        try:
            process = await asyncio.create_subprocess_exec(
                *command,
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as exc:
            raise ConversionError(f"Failed to execute MathJax: {exc}") from exc
        try:
            stdout, stderr = await asyncio.wait_for(
                process.communicate(tex.strip().encode("utf-8")), timeout=self.timeout
            )
        except asyncio.TimeoutError as exc:
            process.kill()
            await process.wait()
            raise ConversionError(f"MathJax timed out after {self.timeout:g}s") from exc

        if process.returncode != 0:
            detail = stderr.decode("utf-8", errors="replace").strip()
            raise ConversionError(detail or f"MathJax exited with status {process.returncode}")
        try:
            payload = json.loads(stdout.decode("utf-8"))
        except json.JSONDecodeError as exc:
            raise ConversionError("Failed to parse MathJax output") from exc
        svg = payload.get("svg") if isinstance(payload, dict) else None
        if not isinstance(svg, str) or not svg.strip():
            raise ConversionError("MathJax output did not contain SVG markup")
        return svg.strip()


def create_math_engine(config: MathConfig) -> MathEngine | None:
    """Build the engine selected in ``config``, or ``None`` when disabled."""
    if not config.enabled or config.engine == "none":
        return None
    if config.engine == "mathjax":
        if config.mathjax_script is None:
            raise ConversionError("math.mathjax_script must be set to use the MathJax engine")
        return MathJaxNodeEngine(config.mathjax_script)
    return MatplotlibMathEngine()


__all__ = [
    "MATH_FONT_SIZE",
    "MathEngine",
    "MathJaxNodeEngine",
    "MatplotlibMathEngine",
    "create_math_engine",
]
