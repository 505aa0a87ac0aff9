"""SVG to PNG rasterization through CairoSVG."""

from __future__ import annotations

import asyncio
import base64
from dataclasses import dataclass
import logging
from typing import Any

from dotlive.core.exceptions import ConversionError
from dotlive.core.svg import intrinsic_size, parse_markup


logger = logging.getLogger(__name__)


def _cairo_dependency_hint() -> str:
    return (
        "CairoSVG requires the system cairo library (package: libcairo2). "
        "Install it via your package manager to enable PNG output."
    )


@dataclass(frozen=True, slots=True)
class RasterImage:
    """PNG bytes plus the display size (intrinsic) and pixel size (scaled)."""

    data: bytes
    width: int
    height: int
    pixel_width: int
    pixel_height: int

    @property
    def data_uri(self) -> str:
        return "data:image/png;base64," + base64.b64encode(self.data).decode("ascii")


def rasterize(markup: str, *, scale: float = 1.0, emitter: Any = None) -> RasterImage:
    """Draw ``markup`` onto a canvas sized to its intrinsic dimensions times ``scale``."""
    if scale <= 0:
        raise ConversionError(f"Pixel ratio must be positive, got {scale}")
    width, height = intrinsic_size(parse_markup(markup))
    display_width = max(1, round(width))
    display_height = max(1, round(height))
    pixel_width = max(1, round(display_width * scale))
    pixel_height = max(1, round(display_height * scale))

    try:
        import cairosvg  # type: ignore[import]
    except ImportError as exc:  # pragma: no cover - optional dependency
        msg = "cairosvg is required to produce PNG output. Install 'cairosvg'."
        raise ConversionError(msg) from exc

    try:
        data = cairosvg.svg2png(
            bytestring=markup.encode("utf-8"),
            output_width=pixel_width,
            output_height=pixel_height,
        )
    except OSError as exc:
        hint = _cairo_dependency_hint()
        if emitter is not None:
            emitter.warning(hint)
        raise ConversionError(f"Failed to rasterize SVG with CairoSVG: {exc}. {hint}") from exc
    except Exception as exc:
        raise ConversionError(f"Failed to rasterize SVG with CairoSVG: {exc}") from exc

    logger.debug("rasterized %sx%s at x%s", display_width, display_height, scale)
    return RasterImage(
        data=bytes(data),
        width=display_width,
        height=display_height,
        pixel_width=pixel_width,
        pixel_height=pixel_height,
    )


async def rasterize_async(markup: str, *, scale: float = 1.0, emitter: Any = None) -> RasterImage:
    return await asyncio.to_thread(rasterize, markup, scale=scale, emitter=emitter)


__all__ = ["RasterImage", "rasterize", "rasterize_async"]
