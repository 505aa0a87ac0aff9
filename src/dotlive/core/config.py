"""Configuration models for the render pipeline.

RenderConfig

`debounce_ms` (`int`)
: Quiet period after the last text edit before a render is triggered.

`status_hide_ms` (`int`)
: Delay after which the transient `done`/`error` status text is cleared.

`share_status_ms` (`int`)
: Delay after which the share confirmation status text is cleared.

`device_pixel_ratio` (`float`)
: Pixel density used when rasterizing SVG output to PNG.

`download_stem` (`str`)
: File name stem offered for downloadable artifacts.

`default_engine` / `default_format` (`Engine` / `OutputFormat`)
: Initial selection before URL parameters are applied.

GraphvizConfig

`binary` (`str | None`)
: Explicit path to the `dot` executable. Looked up on `PATH` when omitted.

`timeout` (`float`)
: Seconds before a compiler invocation is abandoned.

ShareConfig

`base_url` (`str`)
: Address used as the base of generated share links when no page address is
  available (CLI usage).

`max_url_length` (`int`)
: Upper bound for a share link. Longer links are reported as compression
  failures.

`codec` (`"lzstring" | "deflate"`)
: Token format of the `compressed` parameter. `lzstring` matches the browser
  editor; `deflate` yields shorter links that only dotlive can open.

MathConfig

`enabled` (`bool`)
: Typeset `$...$`, `\\(...\\)` and `\\[...\\]` labels in SVG output.

`engine` (`str`)
: `matplotlib`, `mathjax` or `none`.

`mathjax_script` (`Path | None`)
: Node script printing `{"svg": ...}` for a TeX expression read on stdin.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
import yaml

from .exceptions import ParameterError
from .options import DEFAULT_ENGINE, DEFAULT_FORMAT, Engine, OutputFormat


CONFIG_ENV_VAR = "DOTLIVE_CONFIG"


class RenderConfig(BaseModel):
    """Timing and presentation settings of the render pipeline."""

    model_config = ConfigDict(extra="forbid")

    debounce_ms: int = Field(default=1500, ge=0)
    status_hide_ms: int = Field(default=500, ge=0)
    share_status_ms: int = Field(default=2000, ge=0)
    device_pixel_ratio: float = Field(default=1.0, gt=0)
    download_stem: str = "graphviz"
    default_engine: Engine = DEFAULT_ENGINE
    default_format: OutputFormat = DEFAULT_FORMAT


class GraphvizConfig(BaseModel):
    """Location and limits of the Graphviz executable."""

    model_config = ConfigDict(extra="forbid")

    binary: str | None = None
    timeout: float = Field(default=30.0, gt=0)


class ShareConfig(BaseModel):
    """Share link generation settings."""

    model_config = ConfigDict(extra="forbid")

    base_url: str = "https://dreampuf.github.io/GraphvizOnline/"
    max_url_length: int = Field(default=2_000_000, gt=0)
    codec: Literal["lzstring", "deflate"] = "lzstring"


class MathConfig(BaseModel):
    """Inline math typesetting settings."""

    model_config = ConfigDict(extra="forbid")

    enabled: bool = True
    engine: Literal["matplotlib", "mathjax", "none"] = "matplotlib"
    mathjax_script: Path | None = None

    @field_validator("mathjax_script")
    @classmethod
    def _expand_script(cls, value: Path | None) -> Path | None:
        return value.expanduser() if value is not None else None


class DotliveConfig(BaseModel):
    """Top-level configuration document."""

    model_config = ConfigDict(extra="forbid")

    render: RenderConfig = Field(default_factory=RenderConfig)
    graphviz: GraphvizConfig = Field(default_factory=GraphvizConfig)
    share: ShareConfig = Field(default_factory=ShareConfig)
    math: MathConfig = Field(default_factory=MathConfig)


def load_config(path: Path | str | None = None) -> DotliveConfig:
    """Load configuration from YAML, falling back to ``$DOTLIVE_CONFIG`` then defaults."""
    if path is None:
        env_path = os.environ.get(CONFIG_ENV_VAR)
        if not env_path:
            return DotliveConfig()
        path = env_path

    config_path = Path(path).expanduser()
    try:
        raw_text = config_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ParameterError(f"Unable to read configuration file '{config_path}': {exc}") from exc

    try:
        payload: Any = yaml.safe_load(raw_text) or {}
    except yaml.YAMLError as exc:
        raise ParameterError(f"Invalid YAML in configuration file '{config_path}'") from exc
    if not isinstance(payload, dict):
        raise ParameterError(f"Configuration file '{config_path}' must contain a mapping")

    try:
        return DotliveConfig.model_validate(payload)
    except ValidationError as exc:
        raise ParameterError(f"Invalid configuration in '{config_path}': {exc}") from exc


__all__ = [
    "CONFIG_ENV_VAR",
    "DotliveConfig",
    "GraphvizConfig",
    "MathConfig",
    "RenderConfig",
    "ShareConfig",
    "load_config",
]
