"""Value objects flowing through the render pipeline and the URL state layer.

RenderRequest
: Immutable snapshot of the editing state captured when a render is
  triggered. The pipeline stamps it with a sequence number at submission so
  stale completions can be recognised.

RenderOutcome
: Tagged union of `VectorImage`, `TextPayload` and `Failure`. Exactly one
  outcome is presented per render.

ShareState / HistoryEntry
: The two address-bar channels. Raw mode is a local display preference and is
  deliberately absent from both.

MathSpan
: A text node holding delimited TeX, discovered and consumed within a single
  typesetting pass.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import TYPE_CHECKING, Any, Union

from .options import (
    DEFAULT_ENGINE,
    DEFAULT_FORMAT,
    Engine,
    OutputFormat,
    parse_engine,
    parse_format,
)


if TYPE_CHECKING:  # pragma: no cover - type checking only
    from lxml import etree


class FailureKind(str, Enum):
    """Categories of user-visible failures."""

    COMPILE = "compile"
    MARKUP = "markup"
    PARAMETER = "parameter"
    FETCH = "fetch"
    COMPRESSION = "compression"
    CONVERSION = "conversion"
    INTERNAL = "internal"


@dataclass(frozen=True, slots=True)
class RenderRequest:
    """Snapshot of the source and selection at trigger time."""

    source_text: str
    engine: Engine
    format: OutputFormat
    raw_mode: bool = False
    sequence: int = 0

    def stamped(self, sequence: int) -> RenderRequest:
        """Return a copy carrying the submission sequence number."""
        return replace(self, sequence=sequence)


@dataclass(frozen=True, slots=True)
class VectorImage:
    """Parsed SVG document produced by the compiler."""

    root: etree._Element


@dataclass(frozen=True, slots=True)
class TextPayload:
    """Native text output of a non-vector format."""

    text: str


@dataclass(frozen=True, slots=True)
class Failure:
    """Failure raised anywhere between compilation and presentation."""

    kind: FailureKind
    message: str


RenderOutcome = Union[VectorImage, TextPayload, Failure]


@dataclass(slots=True)
class Selection:
    """Current control-surface selection; values are validated on every change."""

    engine: Engine = DEFAULT_ENGINE
    format: OutputFormat = DEFAULT_FORMAT
    raw_mode: bool = False

    def select_engine(self, value: object) -> Engine:
        self.engine = parse_engine(value)
        return self.engine

    def select_format(self, value: object) -> OutputFormat:
        self.format = parse_format(value)
        return self.format

    def request(self, source_text: str) -> RenderRequest:
        return RenderRequest(source_text, self.engine, self.format, self.raw_mode)


@dataclass(frozen=True, slots=True)
class ShareState:
    """Everything a share link needs to rebuild the editing state."""

    compressed_content: str
    engine: Engine
    format: OutputFormat

    def query_items(self) -> list[tuple[str, str]]:
        return [
            ("compressed", self.compressed_content),
            ("engine", self.engine.value),
            ("format", self.format.value),
        ]


@dataclass(frozen=True, slots=True)
class HistoryEntry:
    """State attached to a pushed history step; ``content`` is percent-encoded."""

    content: str
    engine: str

    def as_state(self) -> dict[str, str]:
        return {"content": self.content, "engine": self.engine}

    @classmethod
    def from_state(cls, state: Any) -> HistoryEntry | None:
        """Rebuild an entry from popstate data, requiring both fields."""
        if not isinstance(state, dict):
            return None
        content = state.get("content")
        engine = state.get("engine")
        if content is None or engine is None:
            return None
        return cls(content=str(content), engine=str(engine))


@dataclass(frozen=True, slots=True)
class BoundingBox:
    """Axis-aligned rectangle in the image's user coordinate space."""

    x: float
    y: float
    width: float
    height: float

    @property
    def center(self) -> tuple[float, float]:
        return self.x + self.width / 2, self.y + self.height / 2


@dataclass(slots=True)
class MathSpan:
    """Text node carrying delimited TeX together with its original footprint."""

    node: etree._Element
    tex: str
    box: BoundingBox


__all__ = [
    "BoundingBox",
    "Failure",
    "FailureKind",
    "HistoryEntry",
    "MathSpan",
    "RenderOutcome",
    "RenderRequest",
    "Selection",
    "ShareState",
    "TextPayload",
    "VectorImage",
]
