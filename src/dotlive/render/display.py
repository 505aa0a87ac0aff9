"""Display area model holding the single presented artifact."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Union


if TYPE_CHECKING:  # pragma: no cover - type checking only
    from lxml import etree


WORKING = "working"
ERROR = "error"


@dataclass(slots=True)
class Download:
    """Downloadable artifact offered next to the display."""

    href: str
    filename: str


@dataclass(slots=True)
class VectorArtifact:
    root: etree._Element
    viewer: Any = None


@dataclass(slots=True)
class RasterArtifact:
    data_uri: str
    width: int
    height: int
    title: str = "graphviz"


@dataclass(slots=True)
class TextArtifact:
    text: str


Artifact = Union[VectorArtifact, RasterArtifact, TextArtifact]


class DisplaySlot:
    """Container that holds at most one artifact at a time."""

    def __init__(self) -> None:
        self._artifact: Artifact | None = None

    @property
    def artifact(self) -> Artifact | None:
        return self._artifact

    @property
    def empty(self) -> bool:
        return self._artifact is None

    def detach(self) -> Artifact | None:
        previous, self._artifact = self._artifact, None
        return previous

    def attach(self, artifact: Artifact) -> None:
        """Attach ``artifact``, detaching whatever was presented before."""
        self.detach()
        self._artifact = artifact


@dataclass(slots=True)
class DisplayArea:
    """Review panel: slot, error message, CSS-like state classes and download link.

    ``error_text`` belongs to the latest render. ``notices`` hold problems with
    the page address (a bad ``engine`` or ``format``) and outlive renders.
    """

    slot: DisplaySlot = field(default_factory=DisplaySlot)
    classes: set[str] = field(default_factory=set)
    error_text: str = ""
    download: Download | None = None
    raw_enabled: bool = True
    notices: dict[str, str] = field(default_factory=dict)

    @property
    def working(self) -> bool:
        return WORKING in self.classes

    @property
    def failed(self) -> bool:
        return ERROR in self.classes

    def mark_working(self) -> None:
        self.classes.add(WORKING)
        self.classes.discard(ERROR)
        self.error_text = ""

    def mark_idle(self) -> None:
        self.classes.discard(WORKING)

    def show_error(self, message: str) -> None:
        self.classes.discard(WORKING)
        self.classes.add(ERROR)
        self.error_text = message

    def clear_error(self) -> None:
        self.classes.discard(ERROR)
        self.error_text = ""

    def add_notice(self, key: str, message: str) -> None:
        """Keep ``message`` visible across renders until ``key`` is dismissed."""
        self.notices[key] = message

    def dismiss_notice(self, key: str) -> None:
        self.notices.pop(key, None)


__all__ = [
    "Artifact",
    "DisplayArea",
    "DisplaySlot",
    "Download",
    "RasterArtifact",
    "TextArtifact",
    "VectorArtifact",
]
