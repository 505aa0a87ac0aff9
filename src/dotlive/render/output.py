"""Format-specific presentation of render outcomes into the display slot."""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Any, Protocol, runtime_checkable

from lxml import etree

from dotlive.core.diagnostics import DiagnosticEmitter, NullEmitter
from dotlive.core.exceptions import ConversionError
from dotlive.core.models import Failure, RenderOutcome, RenderRequest, TextPayload, VectorImage
from dotlive.core.options import OutputFormat
from dotlive.core.svg import fmt, intrinsic_size, serialize, view_box
from dotlive.core.urls import encode_uri_component

from .display import Artifact, DisplayArea, Download, RasterArtifact, TextArtifact, VectorArtifact
from .raster import rasterize_async


logger = logging.getLogger(__name__)

VECTOR_BRANCH = "vector"
RASTER_BRANCH = "raster"
TEXT_BRANCH = "text"


@runtime_checkable
class ViewerHandle(Protocol):
    def resize(self) -> None: ...

    def fit(self) -> None: ...

    def center(self) -> None: ...


@runtime_checkable
class ViewerControl(Protocol):
    """Pan/zoom viewer that takes ownership of an attached SVG root."""

    def attach(
        self,
        root: etree._Element,
        *,
        zoom_enabled: bool = True,
        control_icons: bool = True,
        fit: bool = True,
        center: bool = True,
    ) -> ViewerHandle: ...


@dataclass(slots=True)
class FitViewerHandle:
    """Keeps an SVG root filling its container, scaled to fit and centered."""

    root: etree._Element
    zoom_enabled: bool = True
    control_icons: bool = True

    def resize(self) -> None:
        if view_box(self.root) is None:
            width, height = intrinsic_size(self.root)
            self.root.set("viewBox", f"0 0 {fmt(width)} {fmt(height)}")
        self.root.set("width", "100%")
        self.root.set("height", "100%")

    def fit(self) -> None:
        align = self.root.get("preserveAspectRatio", "xMidYMid meet").split()[0]
        self.root.set("preserveAspectRatio", f"{align} meet")

    def center(self) -> None:
        current = self.root.get("preserveAspectRatio", "xMidYMid meet").split()
        mode = current[1] if len(current) > 1 else "meet"
        self.root.set("preserveAspectRatio", f"xMidYMid {mode}")


class FitViewer:
    """Viewer control that fits and centers the image inside its container."""

    def attach(
        self,
        root: etree._Element,
        *,
        zoom_enabled: bool = True,
        control_icons: bool = True,
        fit: bool = True,
        center: bool = True,
    ) -> FitViewerHandle:
        handle = FitViewerHandle(root, zoom_enabled=zoom_enabled, control_icons=control_icons)
        handle.resize()
        if fit:
            handle.fit()
        if center:
            handle.center()
        return handle


def branch_for(request: RenderRequest) -> str:
    """Pick the single presentation branch for a request."""
    if request.format is OutputFormat.PNG:
        return RASTER_BRANCH
    if request.format is OutputFormat.SVG and not request.raw_mode:
        return VECTOR_BRANCH
    return TEXT_BRANCH


def svg_data_uri(markup: str) -> str:
    return "data:image/svg+xml;charset=utf-8," + encode_uri_component(markup)


class OutputRenderer:
    """Populate the display slot from a successful outcome.

    :meth:`build` constructs the new artifact without touching the display;
    :meth:`commit` then swaps it into the slot in one synchronous step. A build
    failure is followed by :meth:`clear`, so the slot is either fully updated or
    empty, never half-updated.
    """

    def __init__(
        self,
        display: DisplayArea,
        *,
        viewer: ViewerControl | None = None,
        pixel_ratio: float = 1.0,
        download_stem: str = "graphviz",
        emitter: DiagnosticEmitter | None = None,
    ) -> None:
        self.display = display
        self.viewer = viewer or FitViewer()
        self.pixel_ratio = pixel_ratio
        self.download_stem = download_stem
        self.emitter = emitter or NullEmitter()

    async def build(
        self, request: RenderRequest, outcome: RenderOutcome
    ) -> tuple[Artifact, Download | None]:
        if isinstance(outcome, Failure):
            raise ValueError("Failures are reported by the pipeline, not presented")
        branch = branch_for(request)
        if branch == VECTOR_BRANCH:
            return self._build_vector(outcome)
        if branch == RASTER_BRANCH:
            return await self._build_raster(outcome)
        return self._build_text(outcome), None

    def commit(self, request: RenderRequest, artifact: Artifact, download: Download | None) -> None:
        self.display.raw_enabled = request.format is OutputFormat.SVG
        if isinstance(artifact, VectorArtifact):
            artifact.viewer = self.viewer.attach(
                artifact.root, zoom_enabled=True, control_icons=True, fit=True, center=True
            )
        self.display.slot.attach(artifact)
        self.display.download = download
        self.display.mark_idle()
        self.display.clear_error()
        logger.debug(
            "presented %s for request #%s", type(artifact).__name__, request.sequence
        )

    def clear(self, request: RenderRequest) -> None:
        """Empty the slot after a failed build for ``request``."""
        self.display.raw_enabled = request.format is OutputFormat.SVG
        self.display.slot.detach()
        self.display.download = None

    def _build_vector(self, outcome: RenderOutcome) -> tuple[VectorArtifact, Download]:
        root = self._require_vector(outcome)
        download = Download(svg_data_uri(serialize(root)), f"{self.download_stem}.svg")
        return VectorArtifact(root=root), download

    async def _build_raster(self, outcome: RenderOutcome) -> tuple[RasterArtifact, Download]:
        root = self._require_vector(outcome)
        image = await rasterize_async(serialize(root), scale=self.pixel_ratio, emitter=self.emitter)
        artifact = RasterArtifact(
            data_uri=image.data_uri,
            width=image.width,
            height=image.height,
            title=self.download_stem,
        )
        return artifact, Download(image.data_uri, f"{self.download_stem}.png")

    def _build_text(self, outcome: RenderOutcome) -> TextArtifact:
        if isinstance(outcome, VectorImage):
            return TextArtifact(serialize(outcome.root))
        if isinstance(outcome, TextPayload):
            return TextArtifact(outcome.text)
        raise ConversionError(f"Cannot display {type(outcome).__name__} as text")

    @staticmethod
    def _require_vector(outcome: Any) -> etree._Element:
        if not isinstance(outcome, VectorImage):
            raise ConversionError("Vector output requires SVG markup from the compiler")
        return outcome.root


__all__ = [
    "FitViewer",
    "FitViewerHandle",
    "OutputRenderer",
    "RASTER_BRANCH",
    "TEXT_BRANCH",
    "VECTOR_BRANCH",
    "ViewerControl",
    "ViewerHandle",
    "branch_for",
    "svg_data_uri",
]
