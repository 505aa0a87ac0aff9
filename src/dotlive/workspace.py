"""Application state tying the editor, the pipeline and the address bar together.

Data flows

- a text change re-arms the debounce scheduler, which renders once the quiet
  period elapses;
- a control change (engine, format, raw) renders immediately;
- every successful render records a history step;
- history navigation writes the stored content back into the text source.
"""

from __future__ import annotations

from collections.abc import Callable
import logging
from typing import Any

from dotlive.core.config import DotliveConfig
from dotlive.core.diagnostics import DiagnosticEmitter, NullEmitter
from dotlive.core.document import DocumentBuffer, TextSource
from dotlive.core.exceptions import ParameterError
from dotlive.core.models import RenderOutcome, RenderRequest, Selection
from dotlive.core.options import Engine, OutputFormat
from dotlive.mathtex import HeuristicMeasurer, InlineMathTypesetter, create_math_engine
from dotlive.render.compiler import GraphCompiler, GraphvizCompiler
from dotlive.render.display import Artifact, DisplayArea
from dotlive.render.output import OutputRenderer, ViewerControl
from dotlive.render.pipeline import RenderPipeline, Typesetter
from dotlive.render.scheduler import DebounceScheduler
from dotlive.render.status import StatusDisplay
from dotlive.render.timers import LoopTimer, Timer
from dotlive.state.address import AddressBar
from dotlive.state.codec import CompressionCodec, create_codec
from dotlive.state.sync import Clipboard, Fetcher, ShareField, UrlStateSynchronizer


logger = logging.getLogger(__name__)

RenderListener = Callable[[RenderRequest, Artifact], Any]


class Workspace:
    """Explicit application state for one editing session."""

    def __init__(
        self,
        compiler: GraphCompiler,
        *,
        config: DotliveConfig | None = None,
        source: TextSource | None = None,
        address: AddressBar | None = None,
        timer: Timer | None = None,
        viewer: ViewerControl | None = None,
        typesetter: Typesetter | None = None,
        codec: CompressionCodec | None = None,
        clipboard: Clipboard | None = None,
        fetcher: Fetcher | None = None,
        emitter: DiagnosticEmitter | None = None,
    ) -> None:
        self.config = config or DotliveConfig()
        render_cfg = self.config.render
        self.emitter = emitter or NullEmitter()
        self.source = source or DocumentBuffer()
        self.address = address or AddressBar(self.config.share.base_url)
        self.selection = Selection(render_cfg.default_engine, render_cfg.default_format)

        self.display = DisplayArea()
        self.timer = timer or LoopTimer()
        self.status = StatusDisplay(timer=self.timer)
        self.output = OutputRenderer(
            self.display,
            viewer=viewer,
            pixel_ratio=render_cfg.device_pixel_ratio,
            download_stem=render_cfg.download_stem,
            emitter=self.emitter,
        )
        self.pipeline = RenderPipeline(
            compiler,
            self.output,
            status=self.status,
            typesetter=typesetter,
            emitter=self.emitter,
            on_success=self._rendered,
            status_hide_ms=render_cfg.status_hide_ms,
        )
        self.scheduler = DebounceScheduler(render_cfg.debounce_ms / 1000, timer=self.timer)
        self.sync = UrlStateSynchronizer(
            self.address,
            self.source,
            self.selection,
            self.pipeline.reporter,
            render=self.render,
            codec=codec or create_codec(self.config.share.codec),
            clipboard=clipboard,
            fetcher=fetcher,
            emitter=self.emitter,
            share_status_ms=render_cfg.share_status_ms,
            max_url_length=self.config.share.max_url_length,
        )
        self._listeners: list[RenderListener] = []
        self.source.on_change(self._text_changed)

    @classmethod
    def from_config(cls, config: DotliveConfig | None = None, **kwargs: Any) -> Workspace:
        """Build a workspace backed by the Graphviz CLI and the configured math engine."""
        config = config or DotliveConfig()
        compiler = kwargs.pop("compiler", None) or GraphvizCompiler(
            config.graphviz.binary, timeout=config.graphviz.timeout
        )
        if "typesetter" not in kwargs:
            engine = create_math_engine(config.math)
            kwargs["typesetter"] = (
                InlineMathTypesetter(engine, measurer=HeuristicMeasurer())
                if engine is not None
                else None
            )
        return cls(compiler, config=config, **kwargs)

    @property
    def presentation(self) -> bool:
        return self.sync.presentation

    @property
    def share_field(self) -> ShareField:
        return self.sync.share_field

    def request(self) -> RenderRequest:
        return self.selection.request(self.source.get_text())

    async def render(self) -> RenderOutcome | None:
        """Render the current state now, superseding any pending debounced render."""
        self.scheduler.cancel()
        self.resume()
        return await self.pipeline.render(self.request())

    def edit(self, text: str) -> None:
        self.source.set_text(text)

    async def set_engine(self, value: Engine | str) -> RenderOutcome | None:
        self.selection.select_engine(value)
        self.display.dismiss_notice("engine")
        return await self.render()

    async def set_format(self, value: OutputFormat | str) -> RenderOutcome | None:
        self.selection.select_format(value)
        self.display.dismiss_notice("format")
        return await self.render()

    async def set_raw(self, enabled: bool) -> RenderOutcome | None:
        if enabled and self.selection.format is not OutputFormat.SVG:
            raise ParameterError("Raw output is only available for the 'svg' format")
        self.selection.raw_mode = enabled
        return await self.render()

    def share(self) -> str | None:
        return self.sync.share()

    async def start(self, href: str | None = None) -> str:
        self.resume()
        return await self.sync.start(href)

    def close(self) -> None:
        """Stop following the text source and drop any pending debounced render."""
        self.source.remove_listener(self._text_changed)
        self.scheduler.cancel()

    def resume(self) -> None:
        """Arm timers requested before the event loop started (edits, history steps)."""
        if isinstance(self.timer, LoopTimer):
            self.timer.resume()

    @property
    def artifact(self) -> Artifact | None:
        return self.display.slot.artifact

    def _text_changed(self, _text: str) -> None:
        self.scheduler.schedule(self.render)

    def on_rendered(self, listener: RenderListener) -> None:
        self._listeners.append(listener)

    def _rendered(self, request: RenderRequest, artifact: Artifact) -> None:
        self.sync.record(request.source_text, request.engine.value)
        for listener in list(self._listeners):
            listener(request, artifact)


__all__ = ["RenderListener", "Workspace"]
