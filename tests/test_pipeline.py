from __future__ import annotations

import asyncio
import sys
import types
from typing import Any

from conftest import FakeCompiler, FakeTimer, GatedCompiler, RecordingEmitter, graph_svg
import pytest

from dotlive.core.models import Failure, FailureKind, RenderRequest, TextPayload, VectorImage
from dotlive.core.options import Engine, OutputFormat
from dotlive.core.urls import decode_uri_component
from dotlive.render.display import DisplayArea, RasterArtifact, TextArtifact, VectorArtifact
import dotlive.render.output as output_module
from dotlive.render.output import OutputRenderer
from dotlive.render.pipeline import RenderPipeline
from dotlive.render.raster import RasterImage
from dotlive.render.status import StatusDisplay


def _request(source: str, fmt: OutputFormat = OutputFormat.SVG, raw: bool = False) -> RenderRequest:
    return RenderRequest(source, Engine.DOT, fmt, raw)


def _pipeline(
    compiler: Any,
    timer: FakeTimer,
    *,
    emitter: RecordingEmitter | None = None,
    typesetter: Any = None,
    pixel_ratio: float = 1.0,
) -> RenderPipeline:
    display = DisplayArea()
    output = OutputRenderer(display, pixel_ratio=pixel_ratio, emitter=emitter)
    return RenderPipeline(
        compiler,
        output,
        status=StatusDisplay(timer=timer),
        typesetter=typesetter,
        emitter=emitter,
    )


@pytest.fixture
def fake_cairosvg(monkeypatch: pytest.MonkeyPatch) -> list[dict[str, Any]]:
    calls: list[dict[str, Any]] = []

    def svg2png(**kwargs: Any) -> bytes:
        calls.append(kwargs)
        return b"\x89PNG\r\n\x1a\nfake"

    monkeypatch.setitem(sys.modules, "cairosvg", types.SimpleNamespace(svg2png=svg2png))
    return calls


class SpyTypesetter:
    def __init__(self) -> None:
        self.roots: list[Any] = []

    async def typeset(self, root: Any) -> int:
        self.roots.append(root)
        return 0


def test_svg_render_presents_vector_with_download(
    compiler: FakeCompiler, timer: FakeTimer, emitter: RecordingEmitter
) -> None:
    pipeline = _pipeline(compiler, timer, emitter=emitter)

    outcome = asyncio.run(pipeline.render(_request("graph G {}")))

    assert isinstance(outcome, VectorImage)
    display = pipeline.display
    artifact = display.slot.artifact
    assert isinstance(artifact, VectorArtifact)
    assert artifact.viewer is not None
    assert artifact.root.get("width") == "100%"
    assert display.download is not None
    assert display.download.filename == "graphviz.svg"
    assert display.download.href.startswith("data:image/svg+xml;charset=utf-8,")
    markup = decode_uri_component(display.download.href.split(",", 1)[1])
    assert 'width="62pt"' in markup
    assert not display.working
    assert not display.failed
    assert display.raw_enabled is True
    assert pipeline.status.text == "done"
    timer.advance(0.5)
    assert pipeline.status.text == ""
    assert emitter.events[-1][0] == "render_done"
    assert compiler.calls == [("graph G {}", Engine.DOT, "svg")]


def test_png_render_rasterizes_at_pixel_ratio(
    compiler: FakeCompiler, timer: FakeTimer, fake_cairosvg: list[dict[str, Any]]
) -> None:
    pipeline = _pipeline(compiler, timer, pixel_ratio=2.0)

    outcome = asyncio.run(pipeline.render(_request("graph G {}", OutputFormat.PNG)))

    assert isinstance(outcome, VectorImage)
    artifact = pipeline.display.slot.artifact
    assert isinstance(artifact, RasterArtifact)
    # 62pt x 44pt -> 82.67px x 58.67px displayed at intrinsic size.
    assert (artifact.width, artifact.height) == (83, 59)
    assert fake_cairosvg[0]["output_width"] == 166
    assert fake_cairosvg[0]["output_height"] == 118
    assert artifact.data_uri.startswith("data:image/png;base64,")
    assert pipeline.display.download is not None
    assert pipeline.display.download.filename == "graphviz.png"
    assert pipeline.display.download.href == artifact.data_uri
    assert pipeline.display.raw_enabled is False
    assert compiler.calls[0][2] == "svg"


def test_raw_svg_is_shown_as_text(compiler: FakeCompiler, timer: FakeTimer) -> None:
    pipeline = _pipeline(compiler, timer)

    asyncio.run(pipeline.render(_request("graph G {}", raw=True)))

    artifact = pipeline.display.slot.artifact
    assert isinstance(artifact, TextArtifact)
    assert artifact.text.startswith("<svg")
    assert pipeline.display.download is None
    assert pipeline.display.raw_enabled is True


def test_text_format_shows_payload_verbatim(compiler: FakeCompiler, timer: FakeTimer) -> None:
    pipeline = _pipeline(compiler, timer)

    outcome = asyncio.run(pipeline.render(_request("graph G {}", OutputFormat.JSON)))

    assert outcome == TextPayload("json:graph G {}")
    artifact = pipeline.display.slot.artifact
    assert artifact == TextArtifact("json:graph G {}")
    assert pipeline.display.raw_enabled is False
    assert compiler.calls[0][2] == "json"


def test_compile_failure_keeps_previous_artifact(
    compiler: FakeCompiler, timer: FakeTimer, emitter: RecordingEmitter
) -> None:
    pipeline = _pipeline(compiler, timer, emitter=emitter)

    async def scenario() -> Any:
        await pipeline.render(_request("graph G {}"))
        return await pipeline.render(_request("syntax error"))

    outcome = asyncio.run(scenario())

    assert isinstance(outcome, Failure)
    assert outcome.kind is FailureKind.COMPILE
    assert "syntax error" in outcome.message
    display = pipeline.display
    assert display.failed
    assert not display.working
    assert "syntax error" in display.error_text
    assert isinstance(display.slot.artifact, VectorArtifact)
    assert pipeline.status.text == "error"
    assert emitter.errors == [outcome.message]


def test_malformed_markup_is_reported(timer: FakeTimer) -> None:
    pipeline = _pipeline(FakeCompiler(svg=lambda _source: "<svg"), timer)

    outcome = asyncio.run(pipeline.render(_request("graph G {}")))

    assert isinstance(outcome, Failure)
    assert outcome.kind is FailureKind.MARKUP
    assert pipeline.display.failed


def test_rasterization_failure_leaves_slot_empty(
    compiler: FakeCompiler, timer: FakeTimer, monkeypatch: pytest.MonkeyPatch
) -> None:
    def svg2png(**_kwargs: Any) -> bytes:
        raise ValueError("bad canvas")

    monkeypatch.setitem(sys.modules, "cairosvg", types.SimpleNamespace(svg2png=svg2png))
    pipeline = _pipeline(compiler, timer)

    async def scenario() -> Any:
        await pipeline.render(_request("graph G {}"))
        return await pipeline.render(_request("graph G {}", OutputFormat.PNG))

    outcome = asyncio.run(scenario())

    assert isinstance(outcome, Failure)
    assert outcome.kind is FailureKind.CONVERSION
    assert pipeline.display.slot.empty
    assert pipeline.display.download is None


def test_last_submitted_wins_when_older_finishes_last(timer: FakeTimer) -> None:
    compiler = GatedCompiler()
    pipeline = _pipeline(compiler, timer)

    async def scenario() -> tuple[Any, Any]:
        first = asyncio.create_task(pipeline.render(_request("first")))
        await asyncio.sleep(0)
        second = asyncio.create_task(pipeline.render(_request("second")))
        await asyncio.sleep(0)
        compiler.gates[1].set()
        second_outcome = await second
        compiler.gates[0].set()
        first_outcome = await first
        return first_outcome, second_outcome

    first_outcome, second_outcome = asyncio.run(scenario())

    assert first_outcome is None
    assert isinstance(second_outcome, VectorImage)
    artifact = pipeline.display.slot.artifact
    assert isinstance(artifact, VectorArtifact)
    assert artifact.root.findtext("{http://www.w3.org/2000/svg}g/{http://www.w3.org/2000/svg}title") == "second"


def test_last_submitted_wins_when_older_finishes_first(timer: FakeTimer) -> None:
    compiler = GatedCompiler()
    pipeline = _pipeline(compiler, timer)

    async def scenario() -> tuple[Any, Any]:
        first = asyncio.create_task(pipeline.render(_request("first")))
        await asyncio.sleep(0)
        second = asyncio.create_task(pipeline.render(_request("second")))
        await asyncio.sleep(0)
        compiler.gates[0].set()
        first_outcome = await first
        assert pipeline.display.slot.empty
        compiler.gates[1].set()
        return first_outcome, await second

    first_outcome, second_outcome = asyncio.run(scenario())

    assert first_outcome is None
    assert isinstance(second_outcome, VectorImage)
    assert pipeline.latest_sequence == 2


def test_stale_failure_is_discarded_silently(timer: FakeTimer) -> None:
    compiler = GatedCompiler()
    pipeline = _pipeline(compiler, timer)

    async def scenario() -> Any:
        first = asyncio.create_task(pipeline.render(_request("syntax error")))
        await asyncio.sleep(0)
        second = asyncio.create_task(pipeline.render(_request("fine")))
        await asyncio.sleep(0)
        compiler.gates[1].set()
        await second
        compiler.gates[0].set()
        return await first

    assert asyncio.run(scenario()) is None
    assert not pipeline.display.failed
    assert pipeline.display.error_text == ""


def test_typesetter_runs_only_for_presented_vectors(
    compiler: FakeCompiler, timer: FakeTimer, fake_cairosvg: list[dict[str, Any]]
) -> None:
    typesetter = SpyTypesetter()
    pipeline = _pipeline(compiler, timer, typesetter=typesetter)

    async def scenario() -> None:
        await pipeline.render(_request("graph G {}"))
        await pipeline.render(_request("graph G {}", raw=True))
        await pipeline.render(_request("graph G {}", OutputFormat.PNG))
        await pipeline.render(_request("graph G {}", OutputFormat.XDOT))

    asyncio.run(scenario())

    assert len(typesetter.roots) == 2


def test_success_hook_receives_stamped_request(compiler: FakeCompiler, timer: FakeTimer) -> None:
    seen: list[tuple[int, str]] = []
    pipeline = _pipeline(compiler, timer)
    pipeline.on_success = lambda request, artifact: seen.append(
        (request.sequence, type(artifact).__name__)
    )

    asyncio.run(pipeline.render(_request("graph G {}")))

    assert seen == [(1, "VectorArtifact")]


def test_graph_svg_fixture_is_valid_markup() -> None:
    from dotlive.core.svg import parse_markup

    assert parse_markup(graph_svg()).get("viewBox") == "0.00 0.00 62.00 44.00"


def test_stale_raster_build_never_touches_the_slot(
    compiler: FakeCompiler, timer: FakeTimer, monkeypatch: pytest.MonkeyPatch
) -> None:
    gate = asyncio.Event()

    async def gated_rasterize(markup: str, *, scale: float = 1.0, emitter: Any = None) -> Any:
        await gate.wait()
        return RasterImage(b"png", 62, 44, 62, 44)

    monkeypatch.setattr(output_module, "rasterize_async", gated_rasterize)
    pipeline = _pipeline(compiler, timer)

    async def scenario() -> tuple[Any, Any]:
        await pipeline.render(_request("graph G {}"))
        png = asyncio.create_task(pipeline.render(_request("graph G {}", OutputFormat.PNG)))
        await asyncio.sleep(0)
        # The png request is parked inside rasterization; the display is untouched.
        assert isinstance(pipeline.display.slot.artifact, VectorArtifact)
        failed = await pipeline.render(_request("syntax error"))
        gate.set()
        return await png, failed

    png_outcome, failed = asyncio.run(scenario())

    assert png_outcome is None
    assert isinstance(failed, Failure)
    display = pipeline.display
    assert isinstance(display.slot.artifact, VectorArtifact)
    assert display.download is not None
    assert display.download.filename == "graphviz.svg"
    assert display.raw_enabled is True
    assert display.failed
    assert "syntax error" in display.error_text
