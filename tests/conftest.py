from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import Any

import pytest

from dotlive.core.exceptions import CompileError
from dotlive.core.options import Engine


GRAPH_SVG = (
    '<svg xmlns="http://www.w3.org/2000/svg" width="62pt" height="44pt" '
    'viewBox="0.00 0.00 62.00 44.00">'
    '<g id="graph0" class="graph"><title>{title}</title>'
    '<text x="31" y="22" font-size="14.00" text-anchor="middle">{label}</text>'
    "</g></svg>"
)


def graph_svg(title: str = "G", label: str = "a") -> str:
    return GRAPH_SVG.format(title=title, label=label)


class FakeHandle:
    def __init__(self, when: float, callback: Callable[..., Any], args: tuple[Any, ...]) -> None:
        self.when = when
        self.callback = callback
        self.args = args
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class FakeTimer:
    """Deterministic replacement for ``loop.call_later``."""

    def __init__(self) -> None:
        self.now = 0.0
        self.handles: list[FakeHandle] = []

    def call_later(self, delay: float, callback: Callable[..., Any], *args: Any) -> FakeHandle:
        handle = FakeHandle(self.now + delay, callback, args)
        self.handles.append(handle)
        return handle

    @property
    def armed(self) -> list[FakeHandle]:
        return [handle for handle in self.handles if not handle.cancelled]

    def advance(self, seconds: float) -> None:
        self.now += seconds
        while True:
            due = [h for h in self.armed if h.when <= self.now + 1e-9]
            if not due:
                return
            handle = min(due, key=lambda h: h.when)
            self.handles.remove(handle)
            handle.callback(*handle.args)


class FakeCompiler:
    """Compiler returning a small SVG, or ``<format>:<source>`` for text formats."""

    def __init__(self, svg: Callable[[str], str] | None = None) -> None:
        self.calls: list[tuple[str, Engine, str]] = []
        self._svg = svg or (lambda source: graph_svg(title=source))

    async def compile(self, source: str, *, engine: Engine, format: str = "svg") -> str:
        self.calls.append((source, engine, format))
        if "syntax error" in source:
            raise CompileError("Error: syntax error in line 1 near 'error'")
        if format == "svg":
            return self._svg(source)
        return f"{format}:{source}"


class GatedCompiler(FakeCompiler):
    """Compiler whose calls block until the test releases them."""

    def __init__(self) -> None:
        super().__init__()
        self.gates: list[asyncio.Event] = []

    async def compile(self, source: str, *, engine: Engine, format: str = "svg") -> str:
        gate = asyncio.Event()
        self.gates.append(gate)
        await gate.wait()
        return await super().compile(source, engine=engine, format=format)


class RecordingEmitter:
    debug_enabled = False

    def __init__(self) -> None:
        self.warnings: list[str] = []
        self.errors: list[str] = []
        self.events: list[tuple[str, dict[str, Any]]] = []

    def warning(self, message: str, exc: BaseException | None = None) -> None:
        self.warnings.append(message)

    def error(self, message: str, exc: BaseException | None = None) -> None:
        self.errors.append(message)

    def event(self, name: str, payload: Any) -> None:
        self.events.append((name, dict(payload)))


async def settle() -> None:
    """Wait for every task spawned by fired timers."""
    for _ in range(3):
        await asyncio.sleep(0)
    current = asyncio.current_task()
    pending = [task for task in asyncio.all_tasks() if task is not current]
    if pending:
        await asyncio.gather(*pending)


@pytest.fixture
def timer() -> FakeTimer:
    return FakeTimer()


@pytest.fixture
def compiler() -> FakeCompiler:
    return FakeCompiler()


@pytest.fixture
def emitter() -> RecordingEmitter:
    return RecordingEmitter()


@pytest.fixture(autouse=True)
def _isolate_config(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("DOTLIVE_CONFIG", raising=False)
