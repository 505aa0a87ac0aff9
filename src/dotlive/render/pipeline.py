"""Render pipeline driving the compiler and presenting the newest outcome.

Ordering
: Compiler calls are asynchronous and may finish out of order. Each request is
  stamped with a monotonically increasing sequence number when submitted, and
  after every suspension point the pipeline checks that the request is still the
  newest one. Stale outcomes are dropped silently: last submitted wins, not last
  completed.

Failure handling
: Compiler, markup and conversion errors become `Failure` outcomes. The new
  artifact is built off-screen and swapped in only if its request is still the
  newest, so a stale outcome never touches the slot. A compile or markup
  failure leaves the previous artifact in place; a failure while building the
  new artifact empties the slot.
"""

from __future__ import annotations

from collections.abc import Callable
import logging
from typing import Any, Protocol

from dotlive.core.diagnostics import DiagnosticEmitter, NullEmitter
from dotlive.core.exceptions import DotliveError
from dotlive.core.models import (
    Failure,
    FailureKind,
    RenderOutcome,
    RenderRequest,
    TextPayload,
    VectorImage,
)
from dotlive.core.svg import parse_markup

from .compiler import GraphCompiler
from .display import Artifact
from .output import TEXT_BRANCH, OutputRenderer, branch_for
from .report import ErrorReporter
from .status import DONE, RENDERING, StatusDisplay


logger = logging.getLogger(__name__)

SuccessHook = Callable[[RenderRequest, Artifact], Any]


class Typesetter(Protocol):
    async def typeset(self, root: Any) -> int: ...


def _failure_kind(exc: BaseException) -> FailureKind:
    try:
        return FailureKind(getattr(exc, "kind", FailureKind.INTERNAL.value))
    except ValueError:
        return FailureKind.INTERNAL


class RenderPipeline:
    """Compile, typeset, and present render requests."""

    def __init__(
        self,
        compiler: GraphCompiler,
        output: OutputRenderer,
        *,
        status: StatusDisplay | None = None,
        typesetter: Typesetter | None = None,
        emitter: DiagnosticEmitter | None = None,
        on_success: SuccessHook | None = None,
        status_hide_ms: int = 500,
    ) -> None:
        self.compiler = compiler
        self.output = output
        self.display = output.display
        self.status = status or StatusDisplay()
        self.typesetter = typesetter
        self.emitter = emitter or NullEmitter()
        self.on_success = on_success
        self.status_hide_ms = status_hide_ms
        self.reporter = ErrorReporter(
            self.display, self.status, emitter=self.emitter, hide_ms=status_hide_ms
        )
        self._sequence = 0

    @property
    def latest_sequence(self) -> int:
        return self._sequence

    def is_current(self, request: RenderRequest) -> bool:
        return request.sequence == self._sequence

    async def render(self, request: RenderRequest) -> RenderOutcome | None:
        """Render ``request``; returns ``None`` when a newer request superseded it."""
        self._sequence += 1
        request = request.stamped(self._sequence)
        self.display.mark_working()
        self.status.show(RENDERING)

        try:
            outcome = await self._compile(request)
        except DotliveError as exc:
            return self._fail(request, exc)
        except Exception as exc:  # pragma: no cover
            logger.exception("unexpected compiler failure")
            return self._fail(request, exc)
        if not self.is_current(request):
            return self._discard(request)

        if isinstance(outcome, VectorImage) and branch_for(request) != TEXT_BRANCH:
            await self._typeset(outcome)
            if not self.is_current(request):
                return self._discard(request)

        try:
            artifact, download = await self.output.build(request, outcome)
        except DotliveError as exc:
            return self._fail(request, exc, clear_slot=True)
        except Exception as exc:  # pragma: no cover
            logger.exception("unexpected presentation failure")
            return self._fail(request, exc, clear_slot=True)
        if not self.is_current(request):
            return self._discard(request)

        self.output.commit(request, artifact, download)
        if self.on_success is not None:
            self.on_success(request, artifact)
        self.emitter.event(
            "render_done",
            {
                "sequence": request.sequence,
                "engine": request.engine.value,
                "format": request.format.value,
                "artifact": type(artifact).__name__,
            },
        )
        self.status.show(DONE, self.status_hide_ms)
        return outcome

    async def _compile(self, request: RenderRequest) -> VectorImage | TextPayload:
        markup = await self.compiler.compile(
            request.source_text,
            engine=request.engine,
            format=request.format.compiler_format,
        )
        if request.format.is_vector:
            return VectorImage(parse_markup(markup))
        return TextPayload(markup)

    async def _typeset(self, outcome: VectorImage) -> None:
        if self.typesetter is None:
            return
        try:
            count = await self.typesetter.typeset(outcome.root)
        except DotliveError as exc:
            self.emitter.warning(f"Math typesetting skipped: {exc}", exc)
            return
        if count:
            self.emitter.event("math_typeset", {"count": count})

    def _fail(
        self, request: RenderRequest, exc: BaseException, *, clear_slot: bool = False
    ) -> Failure | None:
        if not self.is_current(request):
            return self._discard(request)
        if clear_slot:
            self.output.clear(request)
        message = self.reporter.report(exc)
        return Failure(_failure_kind(exc), message)

    def _discard(self, request: RenderRequest) -> None:
        logger.debug(
            "discarding stale render #%s (latest is #%s)", request.sequence, self._sequence
        )
        return None


__all__ = ["RenderPipeline", "SuccessHook", "Typesetter"]
