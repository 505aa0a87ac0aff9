"""Synchronize the editing state with the address bar.

History channel
: Every successful render writes the percent-encoded source into the fragment,
  the engine into the query string, and pushes a `HistoryEntry`. Navigating
  back or forward restores the decoded content into the text source; the
  source's own change notification decides whether a render follows.

Share channel
: On request, the source is compressed and a fresh link carrying
  `compressed`, `engine` and `format` is produced. Raw mode is never shared.

Startup
: `engine` and `format` are applied first, then the first of `raw`,
  `compressed`, `url`, the fragment, or pre-existing editor content decides
  what is loaded.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
import logging
from typing import Any, Protocol, runtime_checkable

from dotlive.core.diagnostics import DiagnosticEmitter, NullEmitter
from dotlive.core.document import TextSource
from dotlive.core.exceptions import CompressionError, FetchError, ParameterError
from dotlive.core.http import fetch_text_async
from dotlive.core.models import HistoryEntry, Selection, ShareState
from dotlive.core.urls import decode_uri_component, encode_uri_component
from dotlive.render.report import ErrorReporter

from .address import AddressBar, QueryParams, replace_url
from .codec import CompressionCodec, LZStringCodec


logger = logging.getLogger(__name__)

SHARE_FAILURE_MESSAGE = "Could not generate shareable URL. Content might be too large."
SHARE_COPIED = "Share URL copied to clipboard!"
SHARE_GENERATED = "Share URL generated."
PARAMETER_ERROR_TITLE = "URL Parameter Error"

RenderCallback = Callable[[], Awaitable[Any]]
Fetcher = Callable[[str], Awaitable[str]]


@runtime_checkable
class Clipboard(Protocol):
    def copy(self, text: str) -> bool: ...


class NullClipboard:
    """Clipboard that never succeeds; callers fall back to showing the link."""

    def copy(self, text: str) -> bool:
        return False


@dataclass(slots=True)
class ShareField:
    """Read-only field displaying the last generated share link."""

    value: str = ""
    visible: bool = False
    busy: bool = False


class StartupSource:
    RAW = "raw"
    COMPRESSED = "compressed"
    URL = "url"
    FRAGMENT = "fragment"
    EDITOR = "editor"
    EMPTY = "empty"


class UrlStateSynchronizer:
    """History and share channels plus startup resolution."""

    def __init__(
        self,
        address: AddressBar,
        source: TextSource,
        selection: Selection,
        reporter: ErrorReporter,
        *,
        render: RenderCallback | None = None,
        codec: CompressionCodec | None = None,
        clipboard: Clipboard | None = None,
        fetcher: Fetcher | None = None,
        emitter: DiagnosticEmitter | None = None,
        share_status_ms: int = 2000,
        max_url_length: int = 2_000_000,
    ) -> None:
        self.address = address
        self.source = source
        self.selection = selection
        self.reporter = reporter
        self.status = reporter.status
        self._render = render
        self.codec = codec or LZStringCodec()
        self.clipboard = clipboard or NullClipboard()
        self._fetch = fetcher or fetch_text_async
        self.emitter = emitter or NullEmitter()
        self.share_status_ms = share_status_ms
        self.max_url_length = max_url_length
        self.share_field = ShareField()
        self.presentation = False
        address.on_popstate(self.restore)

    # ------------------------------------------------------------------ history

    def record(self, content: str | None = None, engine: str | None = None) -> HistoryEntry:
        """Push ``content`` and ``engine`` (defaulting to the live state) as a history step."""
        if content is None:
            content = self.source.get_text()
        if engine is None:
            engine = self.selection.engine.value
        encoded = encode_uri_component(content)
        params = self.address.params.set("engine", engine)
        href = replace_url(self.address.href, query=params, fragment=encoded)
        entry = HistoryEntry(content=encoded, engine=engine)
        self.address.push_state(entry.as_state(), href)
        return entry

    def restore(self, state: Any) -> bool:
        """Apply a popstate entry; ignored unless it carries content and engine."""
        entry = HistoryEntry.from_state(state)
        if entry is None:
            return False
        self.source.set_text(decode_uri_component(entry.content))
        return True

    # -------------------------------------------------------------------- share

    def share_state(self) -> ShareState:
        compressed = self.codec.compress(self.source.get_text())
        return ShareState(compressed, self.selection.engine, self.selection.format)

    def share_url(self, state: ShareState) -> str:
        url = replace_url(self.address.href, query=state.query_items(), fragment="")
        if len(url) > self.max_url_length:
            raise CompressionError(
                f"Share URL is {len(url)} characters long (limit {self.max_url_length})"
            )
        return url

    def share(self) -> str | None:
        """Generate, display, and try to copy a share link."""
        field = self.share_field
        field.busy = True
        try:
            url = self.share_url(self.share_state())
        except CompressionError as exc:
            logger.debug("share generation failed", exc_info=exc)
            error = CompressionError(SHARE_FAILURE_MESSAGE)
            error.__cause__ = exc
            self.reporter.report(error)
            field.visible = False
            return None
        finally:
            field.busy = False

        field.value = url
        field.visible = True
        copied = self.clipboard.copy(url)
        self.status.show(SHARE_COPIED if copied else SHARE_GENERATED, self.share_status_ms)
        self.emitter.event("share_generated", {"url": url, "copied": copied})
        return url

    # ------------------------------------------------------------------ startup

    def apply_selection(self, params: QueryParams) -> None:
        """Apply ``engine``/``format`` parameters, keeping defaults on bad values."""
        for name, select in (
            ("engine", self.selection.select_engine),
            ("format", self.selection.select_format),
        ):
            value = params.get(name)
            if value is None:
                continue
            try:
                select(value)
            except ParameterError as exc:
                self.reporter.report(exc, title=PARAMETER_ERROR_TITLE, notice=name)
            else:
                self.reporter.display.dismiss_notice(name)

    async def start(self, href: str | None = None) -> str:
        """Resolve initial content from the address; returns the branch taken."""
        if href is not None:
            self.address.navigate(href)
        params = self.address.params
        self.apply_selection(params)
        if params.has("presentation"):
            self.presentation = True

        if params.has("raw"):
            self.source.set_text(params.get("raw") or "")
            await self._render_now()
            return StartupSource.RAW

        if params.has("compressed"):
            try:
                text = self.codec.decompress(params.get("compressed") or "")
            except CompressionError as exc:
                self.reporter.report(exc)
            else:
                self.source.set_text(text)
            return StartupSource.COMPRESSED

        if params.has("url"):
            await self._load_remote(params.get("url") or "")
            return StartupSource.URL

        fragment = self.address.fragment
        if fragment:
            self.source.set_text(decode_uri_component(fragment))
            return StartupSource.FRAGMENT

        if self.source.get_text():
            await self._render_now()
            return StartupSource.EDITOR
        return StartupSource.EMPTY

    async def _load_remote(self, url: str) -> None:
        self.emitter.event("source_fetch", {"url": url})
        try:
            text = await self._fetch(url)
        except FetchError as exc:
            self.reporter.report(exc)
            return
        self.source.set_text(text)
        await self._render_now()

    async def _render_now(self) -> None:
        if self._render is not None:
            await self._render()


__all__ = [
    "Clipboard",
    "NullClipboard",
    "PARAMETER_ERROR_TITLE",
    "SHARE_FAILURE_MESSAGE",
    "ShareField",
    "StartupSource",
    "UrlStateSynchronizer",
]
