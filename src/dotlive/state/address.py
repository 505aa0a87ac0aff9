"""In-memory model of the address bar and session history."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
import logging
from typing import Any
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit


logger = logging.getLogger(__name__)

PopStateListener = Callable[[Any], object]


@dataclass(frozen=True, slots=True)
class QueryParams:
    """Ordered query parameters with ``URLSearchParams`` lookup semantics."""

    items: tuple[tuple[str, str], ...] = ()

    @classmethod
    def parse(cls, query: str) -> QueryParams:
        return cls(tuple(parse_qsl(query.lstrip("?"), keep_blank_values=True)))

    def has(self, name: str) -> bool:
        return any(key == name for key, _ in self.items)

    def get(self, name: str) -> str | None:
        for key, value in self.items:
            if key == name:
                return value
        return None

    def set(self, name: str, value: str) -> QueryParams:
        """Return params with ``name`` replaced in place (or appended)."""
        result: list[tuple[str, str]] = []
        replaced = False
        for key, current in self.items:
            if key != name:
                result.append((key, current))
            elif not replaced:
                result.append((name, value))
                replaced = True
        if not replaced:
            result.append((name, value))
        return QueryParams(tuple(result))

    def encode(self) -> str:
        return urlencode(list(self.items))


def replace_url(
    href: str,
    *,
    query: Iterable[tuple[str, str]] | QueryParams | None = None,
    fragment: str | None = None,
) -> str:
    """Return ``href`` with its query and/or fragment swapped."""
    parts = urlsplit(href)
    new_query = parts.query
    if query is not None:
        params = query if isinstance(query, QueryParams) else QueryParams(tuple(query))
        new_query = params.encode()
    new_fragment = parts.fragment if fragment is None else fragment
    return urlunsplit((parts.scheme, parts.netloc, parts.path, new_query, new_fragment))


@dataclass(slots=True)
class _HistoryStep:
    href: str
    state: Any


class AddressBar:
    """Location plus a linear history stack supporting push, back and forward."""

    def __init__(self, href: str = "about:blank") -> None:
        self._steps: list[_HistoryStep] = [_HistoryStep(href, None)]
        self._index = 0
        self._listeners: list[PopStateListener] = []

    @property
    def href(self) -> str:
        return self._steps[self._index].href

    @property
    def state(self) -> Any:
        return self._steps[self._index].state

    @property
    def params(self) -> QueryParams:
        return QueryParams.parse(urlsplit(self.href).query)

    @property
    def fragment(self) -> str:
        return urlsplit(self.href).fragment

    @property
    def length(self) -> int:
        return len(self._steps)

    def navigate(self, href: str) -> None:
        """Load a fresh address, dropping forward history."""
        self.push_state(None, href)

    def push_state(self, state: Any, href: str) -> None:
        del self._steps[self._index + 1 :]
        self._steps.append(_HistoryStep(href, state))
        self._index += 1

    def on_popstate(self, listener: PopStateListener) -> None:
        self._listeners.append(listener)

    def back(self) -> bool:
        return self._go(-1)

    def forward(self) -> bool:
        return self._go(1)

    def _go(self, delta: int) -> bool:
        target = self._index + delta
        if target < 0 or target >= len(self._steps):
            return False
        self._index = target
        logger.debug("popstate -> %s", self.href)
        for listener in list(self._listeners):
            listener(self.state)
        return True


__all__ = ["AddressBar", "PopStateListener", "QueryParams", "replace_url"]
