"""Exception hierarchy for the render and URL-state pipeline."""

from __future__ import annotations


class DotliveError(RuntimeError):
    """Base exception for every user-visible failure."""

    kind: str = "internal"


class CompileError(DotliveError):
    """Raised when the graph compiler rejects the source/engine combination."""

    kind = "compile"


class MarkupError(DotliveError):
    """Raised when the compiler returns vector markup that cannot be parsed."""

    kind = "markup"


class ParameterError(DotliveError):
    """Raised when an engine or format value is outside its enumeration."""

    kind = "parameter"


class FetchError(DotliveError):
    """Raised when remote source content cannot be loaded."""

    kind = "fetch"


class CompressionError(DotliveError):
    """Raised when a shareable link cannot be produced."""

    kind = "compression"


class ConversionError(DotliveError):
    """Raised when raster or math conversion cannot proceed."""

    kind = "conversion"


def exception_messages(exc: BaseException) -> list[str]:
    """Return the collected message chain for an exception and its causes."""
    messages: list[str] = []
    visited: set[int] = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in visited:
        visited.add(id(current))
        text = str(current).strip()
        if text:
            first_line = text.splitlines()[0].strip()
            if first_line:
                messages.append(first_line)
        current = current.__cause__ or current.__context__
    return messages


def exception_hint(exc: BaseException) -> str | None:
    """Return the most specific message available for an exception chain."""
    messages = exception_messages(exc)
    return messages[-1] if messages else None


__all__ = [
    "CompileError",
    "CompressionError",
    "ConversionError",
    "DotliveError",
    "FetchError",
    "MarkupError",
    "ParameterError",
    "exception_hint",
    "exception_messages",
]
