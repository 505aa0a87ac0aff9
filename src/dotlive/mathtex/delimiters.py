"""Recognition of delimited TeX inside label text."""

from __future__ import annotations

import re


# Precedence order: dollar, inline parenthesis, display bracket.
_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"\$([^$]+)\$"),
    re.compile(r"\\\((.+?)\\\)"),
    re.compile(r"\\\[(.+?)\\\]"),
)

_ANY_MATH = re.compile(r"(\$[^$]+\$)|(\\\(.+?\\\))|(\\\[.+?\\\])")


def contains_math(text: str) -> bool:
    """Return True when ``text`` holds at least one delimited expression."""
    return _ANY_MATH.search(text) is not None


def extract_first_tex(text: str) -> str | None:
    """Return the first expression by delimiter precedence, trimmed.

    Only one expression is taken per label; text outside the delimiters is
    discarded by the caller when the label is replaced.
    """
    for pattern in _PATTERNS:
        match = pattern.search(text)
        if match:
            tex = match.group(1).strip()
            return tex or None
    return None


__all__ = ["contains_math", "extract_first_tex"]
