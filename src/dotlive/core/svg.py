"""SVG parsing, serialization, and length helpers built on lxml."""

from __future__ import annotations

import re

from lxml import etree

from .exceptions import MarkupError


SVG_NS = "http://www.w3.org/2000/svg"
XLINK_NS = "http://www.w3.org/1999/xlink"

DEFAULT_FONT_SIZE = 16.0

_LENGTH_RE = re.compile(r"^\s*([-+]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][-+]?\d+)?)\s*([a-z%]*)\s*$")

_UNIT_TO_PX = {
    "": 1.0,
    "px": 1.0,
    "pt": 96.0 / 72.0,
    "pc": 16.0,
    "in": 96.0,
    "cm": 96.0 / 2.54,
    "mm": 96.0 / 25.4,
}


def svg_tag(local: str) -> str:
    return f"{{{SVG_NS}}}{local}"


def local_name(tag: object) -> str:
    if not isinstance(tag, str):
        return ""
    return tag.split("}", 1)[1] if tag.startswith("{") else tag


def _parser() -> etree.XMLParser:
    return etree.XMLParser(resolve_entities=False, no_network=True, remove_comments=False)


def parse_markup(markup: str | bytes) -> etree._Element:
    """Parse SVG markup into an element tree, raising ``MarkupError`` when malformed."""
    data = markup.encode("utf-8") if isinstance(markup, str) else markup
    if not data.strip():
        raise MarkupError("Graph compiler returned empty markup")
    try:
        root = etree.fromstring(data, parser=_parser())
    except etree.XMLSyntaxError as exc:
        raise MarkupError(f"Malformed SVG markup: {exc}") from exc
    if local_name(root.tag) != "svg":
        raise MarkupError(f"Expected an <svg> root element, got <{local_name(root.tag)}>")
    return root


def serialize(root: etree._Element) -> str:
    """Return the markup of ``root`` as text, without an XML declaration."""
    return etree.tostring(root, encoding="unicode")


def parse_length(
    value: str | None,
    *,
    font_size: float = DEFAULT_FONT_SIZE,
    default: float | None = None,
) -> float | None:
    """Convert an SVG length to user units (CSS px); percentages yield ``default``."""
    if value is None:
        return default
    match = _LENGTH_RE.match(value)
    if not match:
        return default
    number = float(match.group(1))
    unit = match.group(2)
    if unit == "em":
        return number * font_size
    if unit == "ex":
        return number * font_size / 2
    factor = _UNIT_TO_PX.get(unit)
    if factor is None:
        return default
    return number * factor


def view_box(root: etree._Element) -> tuple[float, float, float, float] | None:
    raw = root.get("viewBox")
    if not raw:
        return None
    parts = raw.replace(",", " ").split()
    if len(parts) != 4:
        return None
    try:
        x, y, w, h = (float(part) for part in parts)
    except ValueError:
        return None
    return x, y, w, h


def intrinsic_size(root: etree._Element) -> tuple[float, float]:
    """Return the width and height an image of ``root`` would have, in px."""
    box = view_box(root)
    width = parse_length(root.get("width"))
    height = parse_length(root.get("height"))
    if width is None:
        width = box[2] if box else 300.0
    if height is None:
        height = box[3] if box else 150.0
    return width, height


def fmt(value: float) -> str:
    """Format a coordinate compactly for attribute values."""
    if abs(value - round(value)) < 1e-9:
        return str(int(round(value)))
    return f"{value:.6f}".rstrip("0").rstrip(".")


__all__ = [
    "DEFAULT_FONT_SIZE",
    "SVG_NS",
    "XLINK_NS",
    "fmt",
    "intrinsic_size",
    "local_name",
    "parse_length",
    "parse_markup",
    "serialize",
    "svg_tag",
    "view_box",
]
