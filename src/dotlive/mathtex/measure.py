"""Bounding boxes of SVG text labels and imported math groups."""

from __future__ import annotations

from typing import Protocol

from lxml import etree

from dotlive.core.models import BoundingBox
from dotlive.core.svg import local_name, parse_length, view_box


GRAPHVIZ_FONT_SIZE = 14.0
ASCENT_RATIO = 0.8
DESCENT_RATIO = 0.2


class BoxMeasurer(Protocol):
    """Computes user-space boxes the way a browser's ``getBBox`` would."""

    def text_box(self, node: etree._Element) -> BoundingBox: ...

    def group_box(self, group: etree._Element) -> BoundingBox: ...


def heuristic_width(text: str, font_size: float) -> float:
    width = 0.0
    for ch in text:
        if ch.isspace():
            width += font_size * 0.33
        elif ch in "il":
            width += font_size * 0.3
        elif ch in "mwMW@#":
            width += font_size * 0.9
        else:
            width += font_size * 0.6
    return width


def _inherited(node: etree._Element, name: str) -> str | None:
    current: etree._Element | None = node
    while current is not None:
        value = current.get(name)
        if value is not None:
            return value
        style = current.get("style")
        if style:
            for declaration in style.split(";"):
                key, _, raw = declaration.partition(":")
                if key.strip() == name and raw.strip():
                    return raw.strip()
        current = current.getparent()
    return None


def _first_number(value: str | None) -> str | None:
    # x/y may carry per-glyph lists; the first entry positions the run.
    if value is None:
        return None
    parts = value.replace(",", " ").split()
    return parts[0] if parts else None


class HeuristicMeasurer:
    """Estimate boxes from attributes without a layout engine."""

    def __init__(self, *, default_font_size: float = GRAPHVIZ_FONT_SIZE) -> None:
        self.default_font_size = default_font_size

    def font_size(self, node: etree._Element) -> float:
        size = parse_length(_inherited(node, "font-size"))
        return size if size and size > 0 else self.default_font_size

    def text_box(self, node: etree._Element) -> BoundingBox:
        size = self.font_size(node)
        text = "".join(node.itertext())
        width = heuristic_width(text, size)
        x = parse_length(_first_number(node.get("x")), default=0.0) or 0.0
        baseline = parse_length(_first_number(node.get("y")), default=0.0) or 0.0
        anchor = _inherited(node, "text-anchor") or "start"
        if anchor == "middle":
            x -= width / 2
        elif anchor == "end":
            x -= width
        top = baseline - size * ASCENT_RATIO
        return BoundingBox(x, top, width, size * (ASCENT_RATIO + DESCENT_RATIO))

    def group_box(self, group: etree._Element) -> BoundingBox:
        """Union of the viewports of the nested ``<svg>`` children of ``group``."""
        boxes = [self._viewport(child) for child in group if local_name(child.tag) == "svg"]
        if not boxes:
            return BoundingBox(0.0, 0.0, 0.0, 0.0)
        left = min(box.x for box in boxes)
        top = min(box.y for box in boxes)
        right = max(box.x + box.width for box in boxes)
        bottom = max(box.y + box.height for box in boxes)
        return BoundingBox(left, top, right - left, bottom - top)

    def _viewport(self, svg: etree._Element) -> BoundingBox:
        box = view_box(svg)
        x = parse_length(svg.get("x"), default=0.0) or 0.0
        y = parse_length(svg.get("y"), default=0.0) or 0.0
        width = parse_length(svg.get("width"), default=box[2] if box else 0.0) or 0.0
        height = parse_length(svg.get("height"), default=box[3] if box else 0.0) or 0.0
        return BoundingBox(x, y, width, height)


__all__ = [
    "ASCENT_RATIO",
    "BoxMeasurer",
    "DESCENT_RATIO",
    "GRAPHVIZ_FONT_SIZE",
    "HeuristicMeasurer",
    "heuristic_width",
]
