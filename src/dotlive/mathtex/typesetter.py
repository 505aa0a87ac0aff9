"""Replace delimited TeX labels in a rendered SVG tree with typeset math.

Each `<text>` element whose content carries a delimited expression is swapped
for a `<g>` holding the converted markup. The group is scaled so its height
matches the label's original height and translated so both boxes share the
same center::

    s  = h_old / (h_new or 1)
    tx = cx_old - cx_new * s
    ty = cy_old - cy_new * s

When the conversion engine is unavailable the whole pass is abandoned before
the tree is touched. A single expression that fails to convert keeps its
original label.
"""

from __future__ import annotations

import logging

from lxml import etree

from dotlive.core.exceptions import DotliveError
from dotlive.core.models import MathSpan
from dotlive.core.svg import fmt, local_name, parse_markup, svg_tag

from .delimiters import contains_math, extract_first_tex
from .engines import MathEngine
from .measure import BoxMeasurer, HeuristicMeasurer


logger = logging.getLogger(__name__)

MATH_GROUP_CLASS = "math-label"


def _inside_math_group(node: etree._Element) -> bool:
    return any(
        MATH_GROUP_CLASS in (ancestor.get("class") or "").split()
        for ancestor in node.iterancestors()
    )


class InlineMathTypesetter:
    """Typeset math labels in place; returns the number of labels replaced."""

    def __init__(self, engine: MathEngine, *, measurer: BoxMeasurer | None = None) -> None:
        self.engine = engine
        self.measurer = measurer or HeuristicMeasurer()

    def collect(self, root: etree._Element) -> list[MathSpan]:
        spans: list[MathSpan] = []
        for node in root.iter():
            if local_name(node.tag) != "text" or _inside_math_group(node):
                continue
            raw = "".join(node.itertext())
            if not contains_math(raw):
                continue
            tex = extract_first_tex(raw)
            if tex is None:
                continue
            spans.append(MathSpan(node=node, tex=tex, box=self.measurer.text_box(node)))
        return spans

    async def typeset(self, root: etree._Element) -> int:
        spans = self.collect(root)
        if not spans:
            return 0
        if not await self.engine.ready():
            logger.info("math engine not ready; leaving %d label(s) as text", len(spans))
            return 0

        replaced = 0
        for span in spans:
            try:
                markup = await self.engine.tex_to_svg(span.tex)
                math_root = parse_markup(markup)
            except DotliveError as exc:
                logger.warning("could not typeset '%s': %s", span.tex, exc)
                continue
            self._replace(span, math_root)
            replaced += 1
        return replaced

    def _replace(self, span: MathSpan, math_root: etree._Element) -> None:
        node = span.node
        parent = node.getparent()
        if parent is None:
            return
        group = etree.Element(svg_tag("g"))
        group.set("class", MATH_GROUP_CLASS)
        group.append(math_root)
        node.addprevious(group)

        new_box = self.measurer.group_box(group)
        scale = span.box.height / (new_box.height or 1)
        old_cx, old_cy = span.box.center
        new_cx, new_cy = new_box.center
        tx = old_cx - new_cx * scale
        ty = old_cy - new_cy * scale
        group.set("transform", f"translate({fmt(tx)} {fmt(ty)}) scale({fmt(scale)})")

        if node.tail:
            group.tail = (group.tail or "") + node.tail
        parent.remove(node)


__all__ = ["InlineMathTypesetter", "MATH_GROUP_CLASS"]
