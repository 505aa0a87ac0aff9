from __future__ import annotations

import asyncio

from lxml import etree
import pytest

from dotlive.core.exceptions import ConversionError
from dotlive.core.svg import SVG_NS, parse_markup, serialize
from dotlive.mathtex.measure import HeuristicMeasurer, heuristic_width
from dotlive.mathtex.typesetter import MATH_GROUP_CLASS, InlineMathTypesetter


def _graph(*labels: str) -> etree._Element:
    texts = "".join(
        f'<text x="100" y="{50 + 40 * index}" font-size="10" text-anchor="middle">{label}</text>'
        f"tail{index}"
        for index, label in enumerate(labels)
    )
    return parse_markup(f'<svg xmlns="{SVG_NS}"><g class="node">{texts}</g></svg>')


class FakeMathEngine:
    def __init__(self, *, ready: bool = True, height: float = 20.0, fail_on: str = "") -> None:
        self._ready = ready
        self.height = height
        self.fail_on = fail_on
        self.converted: list[str] = []

    async def ready(self) -> bool:
        return self._ready

    async def tex_to_svg(self, tex: str) -> str:
        self.converted.append(tex)
        if tex == self.fail_on:
            raise ConversionError(f"cannot convert {tex}")
        return (
            f'<svg xmlns="{SVG_NS}" width="40" height="{self.height:g}" '
            f'viewBox="0 0 40 {self.height:g}"><path d="M0 0h40"/></svg>'
        )


def _texts(root: etree._Element) -> list[etree._Element]:
    return root.findall(f".//{{{SVG_NS}}}text")


def _groups(root: etree._Element) -> list[etree._Element]:
    return [g for g in root.iter(f"{{{SVG_NS}}}g") if g.get("class") == MATH_GROUP_CLASS]


def test_label_is_replaced_by_scaled_centered_group() -> None:
    root = _graph("$x$")
    engine = FakeMathEngine(height=20)

    count = asyncio.run(InlineMathTypesetter(engine).typeset(root))

    assert count == 1
    assert engine.converted == ["x"]
    assert _texts(root) == []
    (group,) = _groups(root)
    # Label box: 18 wide centered on x=100, top 42, height 10 -> center (100, 47).
    # Math box: 40x20 at the origin -> center (20, 10); scale 10 / 20.
    assert group.get("transform") == "translate(90 42) scale(0.5)"
    assert group[0].tag == f"{{{SVG_NS}}}svg"
    assert group.tail == "tail0"


def test_only_first_expression_of_a_label_is_used() -> None:
    root = _graph("$a$ plus \\(b\\)")
    engine = FakeMathEngine()

    asyncio.run(InlineMathTypesetter(engine).typeset(root))

    assert engine.converted == ["a"]


def test_typesetting_twice_is_a_no_op() -> None:
    root = _graph("$x$", "plain")
    engine = FakeMathEngine()
    typesetter = InlineMathTypesetter(engine)

    assert asyncio.run(typesetter.typeset(root)) == 1
    snapshot = serialize(root)
    assert asyncio.run(typesetter.typeset(root)) == 0

    assert serialize(root) == snapshot
    assert engine.converted == ["x"]


def test_unready_engine_aborts_before_mutation() -> None:
    root = _graph("$x$", "\\(y\\)")
    snapshot = serialize(root)
    engine = FakeMathEngine(ready=False)

    assert asyncio.run(InlineMathTypesetter(engine).typeset(root)) == 0

    assert serialize(root) == snapshot
    assert engine.converted == []


def test_failed_expression_keeps_its_label() -> None:
    root = _graph("$bad$", "$good$")
    engine = FakeMathEngine(fail_on="bad")

    assert asyncio.run(InlineMathTypesetter(engine).typeset(root)) == 1

    remaining = _texts(root)
    assert len(remaining) == 1
    assert remaining[0].text == "$bad$"
    assert len(_groups(root)) == 1


def test_labels_without_math_are_left_alone() -> None:
    root = _graph("a -> b")
    engine = FakeMathEngine()

    assert asyncio.run(InlineMathTypesetter(engine).typeset(root)) == 0
    assert engine.converted == []


def test_tspan_content_counts_towards_the_label() -> None:
    root = parse_markup(
        f'<svg xmlns="{SVG_NS}"><text x="0" y="20" font-size="10">'
        "<tspan>$</tspan><tspan>z$</tspan></text></svg>"
    )

    assert asyncio.run(InlineMathTypesetter(FakeMathEngine()).typeset(root)) == 1


@pytest.mark.parametrize(
    ("anchor", "expected_x"),
    [("start", 100.0), ("middle", 91.0), ("end", 82.0)],
)
def test_text_box_honours_anchor(anchor: str, expected_x: float) -> None:
    node = parse_markup(
        f'<svg xmlns="{SVG_NS}"><text x="100" y="50" font-size="10" '
        f'text-anchor="{anchor}">$x$</text></svg>'
    )[0]

    box = HeuristicMeasurer().text_box(node)

    assert box.x == pytest.approx(expected_x)
    assert box.y == pytest.approx(42.0)
    assert box.width == pytest.approx(18.0)
    assert box.height == pytest.approx(10.0)


def test_text_box_inherits_font_size_from_style() -> None:
    root = parse_markup(
        f'<svg xmlns="{SVG_NS}"><g style="font-size: 20px"><text x="0" y="0">ab</text></g></svg>'
    )
    node = root.find(f".//{{{SVG_NS}}}text")

    box = HeuristicMeasurer().text_box(node)

    assert box.height == pytest.approx(20.0)
    assert box.width == pytest.approx(heuristic_width("ab", 20.0))


def test_group_box_converts_units() -> None:
    group = etree.fromstring(
        f'<g xmlns="{SVG_NS}"><svg width="4ex" height="2.5ex" viewBox="0 -750 1000 1000"/></g>'
    )

    box = HeuristicMeasurer().group_box(group)

    assert (box.width, box.height) == (pytest.approx(32.0), pytest.approx(20.0))

    group = etree.fromstring(f'<g xmlns="{SVG_NS}"><svg x="3" width="36pt" height="18pt"/></g>')
    box = HeuristicMeasurer().group_box(group)
    assert (box.x, box.width, box.height) == (3.0, pytest.approx(48.0), pytest.approx(24.0))


def test_heuristic_width_weights_glyphs() -> None:
    assert heuristic_width("i", 10) == pytest.approx(3.0)
    assert heuristic_width("W", 10) == pytest.approx(9.0)
    assert heuristic_width(" ", 10) == pytest.approx(3.3)
    assert heuristic_width("x", 10) == pytest.approx(6.0)
