"""Inline math typesetting for text labels of rendered graphs."""

from __future__ import annotations

from .delimiters import contains_math, extract_first_tex
from .engines import MathEngine, MathJaxNodeEngine, MatplotlibMathEngine, create_math_engine
from .measure import BoxMeasurer, HeuristicMeasurer
from .typesetter import InlineMathTypesetter


__all__ = [
    "BoxMeasurer",
    "HeuristicMeasurer",
    "InlineMathTypesetter",
    "MathEngine",
    "MathJaxNodeEngine",
    "MatplotlibMathEngine",
    "contains_math",
    "create_math_engine",
    "extract_first_tex",
]
