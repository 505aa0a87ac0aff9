"""Closed enumerations of layout engines and output formats."""

from __future__ import annotations

from enum import Enum

from .exceptions import ParameterError


class Engine(str, Enum):
    """Graphviz layout engines accepted by the compiler."""

    CIRCO = "circo"
    DOT = "dot"
    FDP = "fdp"
    SFDP = "sfdp"
    NEATO = "neato"
    OSAGE = "osage"
    PATCHWORK = "patchwork"
    TWOPI = "twopi"
    NOP = "nop"
    NOP2 = "nop2"


class OutputFormat(str, Enum):
    """Output formats offered by the format selector."""

    SVG = "svg"
    PNG = "png"
    JSON = "json"
    JSON0 = "json0"
    DOT_JSON = "dot_json"
    XDOT_JSON = "xdot_json"
    XDOT = "xdot"
    PLAIN = "plain"
    PLAIN_EXT = "plain-ext"
    CANON = "canon"
    DOT = "dot"
    PS = "ps"

    @property
    def is_vector(self) -> bool:
        """Return True when the format is produced from SVG markup."""
        return self in VECTOR_FORMATS

    @property
    def compiler_format(self) -> str:
        """Format name handed to the compiler."""
        return OutputFormat.SVG.value if self.is_vector else self.value


VECTOR_FORMATS = frozenset({OutputFormat.SVG, OutputFormat.PNG})

DEFAULT_ENGINE = Engine.DOT
DEFAULT_FORMAT = OutputFormat.SVG


def _lookup(enum_type: type[Enum], name: str, value: object) -> Enum:
    if isinstance(value, enum_type):
        return value
    for member in enum_type:
        if member.value == value:
            return member
    raise ParameterError(f"Invalid '{name}' parameter: {value}")


def parse_engine(value: object) -> Engine:
    """Return the engine matching ``value`` or raise ``ParameterError``."""
    return _lookup(Engine, "engine", value)  # type: ignore[return-value]


def parse_format(value: object) -> OutputFormat:
    """Return the output format matching ``value`` or raise ``ParameterError``."""
    return _lookup(OutputFormat, "format", value)  # type: ignore[return-value]


__all__ = [
    "DEFAULT_ENGINE",
    "DEFAULT_FORMAT",
    "VECTOR_FORMATS",
    "Engine",
    "OutputFormat",
    "parse_engine",
    "parse_format",
]
