"""Live Graphviz rendering with shareable URL state."""

from __future__ import annotations

from dotlive.core.config import DotliveConfig, load_config
from dotlive.core.document import DocumentBuffer
from dotlive.core.exceptions import (
    CompileError,
    CompressionError,
    ConversionError,
    DotliveError,
    FetchError,
    MarkupError,
    ParameterError,
)
from dotlive.core.models import (
    Failure,
    FailureKind,
    HistoryEntry,
    RenderOutcome,
    RenderRequest,
    Selection,
    ShareState,
    TextPayload,
    VectorImage,
)
from dotlive.core.options import Engine, OutputFormat
from dotlive.mathtex import InlineMathTypesetter
from dotlive.render.compiler import GraphvizCompiler
from dotlive.render.pipeline import RenderPipeline
from dotlive.render.scheduler import DebounceScheduler
from dotlive.state.address import AddressBar
from dotlive.state.codec import DeflateCodec, LZStringCodec
from dotlive.state.sync import UrlStateSynchronizer
from dotlive.version import get_version
from dotlive.workspace import Workspace


__version__ = get_version()

__all__ = [
    "AddressBar",
    "CompileError",
    "CompressionError",
    "ConversionError",
    "DebounceScheduler",
    "DeflateCodec",
    "DocumentBuffer",
    "DotliveConfig",
    "DotliveError",
    "Engine",
    "Failure",
    "FailureKind",
    "FetchError",
    "GraphvizCompiler",
    "HistoryEntry",
    "InlineMathTypesetter",
    "LZStringCodec",
    "MarkupError",
    "OutputFormat",
    "ParameterError",
    "RenderOutcome",
    "RenderPipeline",
    "RenderRequest",
    "Selection",
    "ShareState",
    "TextPayload",
    "UrlStateSynchronizer",
    "VectorImage",
    "Workspace",
    "__version__",
    "get_version",
    "load_config",
]
