"""CLI command implementations exposed via `dotlive.ui.cli`."""

from __future__ import annotations

from .open import open_url
from .render import render
from .share import share
from .watch import watch


__all__ = ["open_url", "render", "share", "watch"]
