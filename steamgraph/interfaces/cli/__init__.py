"""CLI interface facades for Steamgraph.

This package is the canonical home for all Click commands. Run it with
``python -m steamgraph.interfaces.cli`` or the ``steamgraph`` console script.
"""

from .__main__ import cli
from .history import history
from .sync import sync
from .view import view
from .watermark import watermark

__all__ = [
    "cli",
    "history",
    "sync",
    "view",
    "watermark",
]
