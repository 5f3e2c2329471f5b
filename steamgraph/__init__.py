"""
Steamgraph package initializer.

This package keeps a local database of Steam store apps and their weighted
tags in sync with the Steam Web API and exposes the resulting app/tag graph.

The package exposes a ``__version__`` attribute indicating the installed
version of Steamgraph. The version is read from pyproject.toml via
importlib.metadata; this is the single source of truth.
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("steamgraph")
except PackageNotFoundError:
    # Package is not installed (running from source without pip install -e .)
    __version__ = "0.0.0.dev"

__all__: list[str] = ["__version__"]
