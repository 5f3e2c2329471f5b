"""Application orchestration layer.

Coordinates configuration and the HTTP interface. The FastAPI application
lives in :mod:`steamgraph.app.api` and is not imported here so that loading
configuration never builds the web app.
"""

from . import config

__all__ = ["config"]
