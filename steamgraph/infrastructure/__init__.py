"""Infrastructure layer for Steamgraph.

Holds adapters for the Steam Web API, the SQLite store, the watermark file
and observability.
"""

from . import db, http, observability, persistence, steam

__all__ = ["db", "http", "observability", "persistence", "steam"]
