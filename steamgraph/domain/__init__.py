"""Domain layer facade for Steamgraph.

This package groups the plain records shared by the sync pipeline and the
read side. Nothing here touches the network or the database.
"""

from . import models

__all__ = ["models"]
