"""Service layer modules for Steamgraph."""

from .catalog import CatalogViewService
from .sync import (FeedResult, Reconciler, StoreWriteError, StoreWriter,
                   SyncAlreadyRunningError, SyncPassResult, SyncService)

__all__ = [
    "CatalogViewService",
    "FeedResult",
    "Reconciler",
    "StoreWriteError",
    "StoreWriter",
    "SyncAlreadyRunningError",
    "SyncPassResult",
    "SyncService",
]
