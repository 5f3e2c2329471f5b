"""Sync services for reconciling the Steam catalog with the local store.

Public API:
  - Reconciler - runs the tag and app feeds for one pass
  - StoreWriter - atomic upserts of tags and apps
  - SyncService - single-flight wrapper with background execution
  - FeedResult / SyncPassResult - pass outcome records
"""

from .reconciler import FeedResult, Reconciler, SyncPassResult
from .service import SyncAlreadyRunningError, SyncService, SyncStatus
from .writer import StoreWriteError, StoreWriter

__all__ = [
    "FeedResult",
    "Reconciler",
    "StoreWriteError",
    "StoreWriter",
    "SyncAlreadyRunningError",
    "SyncPassResult",
    "SyncService",
    "SyncStatus",
]
