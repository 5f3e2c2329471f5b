from .apps import AppRepository
from .sync_runs import SyncRunRepository
from .tags import TagRepository

__all__ = [
    "AppRepository",
    "SyncRunRepository",
    "TagRepository",
]
