"""Domain models package.

This package contains domain model classes for Steamgraph.
"""

from .catalog import DEFAULT_COLOR, CatalogItem, TagWeight, TaxonomyEntry
from .watermark import SyncWatermark

__all__ = [
    "DEFAULT_COLOR",
    "CatalogItem",
    "SyncWatermark",
    "TagWeight",
    "TaxonomyEntry",
]
