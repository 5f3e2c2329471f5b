"""Steam store adapters: payload models and the catalog client."""

from .catalog import (
    APP_LIST_PATH,
    DEFAULT_DETAIL_CHUNK_SIZE,
    DEFAULT_PAGE_SIZE,
    DEFAULT_TAG_COUNT,
    PLAYER_COUNT_PATH,
    STORE_ITEMS_PATH,
    TAG_LIST_PATH,
    ItemIdListing,
    ItemRef,
    SteamCatalogClient,
    TaxonomyListing,
    chunked,
)

__all__ = [
    "APP_LIST_PATH",
    "DEFAULT_DETAIL_CHUNK_SIZE",
    "DEFAULT_PAGE_SIZE",
    "DEFAULT_TAG_COUNT",
    "PLAYER_COUNT_PATH",
    "STORE_ITEMS_PATH",
    "TAG_LIST_PATH",
    "ItemIdListing",
    "ItemRef",
    "SteamCatalogClient",
    "TaxonomyListing",
    "chunked",
]
