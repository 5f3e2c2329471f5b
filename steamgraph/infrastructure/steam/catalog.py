"""Steam store catalog client: tags, changed app ids and app details.

The client speaks two API shapes. The app list is cursor-paginated
(``last_appid`` / ``have_more_results``); app details are fetched for a known
id set split into fixed-size chunks. Every request is issued sequentially so
the configured chunk and page sizes bound the load put on the remote.
"""

from __future__ import annotations

import json
import time
from dataclasses import dataclass, field
from typing import Callable, Iterator, NamedTuple, Sequence

from steamgraph.domain.models import CatalogItem, TaxonomyEntry
from steamgraph.infrastructure.http import SteamApiError, SteamHttpClient
from steamgraph.infrastructure.observability import get_logger

from .payloads import (
    AppListPayload,
    PlayerCountPayload,
    StoreItemsPayload,
    TagListPayload,
    parse_response,
)

logger = get_logger(__name__)

TAG_LIST_PATH = "IStoreService/GetTagList/v1/"
APP_LIST_PATH = "IStoreService/GetAppList/v1/"
STORE_ITEMS_PATH = "IStoreBrowseService/GetItems/v1/"
PLAYER_COUNT_PATH = "ISteamUserStats/GetNumberOfCurrentPlayers/v1/"

DEFAULT_PAGE_SIZE = 50_000
DEFAULT_DETAIL_CHUNK_SIZE = 250
DEFAULT_TAG_COUNT = 100


class ItemRef(NamedTuple):
    id: int
    name: str


@dataclass
class TaxonomyListing:
    """Result of :meth:`SteamCatalogClient.list_taxonomy`.

    An empty ``entries`` list means the remote hash matched and nothing
    changed; it never means the tags were deleted.
    """

    entries: list[TaxonomyEntry]
    hash: int


@dataclass
class ItemIdListing:
    """Result of :meth:`SteamCatalogClient.list_updated_item_ids`."""

    ids: list[ItemRef] = field(default_factory=list)
    as_of_time: int = 0
    pages: int = 0


def chunked(values: Sequence[int], size: int) -> Iterator[list[int]]:
    """Yield consecutive slices of ``values`` holding at most ``size`` items."""
    if size <= 0:
        raise ValueError("chunk size must be positive")
    for start in range(0, len(values), size):
        yield list(values[start : start + size])


class SteamCatalogClient:
    """Typed access to the three store endpoints the sync pipeline needs."""

    def __init__(
        self,
        http_client: SteamHttpClient,
        *,
        country_code: str = "US",
        language: str = "english",
        page_size: int = DEFAULT_PAGE_SIZE,
        detail_chunk_size: int = DEFAULT_DETAIL_CHUNK_SIZE,
        tag_count: int = DEFAULT_TAG_COUNT,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if page_size <= 0:
            raise ValueError("page_size must be positive")
        if detail_chunk_size <= 0:
            raise ValueError("detail_chunk_size must be positive")
        self.http = http_client
        self.country_code = country_code
        self.language = language
        self.page_size = page_size
        self.detail_chunk_size = detail_chunk_size
        self.tag_count = tag_count
        self._clock = clock

    # -------------------- tags --------------------
    def list_taxonomy(self, since_hash: int | None = None) -> TaxonomyListing:
        """Fetch the store tag list.

        With ``since_hash`` the remote only returns tags when its version
        hash differs; otherwise the listing comes back empty.

        Raises:
            SteamApiError: If the request fails or the body is malformed.
        """
        payload = self.http.get_json(
            TAG_LIST_PATH,
            {
                "language": self.language,
                "have_version_hash": str(since_hash or 0),
            },
        )
        body: TagListPayload = parse_response(payload, TagListPayload, TAG_LIST_PATH)
        return TaxonomyListing(
            entries=[tag.to_domain() for tag in body.tags],
            hash=body.version_hash,
        )

    # -------------------- app ids --------------------
    def list_updated_item_ids(self, since_time: int | None = None) -> ItemIdListing:
        """List every app changed since ``since_time`` (all apps when None).

        Pages of ``page_size`` are requested with the previous page's
        ``last_appid`` until the remote stops reporting more results. The
        returned ``as_of_time`` is the time the listing started. When the
        first page is already empty, ``as_of_time`` is ``since_time``
        unchanged so an empty (possibly transient) response never moves the
        cursor forward.

        Raises:
            SteamApiError: If any page request fails.
        """
        since = int(since_time or 0)
        as_of_time = int(self._clock())
        refs: list[ItemRef] = []
        last_appid = 0
        pages = 0

        while True:
            payload = self.http.get_json(
                APP_LIST_PATH,
                {
                    "if_modified_since": str(since),
                    "last_appid": str(last_appid),
                    "max_results": str(self.page_size),
                },
            )
            page: AppListPayload = parse_response(payload, AppListPayload, APP_LIST_PATH)
            pages += 1

            if not page.apps:
                if pages == 1:
                    return ItemIdListing(ids=[], as_of_time=since, pages=pages)
                if page.have_more_results:
                    logger.warning(
                        "App list page %d was empty but reported more results; stopping",
                        pages,
                    )
                break

            refs.extend(ItemRef(app.id, app.name) for app in page.apps)
            logger.debug("App list page %d: %d apps", pages, len(page.apps))

            if not page.have_more_results:
                break
            next_appid = page.last_appid if page.last_appid is not None else page.apps[-1].id
            if next_appid <= last_appid:
                raise SteamApiError(
                    f"{APP_LIST_PATH} cursor did not advance (last_appid={next_appid})"
                )
            last_appid = next_appid

        return ItemIdListing(ids=refs, as_of_time=as_of_time, pages=pages)

    # -------------------- app details --------------------
    def _items_request(self, chunk: list[int]) -> dict[str, str]:
        input_json = {
            "ids": [{"appid": app_id} for app_id in chunk],
            "context": {"country_code": self.country_code, "language": self.language},
            "data_request": {
                "include_basic_info": True,
                "include_full_description": True,
                "include_tag_count": self.tag_count,
            },
        }
        return {"input_json": json.dumps(input_json, separators=(",", ":"))}

    def fetch_item_details(self, ids: Sequence[int]) -> list[CatalogItem]:
        """Fetch full details for ``ids`` in sequential chunks.

        Items the remote flags as unavailable in the configured country are
        dropped. A failing chunk aborts the whole call; no partial detail
        set is ever returned.

        Raises:
            SteamApiError: If any chunk request fails.
        """
        items: list[CatalogItem] = []
        region_locked = 0
        for index, chunk in enumerate(chunked(list(ids), self.detail_chunk_size), start=1):
            payload = self.http.get_json(STORE_ITEMS_PATH, self._items_request(chunk))
            body: StoreItemsPayload = parse_response(
                payload, StoreItemsPayload, STORE_ITEMS_PATH
            )
            for store_item in body.store_items:
                if store_item.region_locked:
                    region_locked += 1
                    continue
                if store_item.id is None:
                    logger.debug("Skipping store item without appid in chunk %d", index)
                    continue
                items.append(store_item.to_domain())
            logger.debug("Fetched details chunk %d (%d ids)", index, len(chunk))

        if region_locked:
            logger.debug(
                "Dropped %d apps unavailable in region %s", region_locked, self.country_code
            )
        return items

    # -------------------- player counts --------------------
    def get_player_count(self, app_id: int) -> int:
        """Current player count for one app; 0 when Steam has no answer."""
        try:
            payload = self.http.get_json(
                PLAYER_COUNT_PATH, {"appid": str(app_id)}, include_key=False
            )
            body: PlayerCountPayload = parse_response(
                payload, PlayerCountPayload, PLAYER_COUNT_PATH
            )
        except SteamApiError as exc:
            logger.debug("No player count for app %s: %s", app_id, exc)
            return 0
        return body.player_count
