"""One sync pass: tags first, then apps, each guarded by its watermark.

For each feed the reconciler decides between an incremental and a full
fetch from the watermark, short-circuits when the remote reports nothing
new, writes through :class:`StoreWriter` and only then advances and persists
the watermark. A failure in one feed is recorded and logged; it never stops
the other feed and never moves that feed's watermark.
"""

from __future__ import annotations

import time
from dataclasses import asdict, dataclass, field
from typing import Literal

from steamgraph.domain.models import CatalogItem, SyncWatermark
from steamgraph.infrastructure.db import iso_utcnow
from steamgraph.infrastructure.http import SteamApiError
from steamgraph.infrastructure.observability import (
    get_logger,
    log_context,
    log_exception,
    record_sync_feed,
)
from steamgraph.infrastructure.persistence import WatermarkStore, WatermarkStoreError
from steamgraph.infrastructure.steam import SteamCatalogClient

from .writer import StoreWriteError, StoreWriter

logger = get_logger(__name__)

FeedName = Literal["taxonomy", "catalog"]
FeedStatus = Literal["synced", "unchanged", "failed"]
SyncMode = Literal["incremental", "full"]

# Errors that fail a single feed; anything else is a bug and propagates.
FEED_ERRORS = (SteamApiError, StoreWriteError, WatermarkStoreError)


@dataclass
class FeedResult:
    """Outcome of one feed within a pass."""

    feed: FeedName
    status: FeedStatus
    mode: SyncMode
    fetched: int = 0
    written: int = 0
    watermark_before: int | None = None
    watermark_after: int | None = None
    error: str | None = None
    started_at: str = field(default_factory=iso_utcnow)
    finished_at: str | None = None
    duration_seconds: float = 0.0

    @property
    def ok(self) -> bool:
        return self.status != "failed"

    @property
    def advanced(self) -> bool:
        return self.watermark_after != self.watermark_before


@dataclass
class SyncPassResult:
    """Combined outcome of a tag and app feed run."""

    taxonomy: FeedResult
    catalog: FeedResult
    watermark: SyncWatermark
    started_at: str
    finished_at: str

    @property
    def feeds(self) -> list[FeedResult]:
        return [self.taxonomy, self.catalog]

    @property
    def ok(self) -> bool:
        return all(feed.ok for feed in self.feeds)

    @property
    def status(self) -> str:
        failed = sum(1 for feed in self.feeds if not feed.ok)
        if failed == 0:
            return "success"
        if failed == len(self.feeds):
            return "failed"
        return "partial"

    def to_dict(self) -> dict[str, object]:
        return {
            "status": self.status,
            "started_at": self.started_at,
            "finished_at": self.finished_at,
            "watermark": self.watermark.to_dict(),
            "taxonomy": asdict(self.taxonomy),
            "catalog": asdict(self.catalog),
        }


class Reconciler:
    """Runs the tag and app feeds against the store."""

    def __init__(
        self,
        client: SteamCatalogClient,
        writer: StoreWriter,
        watermark_store: WatermarkStore,
        *,
        include_player_counts: bool = False,
    ) -> None:
        self.client = client
        self.writer = writer
        self.watermark_store = watermark_store
        self.include_player_counts = include_player_counts

    def run_pass(self, watermark: SyncWatermark | None = None) -> SyncPassResult:
        """Run both feeds, tags before apps.

        ``watermark`` defaults to the stored one; passing an explicit value
        (e.g. :meth:`SyncWatermark.empty` for a forced full sync) skips the
        load but still persists whatever the feeds advance.
        """
        started_at = iso_utcnow()
        current = watermark if watermark is not None else self.watermark_store.load()
        logger.info("Syncing with Steam...")

        taxonomy, current = self._run_feed("taxonomy", current)
        catalog, current = self._run_feed("catalog", current)

        result = SyncPassResult(
            taxonomy=taxonomy,
            catalog=catalog,
            watermark=current,
            started_at=started_at,
            finished_at=iso_utcnow(),
        )
        logger.info(
            "Syncing with Steam done: status=%s tags=%s apps=%s",
            result.status,
            taxonomy.status,
            catalog.status,
        )
        return result

    def _run_feed(
        self, feed: FeedName, watermark: SyncWatermark
    ) -> tuple[FeedResult, SyncWatermark]:
        step = self.sync_taxonomy if feed == "taxonomy" else self.sync_catalog
        started = time.perf_counter()
        result, advanced = step(watermark)
        result.duration_seconds = time.perf_counter() - started
        result.finished_at = iso_utcnow()
        record_sync_feed(feed, result.status, result.duration_seconds, result.written)
        return result, advanced

    # -------------------- taxonomy feed --------------------
    def sync_taxonomy(
        self, watermark: SyncWatermark
    ) -> tuple[FeedResult, SyncWatermark]:
        """Sync store tags. Returns the feed result and the watermark to carry on."""
        before = watermark.taxonomy_hash
        mode: SyncMode = "incremental" if before is not None else "full"
        result = FeedResult(
            feed="taxonomy",
            status="unchanged",
            mode=mode,
            watermark_before=before,
            watermark_after=before,
        )
        with log_context(feed="taxonomy", mode=mode):
            try:
                listing = self.client.list_taxonomy(before)
                result.fetched = len(listing.entries)
                if not listing.entries:
                    logger.info("No new Steam tags found")
                    return result, watermark

                result.written = self.writer.upsert_taxonomy(listing.entries)
                advanced = watermark.with_taxonomy_hash(listing.hash)
                self.watermark_store.save(advanced)
            except FEED_ERRORS as exc:
                return self._failed(result, exc), watermark

            result.status = "synced"
            result.watermark_after = listing.hash
            logger.info("Steam tags synced: %d tags, hash=%s", result.written, listing.hash)
            return result, advanced

    # -------------------- catalog feed --------------------
    def sync_catalog(
        self, watermark: SyncWatermark
    ) -> tuple[FeedResult, SyncWatermark]:
        """Sync apps changed since the catalog cursor, with their tag weights."""
        before = watermark.catalog_cursor
        mode: SyncMode = "incremental" if before is not None else "full"
        result = FeedResult(
            feed="catalog",
            status="unchanged",
            mode=mode,
            watermark_before=before,
            watermark_after=before,
        )
        with log_context(feed="catalog", mode=mode):
            try:
                if before is None:
                    logger.info(
                        "Looks like this is the first time syncing all apps with Steam. "
                        "This may take a while."
                    )
                listing = self.client.list_updated_item_ids(before)
                result.fetched = len(listing.ids)
                if not listing.ids:
                    logger.info("No new or updated Steam apps found")
                    return result, watermark

                if before is None:
                    logger.info("Syncing details from %d apps.", len(listing.ids))
                items = self.client.fetch_item_details([ref.id for ref in listing.ids])
                if self.include_player_counts:
                    self._apply_player_counts(items)

                result.written = self.writer.upsert_catalog_items(items)
                advanced = watermark.with_catalog_cursor(listing.as_of_time)
                self.watermark_store.save(advanced)
            except FEED_ERRORS as exc:
                return self._failed(result, exc), watermark

            result.status = "synced"
            result.watermark_after = listing.as_of_time
            logger.info(
                "Steam apps synced: %d of %d listed apps written, cursor=%s",
                result.written,
                result.fetched,
                listing.as_of_time,
            )
            return result, advanced

    def _apply_player_counts(self, items: list[CatalogItem]) -> None:
        for item in items:
            item.popularity = self.client.get_player_count(item.id)

    def _failed(self, result: FeedResult, exc: Exception) -> FeedResult:
        result.status = "failed"
        result.error = str(exc)
        result.watermark_after = result.watermark_before
        log_exception(logger, f"Steam {result.feed} sync failed", exc)
        return result
