"""End-to-end sync passes against a fake Steam client and a real store."""

from __future__ import annotations

import sqlite3
from pathlib import Path

import pytest

from steamgraph.domain.models import CatalogItem, SyncWatermark, TagWeight, TaxonomyEntry
from steamgraph.infrastructure.http import SteamApiError
from steamgraph.infrastructure.observability import get_counter_value
from steamgraph.infrastructure.observability.metrics import SYNC_FEEDS
from steamgraph.infrastructure.persistence import WatermarkStore, WatermarkStoreError
from steamgraph.infrastructure.steam import ItemIdListing, ItemRef, TaxonomyListing
from steamgraph.services.sync import Reconciler, StoreWriter


class _FakeCatalogClient:
    def __init__(self):
        self.tags: list[TaxonomyEntry] = []
        self.tag_hash = 0
        self.items: dict[int, CatalogItem] = {}
        self.changed_since: dict[int | None, list[int]] = {}
        self.as_of_time = 1000
        self.player_counts: dict[int, int] = {}
        self.fail_taxonomy = False
        self.fail_listing = False
        self.fail_details = False
        self.taxonomy_calls: list[int | None] = []
        self.listing_calls: list[int | None] = []
        self.detail_calls: list[list[int]] = []

    def list_taxonomy(self, since_hash):
        self.taxonomy_calls.append(since_hash)
        if self.fail_taxonomy:
            raise SteamApiError("tag list unavailable", status=503)
        if since_hash == self.tag_hash:
            return TaxonomyListing(entries=[], hash=self.tag_hash)
        return TaxonomyListing(entries=list(self.tags), hash=self.tag_hash)

    def list_updated_item_ids(self, since_time):
        self.listing_calls.append(since_time)
        if self.fail_listing:
            raise SteamApiError("app list unavailable", status=500)
        ids = self.changed_since.get(since_time, [])
        if not ids:
            return ItemIdListing(ids=[], as_of_time=since_time or 0, pages=1)
        refs = [ItemRef(app_id, self.items[app_id].name) for app_id in ids]
        return ItemIdListing(ids=refs, as_of_time=self.as_of_time, pages=1)

    def fetch_item_details(self, ids):
        self.detail_calls.append(list(ids))
        if self.fail_details:
            raise SteamApiError("details unavailable", status=500)
        return [self.items[app_id] for app_id in ids]

    def get_player_count(self, app_id):
        return self.player_counts.get(app_id, 0)


def _build(tmp_path: Path, client: _FakeCatalogClient, **kwargs):
    db_path = tmp_path / "steamgraph.db"
    store = WatermarkStore(tmp_path / "data.json")
    reconciler = Reconciler(client, StoreWriter.from_sqlite_path(db_path), store, **kwargs)
    return reconciler, store, db_path


def _rows(db_path: Path, query: str) -> list[tuple]:
    with sqlite3.connect(db_path) as conn:
        return conn.execute(query).fetchall()


def _steam_with_one_game() -> _FakeCatalogClient:
    client = _FakeCatalogClient()
    client.tags = [TaxonomyEntry(1, "Indie"), TaxonomyEntry(2, "RPG")]
    client.tag_hash = 77
    client.items[10] = CatalogItem(
        id=10, name="Game", description="Desc", tags=[TagWeight(1, 5)]
    )
    client.changed_since[None] = [10]
    return client


def test_first_pass_syncs_everything_and_advances_watermark(tmp_path: Path) -> None:
    client = _steam_with_one_game()
    reconciler, store, db_path = _build(tmp_path, client)

    result = reconciler.run_pass()

    assert result.ok
    assert result.status == "success"
    assert result.taxonomy.status == "synced"
    assert result.taxonomy.mode == "full"
    assert result.taxonomy.written == 2
    assert result.catalog.status == "synced"
    assert result.catalog.mode == "full"
    assert result.catalog.written == 1
    assert result.watermark == SyncWatermark(taxonomy_hash=77, catalog_cursor=1000)
    assert store.load() == SyncWatermark(taxonomy_hash=77, catalog_cursor=1000)
    assert client.taxonomy_calls == [None]
    assert client.listing_calls == [None]
    assert _rows(db_path, "SELECT tag_id, name FROM tags ORDER BY tag_id") == [
        (1, "Indie"),
        (2, "RPG"),
    ]
    assert _rows(db_path, "SELECT app_id, name, description, color FROM app") == [
        (10, "Game", "Desc", "#000000")
    ]
    assert _rows(db_path, "SELECT app_id, tag_id, weight FROM app_tags") == [(10, 1, 5)]
    assert get_counter_value(SYNC_FEEDS, {"feed": "catalog", "status": "synced"}) == 1


def test_second_pass_with_nothing_new_is_unchanged(tmp_path: Path) -> None:
    client = _steam_with_one_game()
    reconciler, store, db_path = _build(tmp_path, client)
    reconciler.run_pass()

    result = reconciler.run_pass()

    assert result.ok
    assert result.taxonomy.status == "unchanged"
    assert result.taxonomy.mode == "incremental"
    assert result.catalog.status == "unchanged"
    assert client.taxonomy_calls == [None, 77]
    assert client.listing_calls == [None, 1000]
    assert client.detail_calls == [[10]]
    assert store.load() == SyncWatermark(taxonomy_hash=77, catalog_cursor=1000)
    assert _rows(db_path, "SELECT COUNT(*) FROM app") == [(1,)]


def test_watermark_never_moves_backwards_over_repeated_passes(tmp_path: Path) -> None:
    client = _steam_with_one_game()
    reconciler, store, _ = _build(tmp_path, client)
    reconciler.run_pass()

    client.items[11] = CatalogItem(id=11, name="Sequel", tags=[TagWeight(2, 8)])
    client.changed_since[1000] = [11]
    client.as_of_time = 2000
    second = reconciler.run_pass()
    third = reconciler.run_pass()

    assert second.catalog.status == "synced"
    assert second.catalog.watermark_before == 1000
    assert second.catalog.watermark_after == 2000
    assert third.catalog.status == "unchanged"
    assert store.load().catalog_cursor == 2000


def test_taxonomy_failure_does_not_block_catalog(tmp_path: Path) -> None:
    client = _steam_with_one_game()
    client.fail_taxonomy = True
    client.items[10] = CatalogItem(id=10, name="Game", tags=[])
    reconciler, store, db_path = _build(tmp_path, client)

    result = reconciler.run_pass()

    assert not result.ok
    assert result.status == "partial"
    assert result.taxonomy.status == "failed"
    assert "tag list unavailable" in result.taxonomy.error
    assert result.catalog.status == "synced"
    assert store.load() == SyncWatermark(taxonomy_hash=None, catalog_cursor=1000)
    assert _rows(db_path, "SELECT app_id FROM app") == [(10,)]


def test_catalog_failure_keeps_cursor_and_writes_nothing(tmp_path: Path) -> None:
    client = _steam_with_one_game()
    client.fail_details = True
    reconciler, store, db_path = _build(tmp_path, client)

    result = reconciler.run_pass()

    assert result.status == "partial"
    assert result.taxonomy.status == "synced"
    assert result.catalog.status == "failed"
    assert result.catalog.watermark_after is None
    assert store.load() == SyncWatermark(taxonomy_hash=77, catalog_cursor=None)
    assert _rows(db_path, "SELECT COUNT(*) FROM app") == [(0,)]


def test_write_failure_fails_feed_without_advancing(tmp_path: Path) -> None:
    client = _steam_with_one_game()
    client.items[10] = CatalogItem(id=10, name="Game", tags=[TagWeight(404, 1)])
    reconciler, store, _ = _build(tmp_path, client)

    result = reconciler.run_pass()

    assert result.catalog.status == "failed"
    assert store.load().catalog_cursor is None

    client.items[10] = CatalogItem(id=10, name="Game", tags=[TagWeight(1, 1)])
    retry = reconciler.run_pass()

    assert retry.catalog.status == "synced"
    assert client.listing_calls == [None, None]


def test_watermark_save_failure_fails_the_feed(tmp_path: Path, monkeypatch) -> None:
    client = _steam_with_one_game()
    reconciler, store, db_path = _build(tmp_path, client)

    def refuse(watermark):
        raise WatermarkStoreError("read-only filesystem")

    monkeypatch.setattr(store, "save", refuse)

    result = reconciler.run_pass()

    assert result.status == "failed"
    assert result.watermark == SyncWatermark.empty()
    assert _rows(db_path, "SELECT COUNT(*) FROM tags") == [(2,)]


def test_explicit_empty_watermark_forces_full_listing(tmp_path: Path) -> None:
    client = _steam_with_one_game()
    reconciler, store, _ = _build(tmp_path, client)
    reconciler.run_pass()

    result = reconciler.run_pass(SyncWatermark.empty())

    assert result.taxonomy.status == "synced"
    assert result.catalog.status == "synced"
    assert client.listing_calls == [None, None]
    assert store.load() == SyncWatermark(taxonomy_hash=77, catalog_cursor=1000)


def test_player_counts_are_written_when_enabled(tmp_path: Path) -> None:
    client = _steam_with_one_game()
    client.player_counts[10] = 4321
    reconciler, _, db_path = _build(tmp_path, client, include_player_counts=True)

    reconciler.run_pass()

    assert _rows(db_path, "SELECT player_count FROM app WHERE app_id = 10") == [(4321,)]


def test_unexpected_errors_propagate(tmp_path: Path, monkeypatch) -> None:
    client = _steam_with_one_game()
    reconciler, _, _ = _build(tmp_path, client)

    def broken(since_hash):
        raise KeyError("bug")

    monkeypatch.setattr(client, "list_taxonomy", broken)

    with pytest.raises(KeyError):
        reconciler.run_pass()


def test_unopenable_database_fails_both_feeds_without_aborting(tmp_path: Path) -> None:
    client = _steam_with_one_game()
    db_dir = tmp_path / "not-a-file.db"
    db_dir.mkdir()
    store = WatermarkStore(tmp_path / "data.json")
    reconciler = Reconciler(client, StoreWriter.from_sqlite_path(db_dir), store)

    result = reconciler.run_pass()

    assert result.status == "failed"
    assert result.taxonomy.status == "failed"
    assert result.catalog.status == "failed"
    assert client.listing_calls == [None]
    assert client.detail_calls == [[10]]
    assert store.load().is_empty
