from __future__ import annotations

from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from steamgraph.app import api as api_module
from steamgraph.app.api import create_app
from steamgraph.app.config import AppSettings, SteamSettings
from steamgraph.domain.models import CatalogItem, TagWeight, TaxonomyEntry
from steamgraph.infrastructure.observability import record_api_request
from steamgraph.services.sync import StoreWriter, SyncAlreadyRunningError, SyncStatus


class _StubSyncService:
    def __init__(self, busy: bool = False):
        self.busy = busy
        self.started: list[bool] = []

    def start_background(self, *, full=False):
        if self.busy:
            raise SyncAlreadyRunningError("A sync pass is already running")
        self.started.append(full)

    def get_status(self):
        return SyncStatus(state="running" if self.busy else "idle")


@pytest.fixture(autouse=True)
def _quiet_logging(monkeypatch):
    monkeypatch.setattr(api_module, "configure_logging", lambda *args, **kwargs: None)


def _settings(tmp_path: Path, api_key: str | None = None) -> AppSettings:
    return AppSettings(
        db_path=tmp_path / "steamgraph.db",
        watermark_path=tmp_path / "data.json",
        steam=SteamSettings(api_key=api_key),
    )


def _seed(db_path: Path) -> None:
    writer = StoreWriter.from_sqlite_path(db_path)
    writer.upsert_taxonomy([TaxonomyEntry(1, "Indie")])
    writer.upsert_catalog_items(
        [
            CatalogItem(id=10, name="Game", popularity=3, tags=[TagWeight(1, 5)]),
            CatalogItem(id=20, name="Bare"),
        ]
    )


def test_startup_launches_one_background_pass(tmp_path: Path) -> None:
    service = _StubSyncService()
    app = create_app(_settings(tmp_path), sync_service=service)

    with TestClient(app) as client:
        assert client.get("/").json()["name"] == "Steamgraph API"

    assert service.started == [False]
    assert (tmp_path / "steamgraph.db").exists()


def test_nodes_endpoint(tmp_path: Path) -> None:
    _seed(tmp_path / "steamgraph.db")
    app = create_app(
        _settings(tmp_path), sync_service=_StubSyncService(), sync_on_startup=False
    )

    with TestClient(app) as client:
        response = client.get("/nodes")
        limited = client.get("/nodes", params={"limit": 1})
        invalid = client.get("/nodes", params={"limit": 0})
        stats = client.get("/stats")

    assert response.status_code == 200
    assert response.json() == [
        {
            "id": 10,
            "name": "Game",
            "description": "",
            "color": "#000000",
            "playerCount": 3,
            "tags": [{"id": 1, "name": "Indie", "weight": 5}],
        },
        {
            "id": 20,
            "name": "Bare",
            "description": "",
            "color": "#000000",
            "playerCount": 0,
            "tags": [],
        },
    ]
    assert [node["id"] for node in limited.json()] == [10]
    assert invalid.status_code == 422
    assert stats.json() == {"apps": 2, "tags": 1}


def test_trigger_sync(tmp_path: Path) -> None:
    service = _StubSyncService()
    app = create_app(_settings(tmp_path), sync_service=service, sync_on_startup=False)

    with TestClient(app) as client:
        response = client.post("/sync", params={"full": "true"})
        status = client.get("/sync/status")

    assert response.status_code == 202
    assert response.json() == {"status": "started", "full": True}
    assert service.started == [True]
    assert status.json()["state"] == "idle"


def test_trigger_sync_while_running_conflicts(tmp_path: Path) -> None:
    app = create_app(
        _settings(tmp_path), sync_service=_StubSyncService(busy=True), sync_on_startup=False
    )

    with TestClient(app) as client:
        response = client.post("/sync")

    assert response.status_code == 409


def test_sync_disabled_without_api_key(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.delenv("STEAM_API_KEY", raising=False)
    app = create_app(_settings(tmp_path, api_key=None))

    with TestClient(app) as client:
        response = client.post("/sync")
        nodes = client.get("/nodes")

    assert response.status_code == 503
    assert nodes.json() == []


def test_metrics_endpoint(tmp_path: Path) -> None:
    record_api_request("IStoreService/GetAppList/v1", 200, 0.25)
    app = create_app(
        _settings(tmp_path), sync_service=_StubSyncService(), sync_on_startup=False
    )

    with TestClient(app) as client:
        response = client.get("/metrics")

    assert response.status_code == 200
    assert (
        'steam_api_requests_total{endpoint="IStoreService/GetAppList/v1",status="200"} 1.0'
        in response.text
    )
