from __future__ import annotations

import importlib
import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from steamgraph.app.config import ConfigError
from steamgraph.domain.models import SyncWatermark
from steamgraph.interfaces.cli import cli
from steamgraph.services.sync import FeedResult, SyncAlreadyRunningError, SyncPassResult

sync_module = importlib.import_module("steamgraph.interfaces.cli.sync")


def _result(catalog_status: str = "synced") -> SyncPassResult:
    return SyncPassResult(
        taxonomy=FeedResult(
            feed="taxonomy", status="synced", mode="full", fetched=2, written=2,
            watermark_before=None, watermark_after=77,
        ),
        catalog=FeedResult(
            feed="catalog", status=catalog_status, mode="full", fetched=1,
            written=1 if catalog_status == "synced" else 0,
            watermark_before=None,
            watermark_after=1000 if catalog_status == "synced" else None,
            error="app list unavailable" if catalog_status == "failed" else None,
        ),
        watermark=SyncWatermark(77, 1000 if catalog_status == "synced" else None),
        started_at="2024-01-01T00:00:00Z",
        finished_at="2024-01-01T00:00:05Z",
    )


class _StubSyncService:
    instances: list["_StubSyncService"] = []
    result = _result()
    error: Exception | None = None

    def __init__(self, settings):
        self.settings = settings
        self.calls: list[bool] = []

    @classmethod
    def from_settings(cls, settings):
        if cls.error is not None:
            raise cls.error
        service = cls(settings)
        cls.instances.append(service)
        return service

    def run_pass(self, *, full=False):
        self.calls.append(full)
        return self.result


@pytest.fixture
def stub_service(monkeypatch):
    _StubSyncService.instances = []
    _StubSyncService.result = _result()
    _StubSyncService.error = None
    monkeypatch.setattr(sync_module, "SyncService", _StubSyncService)
    monkeypatch.setattr(sync_module, "configure_logging", lambda **kwargs: None)
    return _StubSyncService


def _base_args(tmp_path: Path) -> list[str]:
    return [
        "sync",
        "--db",
        str(tmp_path / "steamgraph.db"),
        "--watermark",
        str(tmp_path / "data.json"),
        "--api-key",
        "secret",
    ]


def test_sync_prints_summary(tmp_path: Path, stub_service) -> None:
    result = CliRunner().invoke(cli, _base_args(tmp_path))

    assert result.exit_code == 0, result.output
    assert "Sync success" in result.output
    assert "taxonomy" in result.output
    assert "catalog" in result.output
    service = stub_service.instances[0]
    assert service.calls == [False]
    assert service.settings.steam.api_key == "secret"
    assert service.settings.db_path == tmp_path / "steamgraph.db"


def test_sync_full_and_player_counts_flags(tmp_path: Path, stub_service) -> None:
    result = CliRunner().invoke(
        cli, _base_args(tmp_path) + ["--full", "--player-counts"]
    )

    assert result.exit_code == 0, result.output
    service = stub_service.instances[0]
    assert service.calls == [True]
    assert service.settings.steam.include_player_counts is True


def test_sync_json_output(tmp_path: Path, stub_service) -> None:
    result = CliRunner().invoke(cli, _base_args(tmp_path) + ["--json-output"])

    assert result.exit_code == 0, result.output
    payload = json.loads(result.output)
    assert payload["status"] == "success"
    assert payload["watermark"] == {"taxonomy_hash": 77, "catalog_cursor": 1000}
    assert payload["catalog"]["written"] == 1


def test_sync_exits_nonzero_when_a_feed_failed(tmp_path: Path, stub_service) -> None:
    stub_service.result = _result(catalog_status="failed")

    result = CliRunner().invoke(cli, _base_args(tmp_path))

    assert result.exit_code == 1
    assert "app list unavailable" in result.output


def test_sync_without_api_key_is_a_usage_error(tmp_path: Path, stub_service) -> None:
    stub_service.error = ConfigError("No Steam API key configured")

    result = CliRunner().invoke(cli, _base_args(tmp_path))

    assert result.exit_code == 1
    assert "No Steam API key configured" in result.output


def test_sync_already_running(tmp_path: Path, stub_service, monkeypatch) -> None:
    def busy(self, *, full=False):
        raise SyncAlreadyRunningError("A sync pass is already running")

    monkeypatch.setattr(_StubSyncService, "run_pass", busy)

    result = CliRunner().invoke(cli, _base_args(tmp_path))

    assert result.exit_code == 1
    assert "already running" in result.output
