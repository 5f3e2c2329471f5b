from __future__ import annotations

import json
from pathlib import Path

from click.testing import CliRunner

from steamgraph.domain.models import SyncWatermark
from steamgraph.infrastructure.db import get_connection
from steamgraph.infrastructure.db.repositories import SyncRunRepository
from steamgraph.infrastructure.persistence import WatermarkStore
from steamgraph.interfaces.cli.__main__ import cli


def test_watermark_show_and_reset(tmp_path: Path) -> None:
    path = tmp_path / "data.json"
    WatermarkStore(path).save(SyncWatermark(taxonomy_hash=77, catalog_cursor=1000))
    runner = CliRunner()

    shown = runner.invoke(cli, ["watermark", "show", "--watermark", str(path)])

    assert shown.exit_code == 0, shown.output
    payload = json.loads(shown.output)
    assert payload["taxonomy_hash"] == 77
    assert payload["catalog_cursor"] == 1000

    reset = runner.invoke(cli, ["watermark", "reset", "--watermark", str(path), "--yes"])

    assert reset.exit_code == 0, reset.output
    assert not path.exists()

    again = runner.invoke(cli, ["watermark", "reset", "--watermark", str(path), "--yes"])
    assert "No watermark" in again.output


def test_watermark_show_when_missing(tmp_path: Path) -> None:
    result = CliRunner().invoke(
        cli, ["watermark", "show", "--watermark", str(tmp_path / "data.json")]
    )

    assert result.exit_code == 0, result.output
    payload = json.loads(result.output)
    assert payload["taxonomy_hash"] is None
    assert payload["catalog_cursor"] is None


def test_history_lists_recent_runs(tmp_path: Path) -> None:
    db_file = tmp_path / "steamgraph.db"
    runner = CliRunner()

    empty = runner.invoke(cli, ["history", "--db", str(db_file)])
    assert "No sync runs recorded yet" in empty.output

    with get_connection(db_file) as conn:
        repo = SyncRunRepository(conn)
        with conn:
            repo.record(feed="taxonomy", mode="full", started_at="t0", status="synced",
                        fetched=2, written=2, watermark_after=77)
            repo.record(feed="catalog", mode="full", started_at="t1", status="failed",
                        error="boom")

    result = runner.invoke(cli, ["history", "--db", str(db_file), "--feed", "catalog"])

    assert result.exit_code == 0, result.output
    assert "catalog" in result.output
    assert "boom" in result.output
    assert "taxonomy" not in result.output
