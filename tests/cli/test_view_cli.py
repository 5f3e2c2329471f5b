from __future__ import annotations

import json
from pathlib import Path

from click.testing import CliRunner

from steamgraph.domain.models import CatalogItem, TagWeight, TaxonomyEntry
from steamgraph.interfaces.cli.__main__ import cli
from steamgraph.services.sync import StoreWriter


def _seed_db(db_path: Path) -> None:
    writer = StoreWriter.from_sqlite_path(db_path)
    writer.upsert_taxonomy(
        [TaxonomyEntry(1, "Indie"), TaxonomyEntry(2, "RPG"), TaxonomyEntry(3, "Co-op")]
    )
    writer.upsert_catalog_items(
        [
            CatalogItem(
                id=10,
                name="Game",
                popularity=42,
                tags=[TagWeight(1, 5), TagWeight(2, 9), TagWeight(3, 1)],
            ),
            CatalogItem(id=20, name="Other"),
        ]
    )


def test_view_cli_text_output(tmp_path: Path) -> None:
    db_file = tmp_path / "steamgraph.db"
    _seed_db(db_file)

    result = CliRunner().invoke(
        cli, ["view", "--db", str(db_file), "--limit", "1", "--max-tags", "2"]
    )

    assert result.exit_code == 0, result.output
    assert "Showing 1 of 2 app(s), 3 tag(s) known:" in result.output
    assert "- [10] Game | players=42 | tags: RPG (9), Indie (5), +1 more" in result.output
    assert "[20]" not in result.output


def test_view_cli_json_output(tmp_path: Path) -> None:
    db_file = tmp_path / "steamgraph.db"
    _seed_db(db_file)

    result = CliRunner().invoke(
        cli, ["view", "--db", str(db_file), "--limit", "0", "--json-output"]
    )

    assert result.exit_code == 0, result.output
    payload = json.loads(result.output)
    assert [node["id"] for node in payload] == [10, 20]
    assert payload[0]["playerCount"] == 42
    assert payload[0]["tags"][0] == {"id": 2, "name": "RPG", "weight": 9}
    assert payload[1]["tags"] == []


def test_view_cli_empty_database(tmp_path: Path) -> None:
    result = CliRunner().invoke(cli, ["view", "--db", str(tmp_path / "empty.db")])

    assert result.exit_code == 0, result.output
    assert "No apps stored yet" in result.output
