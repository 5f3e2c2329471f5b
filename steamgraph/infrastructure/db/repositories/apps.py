from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional

from steamgraph.domain.models import DEFAULT_COLOR, CatalogItem

from .base import BaseRepository


class AppRepository(BaseRepository):
    """Rows of the ``app`` table and their ``app_tags`` weights."""

    def upsert_many(self, items: Iterable[CatalogItem]) -> int:
        rows = [
            (
                item.id,
                item.name,
                item.description,
                item.color or DEFAULT_COLOR,
                item.popularity or 0,
            )
            for item in items
        ]
        if not rows:
            return 0
        self._execute_many(
            """
            INSERT INTO app (app_id, name, description, color, player_count)
            VALUES (?, ?, ?, ?, ?)
            ON CONFLICT(app_id) DO UPDATE SET
                name = excluded.name,
                description = excluded.description,
                color = excluded.color,
                player_count = excluded.player_count
            """,
            rows,
        )
        return len(rows)

    def upsert_tag_weights(self, items: Iterable[CatalogItem]) -> int:
        rows = [
            (item.id, tag.tag_id, tag.weight) for item in items for tag in item.tags
        ]
        if not rows:
            return 0
        self._execute_many(
            """
            INSERT INTO app_tags (app_id, tag_id, weight)
            VALUES (?, ?, ?)
            ON CONFLICT(app_id, tag_id) DO UPDATE SET
                weight = excluded.weight
            """,
            rows,
        )
        return len(rows)

    def get(self, app_id: int) -> Optional[Dict[str, Any]]:
        return self._fetch_one_as_dict(
            """
            SELECT app_id, name, description, color, player_count
            FROM app
            WHERE app_id = ?
            """,
            (app_id,),
        )

    def tag_weights(self, app_id: int) -> Dict[int, int]:
        rows = self._execute(
            "SELECT tag_id, weight FROM app_tags WHERE app_id = ? ORDER BY tag_id",
            (app_id,),
        ).fetchall()
        return {row[0]: row[1] for row in rows}

    def count(self) -> int:
        return int(self._fetch_scalar("SELECT COUNT(*) FROM app") or 0)

    def list_nodes(self, limit: int | None = None) -> List[Dict[str, Any]]:
        """Return every app once, with its tags as ``{id, name, weight}`` dicts.

        Apps without tags get an empty list. Grouping happens here rather
        than in SQL so the query works without the JSON1 extension.
        """
        app_query = """
            SELECT app_id, name, description, color, player_count
            FROM app
            ORDER BY app_id
        """
        params: tuple[Any, ...] = ()
        if limit is not None:
            app_query += " LIMIT ?"
            params = (int(limit),)
        nodes: Dict[int, Dict[str, Any]] = {}
        for row in self._execute(app_query, params).fetchall():
            nodes[row[0]] = {
                "id": row[0],
                "name": row[1],
                "description": row[2],
                "color": row[3] or DEFAULT_COLOR,
                "player_count": row[4] or 0,
                "tags": [],
            }
        if not nodes:
            return []

        tag_rows = self._execute(
            """
            SELECT at.app_id, t.tag_id, t.name, at.weight
            FROM app_tags AS at
            JOIN tags AS t ON t.tag_id = at.tag_id
            ORDER BY at.app_id, at.weight DESC, t.tag_id
            """
        ).fetchall()
        for app_id, tag_id, tag_name, weight in tag_rows:
            node = nodes.get(app_id)
            if node is None:
                continue
            node["tags"].append({"id": tag_id, "name": tag_name, "weight": weight})
        return list(nodes.values())
