from __future__ import annotations

from typing import Iterable

from steamgraph.domain.models import TaxonomyEntry

from .base import BaseRepository


class TagRepository(BaseRepository):
    def upsert_many(self, entries: Iterable[TaxonomyEntry]) -> int:
        rows = [(entry.id, entry.name) for entry in entries]
        if not rows:
            return 0
        self._execute_many(
            """
            INSERT INTO tags (tag_id, name)
            VALUES (?, ?)
            ON CONFLICT(tag_id) DO UPDATE SET
                name = excluded.name
            """,
            rows,
        )
        return len(rows)

    def get(self, tag_id: int) -> TaxonomyEntry | None:
        row = self._fetch_one_as_dict(
            "SELECT tag_id, name FROM tags WHERE tag_id = ?", (tag_id,)
        )
        if row is None:
            return None
        return TaxonomyEntry(id=row["tag_id"], name=row["name"])

    def list(self) -> list[TaxonomyEntry]:
        rows = self._execute("SELECT tag_id, name FROM tags ORDER BY tag_id").fetchall()
        return [TaxonomyEntry(id=row[0], name=row[1]) for row in rows]

    def count(self) -> int:
        return int(self._fetch_scalar("SELECT COUNT(*) FROM tags") or 0)
