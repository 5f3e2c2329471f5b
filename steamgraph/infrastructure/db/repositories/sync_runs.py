from __future__ import annotations

from typing import Any, Dict, List

from ..connection import iso_utcnow
from .base import BaseRepository


class SyncRunRepository(BaseRepository):
    """Append-only history of feed outcomes."""

    def record(
        self,
        *,
        feed: str,
        mode: str | None,
        started_at: str,
        status: str,
        fetched: int = 0,
        written: int = 0,
        watermark_before: int | None = None,
        watermark_after: int | None = None,
        error: str | None = None,
        finished_at: str | None = None,
    ) -> int:
        cur = self._execute(
            """
            INSERT INTO sync_runs (
                feed, mode, started_at, finished_at, status, fetched, written,
                watermark_before, watermark_after, error
            )
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                feed,
                mode,
                started_at,
                finished_at or iso_utcnow(),
                status,
                fetched,
                written,
                watermark_before,
                watermark_after,
                error,
            ),
        )
        return cur.lastrowid or 0

    def list_recent(self, limit: int = 20, feed: str | None = None) -> List[Dict[str, Any]]:
        query = """
            SELECT id, feed, mode, started_at, finished_at, status, fetched,
                   written, watermark_before, watermark_after, error
            FROM sync_runs
        """
        params: tuple[Any, ...] = ()
        if feed:
            query += " WHERE feed = ?"
            params = (feed,)
        query += " ORDER BY id DESC LIMIT ?"
        params = params + (int(limit),)
        return self._fetch_all_as_dicts(query, params)
