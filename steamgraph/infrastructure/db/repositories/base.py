"""Base repository class with shared database query helpers.

Repositories never commit on their own; the caller owns the transaction so
several repositories can take part in one atomic write.
"""

from __future__ import annotations

import sqlite3
from typing import Any, Iterable, Sequence


class BaseRepository:
    """Base class for all repository implementations."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        """Initialize repository with a database connection.

        Args:
            conn: SQLite database connection
        """
        self.conn = conn

    def _fetch_all_as_dicts(
        self, query: str, params: tuple[Any, ...] | None = None
    ) -> list[dict[str, Any]]:
        """Execute query and return all rows as dictionaries.

        Args:
            query: SQL query string
            params: Query parameters (optional)

        Returns:
            List of dictionaries with column names as keys
        """
        cur = self.conn.execute(query, params or ())
        columns = [c[0] for c in cur.description]
        return [dict(zip(columns, row)) for row in cur.fetchall()]

    def _fetch_one_as_dict(
        self, query: str, params: tuple[Any, ...] | None = None
    ) -> dict[str, Any] | None:
        """Execute query and return first row as dictionary, or None."""
        cur = self.conn.execute(query, params or ())
        row = cur.fetchone()
        if not row:
            return None
        columns = [c[0] for c in cur.description]
        return dict(zip(columns, row))

    def _fetch_scalar(self, query: str, params: tuple[Any, ...] | None = None) -> Any:
        """Execute query and return first column of first row (or None)."""
        cur = self.conn.execute(query, params or ())
        row = cur.fetchone()
        return row[0] if row else None

    def _execute(
        self, query: str, params: tuple[Any, ...] | None = None
    ) -> sqlite3.Cursor:
        """Execute query and return cursor for custom processing."""
        return self.conn.execute(query, params or ())

    def _execute_many(
        self, query: str, rows: Iterable[Sequence[Any]]
    ) -> sqlite3.Cursor:
        """Execute a parameterised statement once per row.

        This is the set-based write primitive used by the upserts: one
        prepared statement, many parameter tuples, same transaction.
        """
        return self.conn.executemany(query, rows)
