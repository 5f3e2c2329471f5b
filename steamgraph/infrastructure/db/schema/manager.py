from __future__ import annotations

from .tables import (
    SCHEMA_APP_SQL,
    SCHEMA_APP_TAGS_SQL,
    SCHEMA_SYNC_RUNS_SQL,
    SCHEMA_TAGS_SQL,
)


def ensure_schema(conn) -> None:
    """Create the catalog tables if they do not exist yet.

    Safe to call on every start; existing tables and rows are left alone.
    """

    conn.executescript(SCHEMA_APP_SQL)
    conn.executescript(SCHEMA_TAGS_SQL)
    conn.executescript(SCHEMA_APP_TAGS_SQL)
    conn.executescript(SCHEMA_SYNC_RUNS_SQL)
