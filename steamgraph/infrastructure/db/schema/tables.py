from __future__ import annotations

SCHEMA_APP_SQL = """
CREATE TABLE IF NOT EXISTS app (
    app_id INTEGER PRIMARY KEY,
    name TEXT,
    description TEXT,
    color TEXT DEFAULT '#000000',
    player_count INTEGER DEFAULT 0
);
"""

SCHEMA_TAGS_SQL = """
CREATE TABLE IF NOT EXISTS tags (
    tag_id INTEGER PRIMARY KEY,
    name TEXT NOT NULL
);
"""

SCHEMA_APP_TAGS_SQL = """
CREATE TABLE IF NOT EXISTS app_tags (
    app_id INTEGER NOT NULL REFERENCES app (app_id),
    tag_id INTEGER NOT NULL REFERENCES tags (tag_id),
    weight INTEGER NOT NULL,
    PRIMARY KEY (app_id, tag_id)
);
CREATE INDEX IF NOT EXISTS idx_app_tags_tag_id ON app_tags (tag_id);
"""

SCHEMA_SYNC_RUNS_SQL = """
CREATE TABLE IF NOT EXISTS sync_runs (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    feed TEXT NOT NULL,
    mode TEXT,
    started_at TEXT NOT NULL,
    finished_at TEXT,
    status TEXT,
    fetched INTEGER DEFAULT 0,
    written INTEGER DEFAULT 0,
    watermark_before INTEGER,
    watermark_after INTEGER,
    error TEXT
);
CREATE INDEX IF NOT EXISTS idx_sync_runs_feed ON sync_runs (feed);
"""
