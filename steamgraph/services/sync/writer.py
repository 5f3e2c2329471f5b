"""Atomic, set-based writes of sync results into the SQLite store."""

from __future__ import annotations

import sqlite3
from typing import Sequence

from steamgraph.domain.models import CatalogItem, TaxonomyEntry
from steamgraph.infrastructure.db import DatabaseError
from steamgraph.infrastructure.db.repositories import AppRepository, TagRepository
from steamgraph.services.base import BaseService

# Connection setup failures (including a database directory that cannot be
# created) count as failed writes, same as statement errors.
_STORE_ERRORS = (sqlite3.Error, DatabaseError, OSError)


class StoreWriteError(Exception):
    """Raised after a rolled-back write; nothing from the batch was kept."""


class StoreWriter(BaseService):
    """Upserts tags and apps, one transaction per call.

    Empty input is a successful no-op and never reaches the database.
    """

    def upsert_taxonomy(self, entries: Sequence[TaxonomyEntry]) -> int:
        """Insert or rename tags by id. Returns the number of rows written.

        Raises:
            StoreWriteError: If the transaction failed and was rolled back.
        """
        if not entries:
            return 0

        def _write(conn: sqlite3.Connection) -> int:
            with conn:
                return TagRepository(conn).upsert_many(entries)

        try:
            written = self._with_connection(_write)
        except _STORE_ERRORS as exc:
            self._logger.error("Tag upsert rolled back: %s", exc)
            raise StoreWriteError(f"Failed to upsert {len(entries)} tags: {exc}") from exc
        self._logger.debug("Upserted %d tags", written)
        return written

    def upsert_catalog_items(self, items: Sequence[CatalogItem]) -> int:
        """Upsert apps and their tag weights in one transaction.

        Core fields are written first, then every ``(app_id, tag_id)``
        weight. Either step failing rolls back both, so no app is left with
        stale weights and no weight points at a half-written app. Tag ids
        must already exist; an unknown tag fails the whole batch.

        Returns the number of apps written.

        Raises:
            StoreWriteError: If the transaction failed and was rolled back.
        """
        if not items:
            return 0

        def _write(conn: sqlite3.Connection) -> tuple[int, int]:
            apps = AppRepository(conn)
            with conn:
                written = apps.upsert_many(items)
                weights = apps.upsert_tag_weights(items)
            return written, weights

        try:
            written, weights = self._with_connection(_write)
        except _STORE_ERRORS as exc:
            self._logger.error("App upsert rolled back: %s", exc)
            raise StoreWriteError(f"Failed to upsert {len(items)} apps: {exc}") from exc
        self._logger.debug("Upserted %d apps with %d tag weights", written, weights)
        return written
