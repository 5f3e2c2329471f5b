"""Single-flight coordination of sync passes.

The service owns the wiring (HTTP client, catalog client, writer, watermark
store), makes sure only one pass runs at a time and can launch a pass as a
background task whose outcome is logged and kept for status queries.
"""

from __future__ import annotations

import asyncio
import sqlite3
import threading
from contextlib import AbstractContextManager
from dataclasses import dataclass
from typing import Literal

from steamgraph.app.config import AppSettings
from steamgraph.domain.models import SyncWatermark
from steamgraph.infrastructure.db import DatabaseError, get_connection, iso_utcnow
from steamgraph.infrastructure.db.repositories import SyncRunRepository
from steamgraph.infrastructure.http import SteamHttpClient
from steamgraph.infrastructure.persistence import WatermarkStore
from steamgraph.infrastructure.steam import SteamCatalogClient
from steamgraph.services.base import BaseService, ConnectionFactory

from .reconciler import Reconciler, SyncPassResult
from .writer import StoreWriter

SyncState = Literal["idle", "running"]


class SyncAlreadyRunningError(RuntimeError):
    """Raised when a pass is requested while another one is in flight."""


@dataclass
class SyncStatus:
    """Snapshot of the service state for CLI and HTTP status output."""

    state: SyncState
    current_run_started_at: str | None = None
    last_result: SyncPassResult | None = None
    last_error: str | None = None

    def to_dict(self) -> dict[str, object]:
        return {
            "state": self.state,
            "current_run_started_at": self.current_run_started_at,
            "last_result": self.last_result.to_dict() if self.last_result else None,
            "last_error": self.last_error,
        }


class SyncService(BaseService):
    """Run sync passes one at a time and remember how the last one went."""

    def __init__(
        self, reconciler: Reconciler, connection_factory: ConnectionFactory
    ) -> None:
        super().__init__(connection_factory)
        self._reconciler = reconciler
        self._lock = threading.Lock()
        self._task: asyncio.Task | None = None
        self._status = SyncStatus(state="idle")

    @classmethod
    def from_settings(cls, settings: AppSettings) -> "SyncService":
        """Wire the production collaborators from resolved settings."""
        steam = settings.steam
        http_client = SteamHttpClient(
            steam.require_api_key(),
            base_url=steam.base_url,
            timeout_seconds=steam.timeout_seconds,
            retry_attempts=steam.retry_attempts,
            backoff_base_seconds=steam.backoff_base_seconds,
            requests_per_second=steam.requests_per_second,
        )
        client = SteamCatalogClient(
            http_client,
            country_code=steam.country_code,
            language=steam.language,
            page_size=steam.page_size,
            detail_chunk_size=steam.detail_chunk_size,
            tag_count=steam.tag_count,
        )

        def connection_factory() -> AbstractContextManager[sqlite3.Connection]:
            return get_connection(settings.db_path)

        writer = StoreWriter(connection_factory)
        reconciler = Reconciler(
            client,
            writer,
            WatermarkStore(settings.watermark_path),
            include_player_counts=steam.include_player_counts,
        )
        return cls(reconciler, connection_factory)

    @property
    def is_running(self) -> bool:
        return self._lock.locked()

    def get_status(self) -> SyncStatus:
        return self._status

    def run_pass(self, *, full: bool = False) -> SyncPassResult:
        """Run one pass in the calling thread.

        ``full`` ignores the stored watermark for this pass; the advanced
        watermark is still written back.

        Raises:
            SyncAlreadyRunningError: If another pass is in flight.
        """
        if not self._lock.acquire(blocking=False):
            raise SyncAlreadyRunningError("A sync pass is already running")
        try:
            self._status.state = "running"
            self._status.current_run_started_at = iso_utcnow()
            try:
                result = self._reconciler.run_pass(
                    SyncWatermark.empty() if full else None
                )
            except Exception as exc:
                self._status.last_error = str(exc)
                raise
            self._status.last_result = result
            self._status.last_error = None if result.ok else self._errors(result)
            self._record_history(result)
            return result
        finally:
            self._status.state = "idle"
            self._status.current_run_started_at = None
            self._lock.release()

    async def run_pass_async(self, *, full: bool = False) -> SyncPassResult:
        """Run one pass in a worker thread without blocking the event loop."""
        return await asyncio.to_thread(self.run_pass, full=full)

    def start_background(self, *, full: bool = False) -> asyncio.Task:
        """Fire a pass as a background task on the running event loop.

        The task is not cancelled by anything in this service; it runs to
        completion or failure and its outcome is logged.

        Raises:
            SyncAlreadyRunningError: If another pass is in flight.
        """
        if self.is_running or (self._task is not None and not self._task.done()):
            raise SyncAlreadyRunningError("A sync pass is already running")
        task = asyncio.get_running_loop().create_task(self.run_pass_async(full=full))
        task.add_done_callback(self._on_background_done)
        self._task = task
        return task

    def _on_background_done(self, task: asyncio.Task) -> None:
        if task.cancelled():
            self._logger.warning("Background sync task was cancelled")
            return
        exc = task.exception()
        if exc is not None:
            self._logger.error("Background sync failed: %s", exc, exc_info=exc)
            return
        result = task.result()
        self._logger.info("Background sync finished with status %s", result.status)

    def _errors(self, result: SyncPassResult) -> str:
        return "; ".join(
            f"{feed.feed}: {feed.error}" for feed in result.feeds if feed.error
        )

    def _record_history(self, result: SyncPassResult) -> None:
        def _write(conn: sqlite3.Connection) -> None:
            repo = SyncRunRepository(conn)
            with conn:
                for feed in result.feeds:
                    repo.record(
                        feed=feed.feed,
                        mode=feed.mode,
                        started_at=feed.started_at,
                        finished_at=feed.finished_at,
                        status=feed.status,
                        fetched=feed.fetched,
                        written=feed.written,
                        watermark_before=feed.watermark_before,
                        watermark_after=feed.watermark_after,
                        error=feed.error,
                    )

        try:
            self._with_connection(_write)
        except (sqlite3.Error, DatabaseError) as exc:
            self._logger.warning("Could not record sync history: %s", exc)
