"""FastAPI application serving the synced Steam app/tag graph.

Run with ``uvicorn steamgraph.app.api:app``. On startup the schema is
ensured and one sync pass is launched in the background; requests are
served from the store's last committed state while it runs.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, HTTPException, Query, Response, status

from steamgraph import __version__
from steamgraph.app.config import AppSettings, ConfigError, load_settings
from steamgraph.app.dependencies import CatalogViewServiceDep, SyncServiceDep
from steamgraph.infrastructure.db import ensure_schema, get_connection
from steamgraph.infrastructure.observability import (
    configure_logging,
    format_prometheus,
    get_logger,
)
from steamgraph.services.dto import CatalogStatsDTO, NodeDTO
from steamgraph.services.sync import SyncAlreadyRunningError, SyncService

logger = get_logger(__name__)


def create_app(
    settings: AppSettings | None = None,
    *,
    sync_service: SyncService | None = None,
    sync_on_startup: bool = True,
) -> FastAPI:
    """Build the application.

    ``settings`` and ``sync_service`` default to the ones derived from
    ``config.json`` and the environment when the app starts.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        configure_logging()
        resolved = settings or load_settings()
        app.state.settings = resolved
        logger.info("DB: Init")
        with get_connection(resolved.db_path) as conn:
            ensure_schema(conn)
        logger.info("DB: Database ready")

        service = sync_service
        if service is None:
            try:
                service = SyncService.from_settings(resolved)
            except ConfigError as exc:
                logger.error("Steam sync disabled: %s", exc)
        app.state.sync_service = service

        if service is not None and sync_on_startup:
            service.start_background()
        yield

    app = FastAPI(title="Steamgraph API", version=__version__, lifespan=lifespan)

    @app.get("/")
    async def root():
        """API root endpoint with links."""
        return {
            "name": "Steamgraph API",
            "version": __version__,
            "docs": "/docs",
            "endpoints": {
                "nodes": "/nodes",
                "stats": "/stats",
                "sync": "/sync",
                "sync_status": "/sync/status",
                "metrics": "/metrics",
            },
        }

    @app.get("/nodes", response_model=list[NodeDTO])
    def list_nodes(
        service: CatalogViewServiceDep,
        limit: int | None = Query(None, ge=1),
    ) -> list[NodeDTO]:
        """All apps with their weighted tags."""
        return service.list_nodes(limit=limit)

    @app.get("/stats", response_model=CatalogStatsDTO)
    def stats(service: CatalogViewServiceDep) -> CatalogStatsDTO:
        return service.stats()

    @app.post("/sync", status_code=status.HTTP_202_ACCEPTED)
    async def trigger_sync(service: SyncServiceDep, full: bool = False):
        """Start a sync pass in the background."""
        try:
            service.start_background(full=full)
        except SyncAlreadyRunningError as exc:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))
        return {"status": "started", "full": full}

    @app.get("/sync/status")
    async def sync_status(service: SyncServiceDep):
        return service.get_status().to_dict()

    @app.get("/metrics")
    async def metrics() -> Response:
        return Response(content=format_prometheus(), media_type="text/plain; version=0.0.4")

    return app


app = create_app()
