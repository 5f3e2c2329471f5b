"""Shared FastAPI dependencies for Steamgraph application components."""

from __future__ import annotations

import sqlite3
from typing import Annotated, Iterator

from fastapi import Depends, HTTPException, Request, status

from steamgraph.app.config import AppSettings
from steamgraph.infrastructure.db import ensure_schema, get_connection
from steamgraph.infrastructure.db.repositories import AppRepository, TagRepository
from steamgraph.services.catalog import CatalogViewService
from steamgraph.services.sync import SyncService

__all__ = [
    "get_settings",
    "get_db_connection",
    "get_catalog_view_service",
    "get_sync_service",
    "CatalogViewServiceDep",
    "SyncServiceDep",
]


def get_settings(request: Request) -> AppSettings:
    return request.app.state.settings


def get_db_connection(
    settings: AppSettings = Depends(get_settings),
) -> Iterator[sqlite3.Connection]:
    """Provide a SQLite connection with the required schema ensured.

    Uses check_same_thread=False to allow FastAPI to use the connection
    across different threads (required for async request handling).
    """

    with get_connection(settings.db_path, check_same_thread=False) as conn:
        ensure_schema(conn)
        yield conn


def get_catalog_view_service(
    conn: sqlite3.Connection = Depends(get_db_connection),
) -> CatalogViewService:
    return CatalogViewService(AppRepository(conn), TagRepository(conn))


def get_sync_service(request: Request) -> SyncService:
    service = getattr(request.app.state, "sync_service", None)
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Sync is not configured (missing Steam API key?)",
        )
    return service


# Annotated dependency types
CatalogViewServiceDep = Annotated[CatalogViewService, Depends(get_catalog_view_service)]
SyncServiceDep = Annotated[SyncService, Depends(get_sync_service)]
