"""Shared helpers for composing CLI command contexts.

This module centralises common CLI wiring such as resolving configuration
and building SQLite connections with the project defaults applied.
"""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, ContextManager, Iterator

import click

from steamgraph.app.config import AppSettings, ConfigError, load_settings
from steamgraph.infrastructure.db import ensure_schema, get_connection
from steamgraph.infrastructure.db.repositories import AppRepository, TagRepository
from steamgraph.infrastructure.persistence import WatermarkStore
from steamgraph.services.catalog import CatalogViewService


@dataclass(frozen=True)
class CLIContext:
    """Container for CLI dependencies and resolved settings."""

    settings: AppSettings
    connection_factory: Callable[[], ContextManager[sqlite3.Connection]]

    @property
    def db_path(self) -> Path:
        return self.settings.db_path

    @contextmanager
    def connect(self) -> Iterator[sqlite3.Connection]:
        """Open a configured SQLite connection and ensure the schema exists."""

        with self.connection_factory() as connection:
            ensure_schema(connection)
            yield connection

    def watermark_store(self) -> WatermarkStore:
        return WatermarkStore(self.settings.watermark_path)


@contextmanager
def catalog_view_service(cli_context: CLIContext) -> Iterator[CatalogViewService]:
    """Yield a CatalogViewService wired to the CLI context connection."""

    with cli_context.connect() as conn:
        yield CatalogViewService(AppRepository(conn), TagRepository(conn))


def build_cli_context(
    *,
    config_path: str | Path | None = None,
    db_path: str | Path | None = None,
    watermark_path: str | Path | None = None,
    api_key: str | None = None,
) -> CLIContext:
    """Build the CLI context with resolved settings and connection factory."""

    try:
        settings = load_settings(
            config_path,
            db_path=Path(db_path).expanduser() if db_path is not None else None,
            watermark_path=(
                Path(watermark_path).expanduser() if watermark_path is not None else None
            ),
            api_key=api_key,
        )
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    def connection_factory() -> ContextManager[sqlite3.Connection]:
        return get_connection(settings.db_path)

    return CLIContext(settings=settings, connection_factory=connection_factory)
