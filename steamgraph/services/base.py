"""Base service class with shared connection and infrastructure patterns.

This module provides a base class for service layer implementations,
standardizing connection management, logging, and schema initialization.
"""

from __future__ import annotations

import sqlite3
from contextlib import AbstractContextManager
from pathlib import Path
from typing import Callable, TypeVar

from steamgraph.infrastructure.db import ensure_schema, get_connection
from steamgraph.infrastructure.observability import get_logger

ConnectionFactory = Callable[[], AbstractContextManager[sqlite3.Connection]]
T = TypeVar("T")
S = TypeVar("S", bound="BaseService")


class BaseService:
    """Base class for services backed by the SQLite store.

    Provides shared infrastructure for:
    - Connection factory pattern (dependency injection for testing)
    - Automatic schema initialization
    - Consistent logging setup

    Example usage:
        # Production usage:
        writer = StoreWriter.from_sqlite_path("/path/to/steamgraph.db")

        # Test usage with a custom factory:
        writer = StoreWriter(lambda: get_connection(tmp_path / "test.db"))
    """

    def __init__(self, connection_factory: ConnectionFactory) -> None:
        """Initialize service with a connection factory.

        Args:
            connection_factory: Callable returning a context manager that yields
                               a sqlite3.Connection
        """
        self._connection_factory = connection_factory
        self._logger = get_logger(self.__class__.__module__)

    @classmethod
    def from_sqlite_path(cls: type[S], db_path: str | Path) -> S:
        """Create a service bound to a SQLite database path."""

        def connection_factory() -> AbstractContextManager[sqlite3.Connection]:
            return get_connection(db_path)

        return cls(connection_factory)

    def _with_connection(self, fn: Callable[[sqlite3.Connection], T]) -> T:
        """Execute a function within a database connection context.

        Automatically ensures the schema is initialized before executing
        the provided function.
        """
        with self._connection_factory() as conn:
            ensure_schema(conn)
            return fn(conn)
