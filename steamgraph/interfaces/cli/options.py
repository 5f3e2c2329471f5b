"""Click options shared by several commands."""

from __future__ import annotations

from typing import Any, Callable

import click

F = Callable[..., Any]


def common_options(fn: F) -> F:
    """Add ``--config``, ``--db`` and ``--watermark`` to a command."""
    fn = click.option(
        "--watermark",
        "watermark_path",
        type=click.Path(dir_okay=False, path_type=str),
        default=None,
        help="Path to the sync watermark file (default from config: data.json).",
    )(fn)
    fn = click.option(
        "--db",
        "db_path",
        type=click.Path(dir_okay=False, path_type=str),
        default=None,
        help="Path to the SQLite database (default from config: steamgraph.db).",
    )(fn)
    fn = click.option(
        "--config",
        "config_path",
        type=click.Path(dir_okay=False, path_type=str),
        default=None,
        help="Path to config.json.",
    )(fn)
    return fn
