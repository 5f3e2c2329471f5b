"""Show recent sync runs recorded in the database."""

from __future__ import annotations

import click
from rich.console import Console
from rich.table import Table

from steamgraph.infrastructure.db.repositories import SyncRunRepository
from steamgraph.interfaces.cli.context import build_cli_context
from steamgraph.interfaces.cli.options import common_options

console = Console()


@click.command(name="history")
@common_options
@click.option("--limit", type=int, default=20, show_default=True, help="Rows to show.")
@click.option(
    "--feed",
    type=click.Choice(["taxonomy", "catalog"]),
    default=None,
    help="Only show one feed.",
)
def history(
    config_path: str | None,
    db_path: str | None,
    watermark_path: str | None,
    limit: int,
    feed: str | None,
) -> None:
    """List the most recent feed outcomes, newest first."""
    cli_context = build_cli_context(
        config_path=config_path, db_path=db_path, watermark_path=watermark_path
    )
    with cli_context.connect() as conn:
        runs = SyncRunRepository(conn).list_recent(limit=limit, feed=feed)

    if not runs:
        console.print("[yellow]No sync runs recorded yet.[/yellow]")
        return

    table = Table(title="Sync history")
    for column in ("#", "Feed", "Mode", "Finished", "Status", "Fetched", "Written", "Error"):
        table.add_column(column)
    for run in runs:
        table.add_row(
            str(run["id"]),
            run["feed"],
            run["mode"] or "-",
            run["finished_at"] or "-",
            run["status"] or "-",
            str(run["fetched"] or 0),
            str(run["written"] or 0),
            run["error"] or "",
        )
    console.print(table)
