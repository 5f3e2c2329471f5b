"""Synchronization CLI for Steamgraph."""

from __future__ import annotations

import json
import logging

import click
from rich.console import Console
from rich.table import Table

from steamgraph.app.config import ConfigError
from steamgraph.infrastructure.observability import configure_logging
from steamgraph.interfaces.cli.context import build_cli_context
from steamgraph.interfaces.cli.options import common_options
from steamgraph.services.sync import (SyncAlreadyRunningError, SyncPassResult,
                                      SyncService)

console = Console()

_STATUS_STYLE = {"synced": "green", "unchanged": "cyan", "failed": "red"}


def _summary_table(result: SyncPassResult) -> Table:
    table = Table(title=f"Sync {result.status}")
    table.add_column("Feed")
    table.add_column("Mode")
    table.add_column("Status")
    table.add_column("Fetched", justify="right")
    table.add_column("Written", justify="right")
    table.add_column("Watermark")
    for feed in result.feeds:
        style = _STATUS_STYLE.get(feed.status, "white")
        table.add_row(
            feed.feed,
            feed.mode,
            f"[{style}]{feed.status}[/{style}]",
            str(feed.fetched),
            str(feed.written),
            f"{feed.watermark_before} -> {feed.watermark_after}",
        )
    return table


@click.command(name="sync")
@common_options
@click.option(
    "--api-key",
    envvar="STEAM_API_KEY",
    default=None,
    help="Steam Web API key (defaults to $STEAM_API_KEY or config.json).",
)
@click.option(
    "--full",
    is_flag=True,
    default=False,
    help="Ignore the stored watermark and fetch everything for this pass.",
)
@click.option(
    "--player-counts/--no-player-counts",
    "player_counts",
    default=None,
    help="Fetch current player counts for every synced app (one request per app).",
)
@click.option("--json-output", is_flag=True, help="Print the pass result as JSON.")
@click.option(
    "--verbose/--no-verbose",
    default=False,
    show_default=True,
    help="Enable debug logging during the sync run.",
)
def sync(
    config_path: str | None,
    db_path: str | None,
    watermark_path: str | None,
    api_key: str | None,
    full: bool,
    player_counts: bool | None,
    json_output: bool,
    verbose: bool,
) -> None:
    """Synchronize Steam tags and apps into the local database.

    Tags are synced first, then every app changed since the last successful
    pass. Exits with status 1 when either feed failed; the watermark of a
    failed feed is left untouched so the next run retries from the same point.
    """
    configure_logging(level=logging.DEBUG if verbose else logging.INFO)
    cli_context = build_cli_context(
        config_path=config_path,
        db_path=db_path,
        watermark_path=watermark_path,
        api_key=api_key,
    )
    settings = cli_context.settings
    if player_counts is not None:
        settings.steam.include_player_counts = player_counts

    try:
        service = SyncService.from_settings(settings)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    if not json_output:
        console.print(f"[bold]Syncing Steam catalog[/bold] into {settings.db_path}...")
        if full:
            console.print("[yellow]Full sync requested; stored watermark ignored.[/yellow]")

    try:
        if json_output:
            result = service.run_pass(full=full)
        else:
            with console.status("Running sync..."):
                result = service.run_pass(full=full)
    except SyncAlreadyRunningError as exc:
        raise click.ClickException(str(exc)) from exc

    if json_output:
        click.echo(json.dumps(result.to_dict(), indent=2))
    else:
        console.print(_summary_table(result))
        for feed in result.feeds:
            if feed.error:
                console.print(f"[red]{feed.feed}: {feed.error}[/red]")

    if not result.ok:
        raise SystemExit(1)
