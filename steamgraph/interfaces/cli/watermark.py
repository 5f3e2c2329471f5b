"""Inspect or reset the sync watermark."""

from __future__ import annotations

import json

import click
from rich.console import Console

from steamgraph.interfaces.cli.context import build_cli_context
from steamgraph.interfaces.cli.options import common_options

console = Console()


@click.group(name="watermark")
def watermark() -> None:
    """Inspect or reset the stored sync watermark."""


@watermark.command(name="show")
@common_options
def show(config_path: str | None, db_path: str | None, watermark_path: str | None) -> None:
    """Print the stored watermark (empty values mean a full sync is next)."""
    cli_context = build_cli_context(
        config_path=config_path, db_path=db_path, watermark_path=watermark_path
    )
    store = cli_context.watermark_store()
    current = store.load()
    click.echo(json.dumps({"path": str(store.path), **current.to_dict()}, indent=2))


@watermark.command(name="reset")
@common_options
@click.confirmation_option(prompt="Reset the watermark and force a full sync next time?")
def reset(config_path: str | None, db_path: str | None, watermark_path: str | None) -> None:
    """Delete the stored watermark so the next pass performs a full sync."""
    cli_context = build_cli_context(
        config_path=config_path, db_path=db_path, watermark_path=watermark_path
    )
    store = cli_context.watermark_store()
    if store.reset():
        console.print(f"[green]Removed {store.path}[/green]")
    else:
        console.print(f"[yellow]No watermark at {store.path}[/yellow]")
