"""Text viewer for the app/tag graph stored in the database."""

from __future__ import annotations

import json

import click
from rich.console import Console

from steamgraph.interfaces.cli.context import build_cli_context, catalog_view_service
from steamgraph.interfaces.cli.options import common_options
from steamgraph.services.dto import NodeDTO

console = Console()


def _format_node_line(node: NodeDTO, max_tags: int) -> str:
    tags = sorted(node.tags, key=lambda tag: tag.weight, reverse=True)
    shown = ", ".join(f"{tag.name} ({tag.weight})" for tag in tags[:max_tags])
    if len(tags) > max_tags:
        shown += f", +{len(tags) - max_tags} more"
    name = node.name or "(no name)"
    return f"- [{node.id}] {name} | players={node.player_count} | tags: {shown or '-'}"


@click.command()
@common_options
@click.option(
    "--limit",
    type=int,
    default=50,
    show_default=True,
    help="Maximum number of apps to display (0 for no limit).",
)
@click.option(
    "--max-tags",
    type=int,
    default=5,
    show_default=True,
    help="Tags to show per app in text output.",
)
@click.option("--json-output", is_flag=True, help="Output the results as JSON.")
def view(
    config_path: str | None,
    db_path: str | None,
    watermark_path: str | None,
    limit: int,
    max_tags: int,
    json_output: bool,
) -> None:
    """Show apps and their weighted tags from the Steamgraph database."""

    cli_context = build_cli_context(
        config_path=config_path, db_path=db_path, watermark_path=watermark_path
    )
    with catalog_view_service(cli_context) as service:
        nodes = service.list_nodes(limit=limit)
        stats = service.stats()

    if json_output:
        payload = [node.model_dump(mode="json", by_alias=True) for node in nodes]
        click.echo(json.dumps(payload, indent=2))
        return

    if not nodes:
        console.print("[yellow]No apps stored yet; run `steamgraph sync` first.[/yellow]")
        return

    console.print(
        f"Showing {len(nodes)} of {stats.apps} app(s), {stats.tags} tag(s) known:"
    )
    for node in nodes:
        console.print(_format_node_line(node, max_tags), markup=False, highlight=False)
