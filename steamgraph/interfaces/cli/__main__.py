"""Entry point for running the Steamgraph CLI.

This module defines a top-level Click group that aggregates all subcommands
defined in the ``steamgraph.interfaces.cli`` package. Executing
``python -m steamgraph.interfaces.cli`` will invoke this group.
"""

import click

from .history import history
from .sync import sync
from .view import view
from .watermark import watermark


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
def cli() -> None:
    """Steamgraph command-line interface."""


cli.add_command(sync)
cli.add_command(view)
cli.add_command(watermark)
cli.add_command(history)


if __name__ == "__main__":
    cli()
