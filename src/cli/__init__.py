"""CLI entry point for the bulk operations processor."""

from __future__ import annotations

import click

from src.cli.commands import send_items


@click.group()
def cli() -> None:
    """Bulk Operations Processor."""


cli.add_command(send_items)
