"""CLI subcommand registration."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register all subcommands on the CLI group."""
    from keyrules.cli_commands.check import admins, check
    from keyrules.cli_commands.rules import show, validate
    from keyrules.cli_commands.watch import watch

    cli.add_command(check)
    cli.add_command(admins)
    cli.add_command(validate)
    cli.add_command(show)
    cli.add_command(watch)
