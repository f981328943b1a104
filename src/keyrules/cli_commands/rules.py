"""``keyrules validate`` / ``keyrules show``: inspect rule directories."""

from __future__ import annotations

import sys

import click

from keyrules.cli_commands._common import build_config, rules_options
from keyrules.cli_commands._output import console, print_chain_table, print_report
from keyrules.policy.chain import load_chain


@click.command()
@rules_options
def validate(config_file: str | None, rules_dirs: tuple[str, ...], suffix: str | None) -> None:
    """Compile every rule file and report problems.

    Exits with status 1 when any directory or file could not be loaded.
    """
    config = build_config(config_file, rules_dirs, suffix)
    report = load_chain(
        config.rules_dirs,
        suffix=config.rules_suffix,
        admin_group=config.admin_group,
    )
    print_report(report)
    if not report.ok:
        sys.exit(1)


@click.command()
@rules_options
def show(config_file: str | None, rules_dirs: tuple[str, ...], suffix: str | None) -> None:
    """Print the compiled chain in evaluation order."""
    config = build_config(config_file, rules_dirs, suffix)
    report = load_chain(
        config.rules_dirs,
        suffix=config.rules_suffix,
        admin_group=config.admin_group,
    )
    if not len(report.chain):
        console.print("[yellow]No rules loaded.[/yellow]")
        return
    print_chain_table(report.chain)
