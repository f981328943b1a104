"""``keyrules watch``: load rules and report every reload until interrupted."""

from __future__ import annotations

import time

import click

from keyrules.cli_commands._common import build_config, rules_options
from keyrules.cli_commands._output import console, print_report
from keyrules.policy.chain import LoadReport


@click.command()
@rules_options
def watch(config_file: str | None, rules_dirs: tuple[str, ...], suffix: str | None) -> None:
    """Watch the rule directories and recompile on change (Ctrl-C to stop)."""
    from keyrules.authority.authority import KeyfileAuthority

    authority = KeyfileAuthority(build_config(config_file, rules_dirs, suffix, watch=True))
    print_report(authority.last_report)

    def _on_changed(report: LoadReport) -> None:
        console.print("\n[bold]Rules reloaded[/bold]")
        print_report(report)

    authority.add_changed_listener(_on_changed)

    with authority:
        watched = authority.watcher.watched if authority.watcher else []
        for directory in watched:
            console.print(f"Watching {directory}")
        try:
            while True:
                time.sleep(1)
        except KeyboardInterrupt:
            console.print("Stopped.")
