"""Options and helpers shared by the CLI subcommands."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Any, Callable

import click

from keyrules.cli_commands._output import console
from keyrules.config import AuthorityConfig, load_config
from keyrules.errors import ConfigError


def rules_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Attach ``--config``, ``--rules-dir`` and ``--suffix`` to a command."""
    func = click.option(
        "--suffix",
        default=None,
        help="Rule file suffix (default: .keyrules).",
    )(func)
    func = click.option(
        "--rules-dir",
        "rules_dirs",
        multiple=True,
        type=click.Path(file_okay=False),
        help="Rule directory, highest precedence first. Repeatable.",
    )(func)
    func = click.option(
        "--config",
        "config_file",
        type=click.Path(exists=True, dir_okay=False),
        default=None,
        help="YAML configuration file.",
    )(func)
    return func


def build_config(
    config_file: str | None,
    rules_dirs: tuple[str, ...],
    suffix: str | None,
    *,
    watch: bool = False,
) -> AuthorityConfig:
    """Load configuration and apply command-line overrides; exit 1 on error."""
    try:
        config = load_config(Path(config_file) if config_file else None)
    except ConfigError as exc:
        console.print(f"[red]Configuration error:[/red] {exc}")
        sys.exit(1)

    updates: dict[str, Any] = {"watch": watch}
    if rules_dirs:
        updates["rules_dirs"] = list(rules_dirs)
    if suffix:
        updates["rules_suffix"] = suffix
    return config.model_copy(update=updates)
