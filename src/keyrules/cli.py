"""keyrules CLI entrypoint."""

from __future__ import annotations

import logging

import click

from keyrules import __version__


@click.group()
@click.version_option(version=__version__, prog_name="keyrules")
@click.option("--verbose", "-v", count=True, help="Log more (repeat for debug output).")
@click.option("--trace", is_flag=True, help="Export OpenTelemetry spans (needs keyrules[otel]).")
@click.option("--otlp-endpoint", default=None, help="Send spans to this OTLP/gRPC endpoint.")
def main(verbose: int, trace: bool, otlp_endpoint: str | None) -> None:
    """keyrules: compile and query keyfile authorization rules."""
    level = logging.WARNING
    if verbose == 1:
        level = logging.INFO
    elif verbose > 1:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")

    if trace or otlp_endpoint:
        from keyrules.utils.telemetry import configure_telemetry

        try:
            configure_telemetry(export_to_console=trace, otlp_endpoint=otlp_endpoint)
        except ImportError as exc:
            raise click.UsageError(str(exc)) from exc


# Register subcommands
from keyrules.cli_commands import register_commands  # noqa: E402

register_commands(main)

if __name__ == "__main__":
    main()
