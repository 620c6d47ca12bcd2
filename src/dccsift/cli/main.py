"""dccsift CLI - dccsift command."""

import click

from dccsift.cli.parse import parse_command
from dccsift.cli.report import report_command
from dccsift.core.logging import configure_logging


@click.group()
@click.version_option(version="0.1.0", prog_name="dccsift")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """dccsift - Compact, structured reports from Delphi MSBuild output."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    configure_logging(level="DEBUG" if verbose else "WARNING")


cli.add_command(report_command, name="report")
cli.add_command(parse_command, name="parse")


if __name__ == "__main__":
    cli()
