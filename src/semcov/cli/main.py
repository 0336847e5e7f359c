"""semcov CLI."""

import click

from semcov import __version__
from semcov.cli.analyze import analyze_command
from semcov.cli.attribute import attribute_command
from semcov.core.logging import configure_logging


@click.group()
@click.version_option(version=__version__, prog_name="semcov")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """semcov - semantic case-tree coverage for compiled dumps."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    configure_logging(level="DEBUG" if verbose else "WARNING")


cli.add_command(analyze_command, name="analyze")
cli.add_command(attribute_command, name="attribute")


if __name__ == "__main__":
    cli()
