"""memorybank CLI - mbk command."""

import click

from memorybank.cli.analyze import analyze_command
from memorybank.cli.instructions import setup_instructions_command
from memorybank.cli.serve import serve_command
from memorybank.cli.sync import resolve_command, sync_command
from memorybank.cli.validate import validate_command
from memorybank.core.logging import configure_logging


@click.group()
@click.version_option(version="0.1.0", prog_name="mbk")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """memorybank - project analysis and memory bank synchronization."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    configure_logging(level="DEBUG" if verbose else "WARNING")


cli.add_command(analyze_command, name="analyze")
cli.add_command(validate_command, name="validate")
cli.add_command(sync_command, name="sync")
cli.add_command(resolve_command, name="resolve")
cli.add_command(setup_instructions_command, name="setup-instructions")
cli.add_command(serve_command, name="serve")


if __name__ == "__main__":
    cli()
