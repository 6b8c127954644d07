"""mbk serve command - run the MCP server over stdio."""

from pathlib import Path

import click


@click.command()
@click.argument("path", default=".", type=click.Path(exists=True, path_type=Path))
def serve_command(path: Path) -> None:
    """Run the memorybank MCP server.

    PATH is the default project root for tools called without one.
    """
    from memorybank.mcp.server import run_server

    run_server(path.resolve())
