"""mbk setup-instructions command - write the index document's managed section."""

from pathlib import Path

import click

from memorybank.cli.utils import get_console, load_settings
from memorybank.sync.actions import ActionApplier


@click.command()
@click.argument("path", default=".", type=click.Path(exists=True, path_type=Path))
def setup_instructions_command(path: Path) -> None:
    """Create or refresh the Memory Bank section of the index document.

    Content outside that section is left untouched.
    """
    root = path.resolve()
    settings = load_settings(root)
    outcome = ActionApplier(root, settings.memory_bank).setup_index()
    get_console().print(f"[green]✓[/green] {outcome.message}: {outcome.path}")
