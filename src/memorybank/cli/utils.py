"""CLI utilities."""

from pathlib import Path

import click
from rich.console import Console

from memorybank.config import MemoryBankSettings, load_config
from memorybank.core.errors import ConfigError


def get_console() -> Console:
    return Console(highlight=False)


def load_settings(project_root: Path) -> MemoryBankSettings:
    """Load configuration for a project, reporting config errors as CLI errors.

    Raises:
        click.ClickException: If a config file is malformed or invalid
    """
    try:
        return load_config(project_root=project_root)
    except ConfigError as e:
        raise click.ClickException(str(e)) from e
