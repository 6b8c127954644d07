"""mbk validate command - check memory bank completeness and sync."""

import json
from pathlib import Path, PurePosixPath

import click

from memorybank.cli.utils import get_console, load_settings
from memorybank.sync.reconciler import SyncReconciler, build_report


@click.command()
@click.argument("path", default=".", type=click.Path(exists=True, path_type=Path))
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.option("--full", is_flag=True, help="Output the full validation result as JSON")
def validate_command(path: Path, as_json: bool, full: bool) -> None:
    """Validate the memory bank against its index document.

    PATH is the project root (default: current directory).
    """
    root = path.resolve()
    settings = load_settings(root)
    reconciler = SyncReconciler(settings.memory_bank)
    result = reconciler.validate_memory_bank(root)
    report = build_report(result, PurePosixPath(settings.memory_bank.index_document).name)

    if full:
        click.echo(json.dumps(result.model_dump(mode="json"), indent=2))
        return
    if as_json:
        click.echo(json.dumps(report.model_dump(mode="json"), indent=2))
        return

    console = get_console()
    marker = "[green]✓[/green]" if report.status == "valid" else "[red]✗[/red]"
    console.print(f"{marker} {report.summary}")
    for issue in report.issues:
        console.print(f"  [yellow]•[/yellow] {issue.message}")
    quality = result.quality
    console.print(
        f"Completeness {quality.completeness}, consistency {quality.consistency}, "
        f"clarity {quality.clarity}"
    )
    layout = result.structure_compliance
    console.print(
        f"Organization: {layout.organization} "
        f"({layout.folder_count} folders, {layout.total_files} files)"
    )
