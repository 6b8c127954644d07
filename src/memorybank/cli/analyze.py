"""mbk analyze command - analyze a project's source tree."""

import json
from pathlib import Path

import click
from rich.table import Table

from memorybank.analysis import analyze_project
from memorybank.cli.utils import get_console, load_settings


@click.command()
@click.argument("path", default=".", type=click.Path(exists=True, path_type=Path))
@click.option(
    "--depth",
    type=click.Choice(["shallow", "medium", "deep"]),
    default=None,
    help="Directory depth preset (default: from config)",
)
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.option("--facts", is_flag=True, help="Include per-file facts in JSON output")
def analyze_command(path: Path, depth: str | None, as_json: bool, facts: bool) -> None:
    """Analyze project structure, patterns and complexity.

    PATH is the project root (default: current directory).
    """
    root = path.resolve()
    settings = load_settings(root)
    analysis = analyze_project(root, depth, config=settings.analysis)  # type: ignore[arg-type]
    if analysis.failed:
        raise click.ClickException(analysis.facts.failure.message)  # type: ignore[union-attr]

    if as_json:
        click.echo(json.dumps(analysis.to_dict(include_facts=facts), indent=2))
        return

    console = get_console()
    console.print(f"[bold]{analysis.project_name}[/bold] [dim]{analysis.version}[/dim]")
    console.print(f"Type: {analysis.project_type}")
    console.print(
        f"Complexity: {analysis.structure.complexity} "
        f"({analysis.structure.estimated_files} source files, "
        f"max function complexity {analysis.facts.max_complexity})"
    )
    if analysis.frameworks:
        console.print(f"Frameworks: {', '.join(analysis.frameworks)}")

    size = analysis.facts.size
    console.print(
        f"Size: {size.lines_of_code} lines, {size.file_count} files, "
        f"{size.directory_count} directories"
    )

    if analysis.patterns:
        table = Table(title="Patterns", show_lines=False)
        table.add_column("Pattern", style="cyan")
        table.add_column("Files", justify="right")
        table.add_column("Description")
        for match in analysis.patterns:
            table.add_row(
                match.pattern_name, str(len(match.evidence_locations)), match.description
            )
        console.print(table)

    recs = analysis.recommendations
    if recs.focus_areas:
        console.print(f"Focus areas: {', '.join(recs.focus_areas)}")
    console.print(f"Detail level: {recs.detail_level}")
