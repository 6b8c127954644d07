"""mbk sync / resolve commands - reconcile the memory bank with its index."""

import json
from pathlib import Path, PurePosixPath

import click
import questionary
from rich.table import Table

from memorybank.cli.utils import get_console, load_settings
from memorybank.sync.actions import ActionApplier
from memorybank.sync.models import ResolutionSession, ResolutionState
from memorybank.sync.planner import plan
from memorybank.sync.reconciler import SyncReconciler
from memorybank.sync.resolver import APPLY, CANCEL, InteractiveResolver

_STEP_STYLES = {
    "question": "cyan",
    "information": "dim",
    "confirmation": "green",
    "warning": "yellow",
    "result": "bold",
}


@click.command()
@click.argument("path", default=".", type=click.Path(exists=True, path_type=Path))
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.option(
    "--apply",
    "apply_safe",
    is_flag=True,
    help="Apply every planned action that does not need confirmation",
)
def sync_command(path: Path, as_json: bool, apply_safe: bool) -> None:
    """Show sync state and the planned corrective actions.

    PATH is the project root (default: current directory).
    """
    root = path.resolve()
    settings = load_settings(root)
    reconciler = SyncReconciler(settings.memory_bank)
    validation = reconciler.validate_sync(root)
    conflict = reconciler.conflict_for(root, validation)
    index_name = PurePosixPath(settings.memory_bank.index_document).name
    actions = plan(conflict, index_name) if conflict else []

    outcomes = []
    if apply_safe:
        applier = ActionApplier(root, settings.memory_bank)
        outcomes = [(a, applier.apply(a)) for a in actions if not a.requires_confirmation]

    if as_json:
        payload = {
            "validation": validation.model_dump(mode="json"),
            "actions": [a.model_dump(mode="json") for a in actions],
            "applied": [
                {"action": a.model_dump(mode="json"), "applied": o.applied, "message": o.message}
                for a, o in outcomes
            ],
        }
        click.echo(json.dumps(payload, indent=2))
        return

    console = get_console()
    if validation.is_in_sync:
        console.print(
            f"[green]✓[/green] In sync: {len(validation.memory_bank_files)} files referenced"
        )
    else:
        console.print("[yellow]Out of sync[/yellow]")
        for name in validation.missing_references:
            console.print(f"  missing reference: {name}")
        for name in validation.orphaned_references:
            console.print(f"  orphaned reference: {name}")

    if actions:
        table = Table(title="Planned actions")
        table.add_column("#", justify="right")
        table.add_column("Action", style="cyan")
        table.add_column("Target")
        table.add_column("Confirm")
        for number, action in enumerate(actions, start=1):
            table.add_row(
                str(number),
                action.action_type,
                action.target_file,
                "yes" if action.requires_confirmation else "no",
            )
        console.print(table)

    for action, outcome in outcomes:
        marker = "[green]✓[/green]" if outcome.applied else "[red]✗[/red]"
        console.print(f"{marker} {action.description}: {outcome.message}")


def _print_log(session: ResolutionSession, start: int = 0) -> None:
    console = get_console()
    for step in session.conversation_log[start:]:
        style = _STEP_STYLES[step.type]
        console.print(f"[{style}]{step.step}. {step.content}[/{style}]")


@click.command()
@click.argument("path", default=".", type=click.Path(exists=True, path_type=Path))
@click.option("-y", "--yes", is_flag=True, help="Apply every proposed action without asking")
@click.option("--json", "as_json", is_flag=True, help="Output the resolution result as JSON")
def resolve_command(path: Path, yes: bool, as_json: bool) -> None:
    """Resolve sync conflicts interactively, one action at a time.

    PATH is the project root (default: current directory).
    """
    root = path.resolve()
    settings = load_settings(root)
    resolver = InteractiveResolver(settings.memory_bank)
    session = resolver.start(root)
    shown = 0

    while session.state == ResolutionState.AWAITING_RESPONSE:
        question = session.pending_question
        if question is None:
            break
        if yes:
            answer = APPLY
        else:
            _print_log(session, shown)
            shown = len(session.conversation_log)
            answer = questionary.select(question.content, choices=question.options or []).ask()
        session = resolver.respond(session, answer or CANCEL)

    result = resolver.result(session)
    if as_json:
        click.echo(json.dumps(result.model_dump(mode="json"), indent=2))
        return
    _print_log(session, shown)
