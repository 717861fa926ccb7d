"""Main CLI entry point for skillplan."""

import json
from pathlib import Path

import typer
from dotenv import load_dotenv
from rich import print as rprint
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from skillplan.cli.helpers import (
    configure_logging,
    console,
    get_store,
    parse_skill_level,
    resolve_skill,
)
from skillplan.core.graph import CyclicDependencyError
from skillplan.core.models import InvalidLevelError, TrainingStep
from skillplan.core.reader import parse_skill_plan
from skillplan.core.resolver import QueueResolver, ResolutionWarning
from skillplan.core.storage import SkillDataError, SkillTreeStore

load_dotenv()

app = typer.Typer(
    name="skillplan",
    help="Build skill training queues with every prerequisite in order.",
    no_args_is_help=True,
)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """Build skill training queues with every prerequisite in order."""
    configure_logging(verbose)


def _steps_table(store: SkillTreeStore, steps: list[TrainingStep], title: str) -> Table:
    table = Table(title=title)
    table.add_column("#", justify="right", style="dim")
    table.add_column("ID", justify="right")
    table.add_column("Skill")
    table.add_column("Level", justify="right")
    for i, step in enumerate(steps, 1):
        table.add_row(str(i), str(step.skill_id), store.skill_name(step.skill_id), str(step.level))
    return table


def _print_warnings(warnings: list[ResolutionWarning]) -> None:
    for warning in warnings:
        rprint(f"[yellow]Warning:[/yellow] {escape(warning.message)}")


# ============================================================================
# LOAD command
# ============================================================================


@app.command()
def load(
    seed: Path = typer.Argument(..., exists=True, dir_okay=False, help="Skill data JSON file"),
) -> None:
    """Import skill data from a JSON seed file."""
    store = get_store()
    try:
        count = store.load_json(seed)
    except SkillDataError as e:
        rprint(f"[red]{escape(str(e))}[/red]")
        raise typer.Exit(1)
    rprint(f"[green]Imported {count} skills[/green] ({store.count()} in database)")


# ============================================================================
# PLAN command
# ============================================================================


@app.command()
def plan(
    requests: list[str] = typer.Argument(..., help="SKILL:LEVEL pairs, added in order"),
    baseline: list[str] = typer.Option(
        [],
        "--baseline",
        "-b",
        help="Already trained SKILL:LEVEL (repeatable)",
    ),
) -> None:
    """Add skills to a training plan one request at a time."""
    store = get_store()
    trained = dict(parse_skill_level(store, b) for b in baseline)
    resolver = QueueResolver(store, trained_levels=trained)

    for raw in requests:
        skill_id, level = parse_skill_level(store, raw)
        name = store.skill_name(skill_id)
        try:
            resolution = resolver.add_skill_request(skill_id, level)
        except (InvalidLevelError, CyclicDependencyError) as e:
            rprint(f"[red]{name} {level}: {escape(str(e))}[/red]")
            raise typer.Exit(1)

        _print_warnings(resolution.warnings)
        if not resolution.steps:
            rprint(f"[dim]{name} {level}: already planned[/dim]")
            continue
        console.print(_steps_table(store, resolution.steps, f"{name} → {level}"))


# ============================================================================
# CORRECT command
# ============================================================================


@app.command()
def correct(
    plan_file: Path = typer.Argument(..., exists=True, dir_okay=False, help="Plan text file"),
    as_json: bool = typer.Option(False, "--json", help="Print the queue as JSON"),
) -> None:
    """Correct a skill plan: add missing prerequisites, order and deduplicate."""
    store = get_store()
    parsed = parse_skill_plan(plan_file.read_text(), store)
    corrected = QueueResolver(store).correct_queue(parsed.requests)

    if as_json:
        payload = {
            "steps": [step.model_dump() for step in corrected.steps],
            "parse_errors": parsed.parse_errors,
            "not_found": parsed.not_found,
            "warnings": [w.message for w in corrected.warnings],
            "failures": [f.reason for f in corrected.failures],
        }
        typer.echo(json.dumps(payload, indent=2))
        return

    console.print(_steps_table(store, corrected.steps, f"Corrected queue ({len(corrected.steps)} steps)"))

    if parsed.parse_errors:
        rprint(Panel("\n".join(parsed.parse_errors), title="Unparsed lines", border_style="red"))
    if parsed.not_found:
        rprint(Panel("\n".join(parsed.not_found), title="Unknown skills", border_style="yellow"))
    _print_warnings(corrected.warnings)
    for failure in corrected.failures:
        rprint(f"[red]Skipped request {failure.index + 1}:[/red] {escape(failure.reason)}")


# ============================================================================
# SHOW command
# ============================================================================


@app.command()
def show(
    skill: str = typer.Argument(..., help="Skill ID or exact name"),
    level: int = typer.Option(0, "--level", "-l", help="Also list the steps to reach this level"),
) -> None:
    """Show a skill's depth and direct prerequisites."""
    store = get_store()
    skill_id = resolve_skill(store, skill)
    record = store.get_skill(skill_id)
    if record is None:
        rprint(f"[red]Skill not found: {skill}[/red]")
        raise typer.Exit(1)

    resolver = QueueResolver(store)
    try:
        depth = resolver.depths.depth(skill_id)
        steps = []
        if level:
            steps = resolver.orderer.order(resolver.expander.expand(skill_id, level))
    except (InvalidLevelError, CyclicDependencyError) as e:
        rprint(f"[red]{escape(str(e))}[/red]")
        raise typer.Exit(1)

    rprint(f"\n[bold]{record.name}[/bold] (ID {skill_id})")
    if record.group_name:
        rprint(f"  Group: {record.group_name}")
    rprint(f"  Depth: {depth}")

    prereqs = sorted(store.requirements_of(skill_id), key=lambda p: p.skill_id)
    if not prereqs:
        rprint("  [dim]No prerequisites[/dim]")
    for prereq in prereqs:
        rprint(f"  [cyan]requires[/cyan] {store.skill_name(prereq.skill_id)} {prereq.level}")

    if steps:
        console.print(_steps_table(store, steps, f"Steps to {record.name} {level}"))


if __name__ == "__main__":
    app()
