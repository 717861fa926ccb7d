"""Shared CLI helpers: store access, logging setup and argument parsing."""

import logging
import os
from pathlib import Path

import typer
from rich import print as rprint
from rich.console import Console

from skillplan.core.storage import SkillTreeStore

console = Console()

# Global store instance (initialized lazily)
_store: SkillTreeStore | None = None


def get_store() -> SkillTreeStore:
    """Get or create the skill store instance."""
    global _store
    if _store is None:
        db_path = Path(os.environ.get("SKILLPLAN_DB", Path.cwd() / ".skillplan" / "skills.db"))
        _store = SkillTreeStore(db_path)
    return _store


def configure_logging(verbose: bool = False) -> None:
    """Configure root logging from --verbose or SKILLPLAN_LOG_LEVEL."""
    if verbose:
        level = logging.DEBUG
    else:
        name = os.environ.get("SKILLPLAN_LOG_LEVEL", "WARNING").upper()
        level = logging.getLevelNamesMapping().get(name, logging.WARNING)
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s", force=True)


def resolve_skill(store: SkillTreeStore, ref: str) -> int:
    """Resolve a numeric ID or exact skill name to a skill ID, or exit."""
    ref = ref.strip()
    if ref.isdigit():
        return int(ref)
    skill_id = store.find_skill_ids([ref]).get(ref)
    if skill_id is None:
        rprint(f"[red]Skill not found: {ref}[/red]")
        raise typer.Exit(1)
    return skill_id


def parse_skill_level(store: SkillTreeStore, value: str) -> tuple[int, int]:
    """Parse a ``SKILL:LEVEL`` argument into ``(skill_id, level)``."""
    ref, sep, level = value.rpartition(":")
    if not sep or not ref or not level.strip().isdigit():
        rprint(f"[red]Expected SKILL:LEVEL, got '{value}'[/red]")
        raise typer.Exit(1)
    return resolve_skill(store, ref), int(level)
