"""Dependency injection for FastAPI routes."""

import os
from functools import lru_cache
from pathlib import Path

from skillplan.core.storage import SkillTreeStore


@lru_cache
def get_store() -> SkillTreeStore:
    """Get the skill store instance (singleton)."""
    db_path = Path(os.environ.get("SKILLPLAN_DB", Path.cwd() / ".skillplan" / "skills.db"))
    return SkillTreeStore(db_path)
