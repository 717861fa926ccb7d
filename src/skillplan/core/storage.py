"""SQLite storage for skill records and their raw prerequisite rows."""

import json
import sqlite3
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from pathlib import Path

from pydantic import ValidationError

from skillplan.core.models import Prerequisite, Skill, SkillSeed


class UnknownSkillError(KeyError):
    """Raised when a skill ID has no record in the skill database."""

    def __init__(self, skill_id: int):
        self.skill_id = skill_id
        super().__init__(skill_id)

    def __str__(self) -> str:
        return f"Unknown skill: {self.skill_id}"


class SkillDataError(Exception):
    """Raised when skill seed data cannot be parsed."""


class SkillTreeStore:
    """Skill database backed by SQLite.

    Requirement rows are kept as imported (possibly repeating a prerequisite
    at several levels); ``requirements_of`` collapses them to one entry per
    prerequisite skill at its highest required level.
    """

    def __init__(self, db_path: Path):
        self.db_path = db_path
        db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _init_db(self) -> None:
        """Initialize database schema."""
        with self._connection() as conn:
            conn.executescript(
                """
                CREATE TABLE IF NOT EXISTS skills (
                    skill_id INTEGER PRIMARY KEY,
                    name TEXT NOT NULL,
                    en_name TEXT,
                    group_name TEXT
                );

                CREATE TABLE IF NOT EXISTS skill_requirements (
                    skill_id INTEGER NOT NULL,
                    required_skill_id INTEGER NOT NULL,
                    required_level INTEGER NOT NULL
                );

                CREATE INDEX IF NOT EXISTS idx_skill_requirements_skill_id
                    ON skill_requirements(skill_id);
                CREATE INDEX IF NOT EXISTS idx_skills_name ON skills(name);
            """
            )

    @contextmanager
    def _connection(self) -> Iterator[sqlite3.Connection]:
        """Context manager for database connections."""
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def save_skill(self, skill: Skill) -> None:
        """Insert or update a skill and replace its requirement rows."""
        with self._connection() as conn:
            self._save_skill(conn, skill)

    def _save_skill(self, conn: sqlite3.Connection, skill: Skill) -> None:
        conn.execute(
            """
            INSERT INTO skills (skill_id, name, en_name, group_name)
            VALUES (?, ?, ?, ?)
            ON CONFLICT(skill_id) DO UPDATE SET
                name = excluded.name,
                en_name = excluded.en_name,
                group_name = excluded.group_name
        """,
            (skill.skill_id, skill.name, skill.en_name, skill.group_name),
        )
        conn.execute("DELETE FROM skill_requirements WHERE skill_id = ?", (skill.skill_id,))
        conn.executemany(
            """
            INSERT INTO skill_requirements (skill_id, required_skill_id, required_level)
            VALUES (?, ?, ?)
        """,
            [(skill.skill_id, req.skill_id, req.level) for req in skill.requires],
        )

    def load_json(self, path: Path) -> int:
        """Import skills from a JSON seed file. Returns the number imported."""
        try:
            with open(path) as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise SkillDataError(f"Invalid JSON in {path}: {e}") from e

        try:
            seed = SkillSeed.model_validate(data)
        except ValidationError as e:
            raise SkillDataError(f"Invalid skill data in {path}: {e}") from e

        with self._connection() as conn:
            for skill in seed.skills:
                self._save_skill(conn, skill)
        return len(seed.skills)

    def requirements_of(self, skill_id: int) -> frozenset[Prerequisite]:
        """Direct prerequisites of a skill, one per prerequisite at its max level."""
        with self._connection() as conn:
            known = conn.execute("SELECT 1 FROM skills WHERE skill_id = ?", (skill_id,)).fetchone()
            if known is None:
                raise UnknownSkillError(skill_id)
            rows = conn.execute(
                """
                SELECT required_skill_id, MAX(required_level) AS level
                FROM skill_requirements
                WHERE skill_id = ?
                GROUP BY required_skill_id
            """,
                (skill_id,),
            ).fetchall()
        return frozenset(
            Prerequisite(skill_id=row["required_skill_id"], level=row["level"]) for row in rows
        )

    def get_skill(self, skill_id: int) -> Skill | None:
        """Load a skill with its raw requirement rows."""
        with self._connection() as conn:
            row = conn.execute("SELECT * FROM skills WHERE skill_id = ?", (skill_id,)).fetchone()
            if row is None:
                return None
            reqs = conn.execute(
                """
                SELECT required_skill_id, required_level FROM skill_requirements
                WHERE skill_id = ? ORDER BY required_skill_id, required_level
            """,
                (skill_id,),
            ).fetchall()
        return Skill(
            skill_id=row["skill_id"],
            name=row["name"],
            en_name=row["en_name"],
            group_name=row["group_name"],
            requires=[
                Prerequisite(skill_id=r["required_skill_id"], level=r["required_level"])
                for r in reqs
            ],
        )

    def skill_name(self, skill_id: int) -> str:
        """Display name of a skill, with a placeholder for unknown IDs."""
        with self._connection() as conn:
            row = conn.execute("SELECT name FROM skills WHERE skill_id = ?", (skill_id,)).fetchone()
        if row is None:
            return f"Unknown Skill ({skill_id})"
        return row["name"]

    def list_skills(self) -> list[Skill]:
        with self._connection() as conn:
            ids = [r[0] for r in conn.execute("SELECT skill_id FROM skills ORDER BY skill_id")]
        return [skill for sid in ids if (skill := self.get_skill(sid)) is not None]

    def find_skill_ids(self, names: Iterable[str]) -> dict[str, int]:
        """Resolve skill names (localized or English) to IDs.

        Names without a match are absent from the result.
        """
        unique = sorted(set(names))
        if not unique:
            return {}

        placeholders = ",".join("?" for _ in unique)
        with self._connection() as conn:
            rows = conn.execute(
                f"""
                SELECT skill_id, name, en_name FROM skills
                WHERE name IN ({placeholders}) OR en_name IN ({placeholders})
                ORDER BY skill_id
            """,
                unique + unique,
            ).fetchall()

        result: dict[str, int] = {}
        for row in rows:
            for candidate in (row["name"], row["en_name"]):
                if candidate in unique and candidate not in result:
                    result[candidate] = row["skill_id"]
        return result

    def count(self) -> int:
        with self._connection() as conn:
            return conn.execute("SELECT COUNT(*) FROM skills").fetchone()[0]
