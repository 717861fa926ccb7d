"""Pydantic models for skills, prerequisites and training steps."""

from pydantic import BaseModel, ConfigDict, Field

MIN_LEVEL = 0
MAX_LEVEL = 5


class InvalidLevelError(ValueError):
    """Raised when a requested skill level falls outside the trainable range."""

    def __init__(self, level: int, minimum: int = 1):
        self.level = level
        super().__init__(f"Invalid skill level {level}: expected {minimum}..{MAX_LEVEL}")


def validate_level(level: int, minimum: int = 1) -> int:
    """Return ``level`` unchanged if it lies in ``[minimum, MAX_LEVEL]``."""
    if isinstance(level, bool) or not isinstance(level, int):
        raise InvalidLevelError(level, minimum)
    if level < minimum or level > MAX_LEVEL:
        raise InvalidLevelError(level, minimum)
    return level


class Prerequisite(BaseModel):
    """A (prerequisite skill, required level) pair."""

    model_config = ConfigDict(frozen=True)

    skill_id: int
    level: int = Field(ge=MIN_LEVEL, le=MAX_LEVEL)


class TrainingStep(BaseModel):
    """Train ``skill_id`` to exactly ``level`` next."""

    model_config = ConfigDict(frozen=True)

    skill_id: int
    level: int = Field(ge=1, le=MAX_LEVEL)

    def as_tuple(self) -> tuple[int, int]:
        return (self.skill_id, self.level)


class Skill(BaseModel):
    """A trainable skill as stored in the skill database."""

    skill_id: int
    name: str
    en_name: str | None = None
    group_name: str | None = None

    # Raw requirement rows; may repeat a prerequisite skill at different levels
    requires: list[Prerequisite] = Field(default_factory=list)


class SkillSeed(BaseModel):
    """Top-level shape of a skill data seed file."""

    skills: list[Skill] = Field(default_factory=list)


def ladder(skill_id: int, start: int, stop: int) -> list[TrainingStep]:
    """Steps for ``skill_id`` from level ``start`` through ``stop`` inclusive."""
    return [TrainingStep(skill_id=skill_id, level=lvl) for lvl in range(max(start, 1), stop + 1)]
