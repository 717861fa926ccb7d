"""Core library for skillplan."""

from skillplan.core.graph import (
    CyclicDependencyError,
    DepthCalculator,
    PrerequisiteExpander,
    RequirementLookup,
    SkillRequirementProvider,
    StepOrderer,
)
from skillplan.core.models import (
    InvalidLevelError,
    Prerequisite,
    Skill,
    TrainingStep,
    validate_level,
)
from skillplan.core.reader import SkillPlanParseResult, parse_skill_plan
from skillplan.core.resolver import (
    PlanSession,
    QueueCorrection,
    QueueResolver,
    RequestFailure,
    Resolution,
    ResolutionWarning,
)
from skillplan.core.storage import SkillDataError, SkillTreeStore, UnknownSkillError

__all__ = [
    # Models
    "InvalidLevelError",
    "Prerequisite",
    "Skill",
    "TrainingStep",
    "validate_level",
    # Graph
    "CyclicDependencyError",
    "DepthCalculator",
    "PrerequisiteExpander",
    "RequirementLookup",
    "SkillRequirementProvider",
    "StepOrderer",
    # Resolver
    "PlanSession",
    "QueueCorrection",
    "QueueResolver",
    "RequestFailure",
    "Resolution",
    "ResolutionWarning",
    # Storage
    "SkillDataError",
    "SkillTreeStore",
    "UnknownSkillError",
    # Reader
    "SkillPlanParseResult",
    "parse_skill_plan",
]
