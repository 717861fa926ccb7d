"""Skill queue resolution: interactive planning and batch queue correction."""

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field

from skillplan.core.graph import (
    CyclicDependencyError,
    DepthCalculator,
    PrerequisiteExpander,
    RequirementLookup,
    SkillRequirementProvider,
    StepOrderer,
)
from skillplan.core.models import InvalidLevelError, TrainingStep, ladder, validate_level

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolutionWarning:
    """A degraded-but-continued condition met while resolving a request."""

    skill_id: int
    message: str


@dataclass(frozen=True)
class RequestFailure:
    """A batch request that was skipped."""

    index: int
    skill_id: int
    level: int
    reason: str


@dataclass
class Resolution:
    """Steps newly emitted by one interactive request."""

    skill_id: int
    level: int
    steps: list[TrainingStep] = field(default_factory=list)
    warnings: list[ResolutionWarning] = field(default_factory=list)


@dataclass
class QueueCorrection:
    """Result of correcting a whole queue in one batch."""

    steps: list[TrainingStep] = field(default_factory=list)
    warnings: list[ResolutionWarning] = field(default_factory=list)
    failures: list[RequestFailure] = field(default_factory=list)


@dataclass
class PlanSession:
    """Mutable state accumulated across interactive requests."""

    added_skills: set[int] = field(default_factory=set)
    session_levels: dict[int, int] = field(default_factory=dict)
    emitted: set[TrainingStep] = field(default_factory=set)

    def take_new(self, steps: Iterable[TrainingStep]) -> list[TrainingStep]:
        """Record and return the steps not emitted before, keeping their order."""
        fresh = []
        for step in steps:
            if step not in self.emitted:
                self.emitted.add(step)
                fresh.append(step)
        return fresh

    def raise_level(self, skill_id: int, level: int) -> None:
        self.added_skills.add(skill_id)
        self.session_levels[skill_id] = max(self.session_levels.get(skill_id, 0), level)


class QueueResolver:
    """Expands skill requests into ordered, deduplicated training steps.

    One resolver owns one interactive session and one depth cache, both tied
    to the skill data the provider served at construction time. It is not
    thread-safe; build a fresh resolver whenever the skill data changes.
    """

    def __init__(
        self,
        provider: SkillRequirementProvider,
        trained_levels: Mapping[int, int] | None = None,
    ):
        self.lookup = RequirementLookup(provider)
        self.depths = DepthCalculator(self.lookup)
        self.expander = PrerequisiteExpander(self.lookup, self.depths)
        self.orderer = StepOrderer(self.depths)
        self.trained_levels = dict(trained_levels or {})
        self.session = PlanSession()

    def reset(self) -> None:
        """Start a new session, keeping the depth cache."""
        self.session = PlanSession()

    def add_skill_request(
        self,
        skill_id: int,
        target_level: int,
        baseline_level: int | None = None,
    ) -> Resolution:
        """Plan ``skill_id`` up to ``target_level`` within the current session.

        The first request for a skill walks its full prerequisite closure and
        its own ladder from level 1, whatever the baseline. Later requests for
        the same skill only add levels from ``baseline_level + 1`` upward, and
        requests at or below the level already planned add nothing.

        Raises ``InvalidLevelError`` or ``CyclicDependencyError``; the session
        is left unchanged when either is raised.
        """
        validate_level(target_level)
        if baseline_level is None:
            baseline_level = self.trained_levels.get(skill_id, 0)
        validate_level(baseline_level, minimum=0)

        logger.debug("Adding skill %s to plan at level %s", skill_id, target_level)
        session = self.session
        resolution = Resolution(skill_id=skill_id, level=target_level)

        if skill_id not in session.added_skills:
            required = self.expander.required_levels(skill_id)
            steps = self.orderer.order(self.expander.prerequisite_steps(skill_id))
            steps += ladder(skill_id, 1, target_level)

            for prereq_id, level in required.items():
                session.raise_level(prereq_id, level)
            session.raise_level(skill_id, target_level)
            resolution.steps = session.take_new(steps)
            resolution.warnings = self._warnings_for([skill_id, *required])
        elif target_level > session.session_levels.get(skill_id, 0):
            steps = ladder(skill_id, baseline_level + 1, target_level)
            session.raise_level(skill_id, target_level)
            resolution.steps = session.take_new(steps)
        else:
            logger.debug("Skill %s already planned at level %s", skill_id, target_level)

        logger.debug("Added %d steps for skill %s", len(resolution.steps), skill_id)
        return resolution

    def correct_queue(self, requests: Iterable[tuple[int, int]]) -> QueueCorrection:
        """Rebuild a queue so every request is preceded by its prerequisites.

        Requests are processed in order; each contributes its own ordered
        closure and ladder, minus steps already emitted by earlier requests.
        A request that fails is recorded and skipped.
        """
        requests = list(requests)
        result = QueueCorrection()
        emitted: set[TrainingStep] = set()
        closures: dict[int, list[TrainingStep]] = {}
        warned: set[int] = set()

        logger.debug("Correcting skill queue with %d requests", len(requests))

        for index, (skill_id, level) in enumerate(requests):
            try:
                validate_level(level)
                if skill_id not in closures:
                    closures[skill_id] = self.orderer.order(
                        self.expander.prerequisite_steps(skill_id)
                    )
            except (InvalidLevelError, CyclicDependencyError) as e:
                logger.warning("Skipping request %d (skill %s level %s): %s", index, skill_id, level, e)
                result.failures.append(
                    RequestFailure(index=index, skill_id=skill_id, level=level, reason=str(e))
                )
                continue

            steps = closures[skill_id] + ladder(skill_id, 1, level)
            added = 0
            for step in steps:
                if step not in emitted:
                    emitted.add(step)
                    result.steps.append(step)
                    added += 1

            involved = {skill_id, *(step.skill_id for step in steps)}
            for warning in self._warnings_for(involved - warned):
                warned.add(warning.skill_id)
                result.warnings.append(warning)

            logger.debug(
                "Request %d: added %d steps, skipped %d duplicates",
                index,
                added,
                len(steps) - added,
            )

        logger.debug("Corrected queue has %d steps", len(result.steps))
        return result

    def _warnings_for(self, skill_ids: Iterable[int]) -> list[ResolutionWarning]:
        return [
            ResolutionWarning(skill_id=sid, message=f"No data for skill {sid}; assumed no prerequisites")
            for sid in sorted(set(skill_ids) & self.lookup.unknown)
        ]
