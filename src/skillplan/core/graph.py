"""Prerequisite graph services: requirement lookup, depth, closure and ordering."""

import logging
from collections import deque
from collections.abc import Iterable
from typing import Protocol

from skillplan.core.models import Prerequisite, TrainingStep, ladder, validate_level
from skillplan.core.storage import UnknownSkillError

logger = logging.getLogger(__name__)


class CyclicDependencyError(Exception):
    """Raised when a skill transitively requires itself."""

    def __init__(self, cycle: list[int]):
        self.cycle = cycle
        path = " -> ".join(str(sid) for sid in cycle)
        super().__init__(f"Cyclic skill dependency: {path}")


class SkillRequirementProvider(Protocol):
    """Source of direct skill prerequisites.

    Implementations return one entry per prerequisite skill at its maximum
    required level, and raise ``UnknownSkillError`` for skills they have no
    record of.
    """

    def requirements_of(self, skill_id: int) -> Iterable[Prerequisite]: ...


class RequirementLookup:
    """Memoizing front for a provider that degrades unknown skills to leaves.

    Skills the provider does not know are logged once, remembered in
    ``unknown`` and treated as having no prerequisites.
    """

    def __init__(self, provider: SkillRequirementProvider):
        self.provider = provider
        self.unknown: set[int] = set()
        self._cache: dict[int, tuple[Prerequisite, ...]] = {}

    def requirements_of(self, skill_id: int) -> tuple[Prerequisite, ...]:
        cached = self._cache.get(skill_id)
        if cached is not None:
            return cached
        try:
            prereqs = tuple(
                sorted(self.provider.requirements_of(skill_id), key=lambda p: p.skill_id)
            )
        except UnknownSkillError:
            logger.warning("No data for skill %s; treating it as having no prerequisites", skill_id)
            self.unknown.add(skill_id)
            prereqs = ()
        self._cache[skill_id] = prereqs
        return prereqs


class DepthCalculator:
    """Structural dependency depth of skills, memoized for the owner's lifetime.

    Depth is 0 for a skill without prerequisites, otherwise one more than the
    deepest direct prerequisite.
    """

    def __init__(self, lookup: RequirementLookup):
        self.lookup = lookup
        self._cache: dict[int, int] = {}

    def depth(self, skill_id: int) -> int:
        return self._depth(skill_id, [])

    def _depth(self, skill_id: int, stack: list[int]) -> int:
        cached = self._cache.get(skill_id)
        if cached is not None:
            return cached
        if skill_id in stack:
            raise CyclicDependencyError(stack[stack.index(skill_id) :] + [skill_id])

        prereqs = self.lookup.requirements_of(skill_id)
        if not prereqs:
            result = 0
        else:
            stack.append(skill_id)
            try:
                result = 1 + max(self._depth(p.skill_id, stack) for p in prereqs)
            finally:
                stack.pop()

        self._cache[skill_id] = result
        return result


class PrerequisiteExpander:
    """Expands a skill request into every training step it transitively needs."""

    def __init__(self, lookup: RequirementLookup, depths: DepthCalculator):
        self.lookup = lookup
        self.depths = depths

    def required_levels(self, skill_id: int) -> dict[int, int]:
        """Map every ancestor of ``skill_id`` to the highest level any path requires.

        Raises ``CyclicDependencyError`` if the ancestry loops back on itself.
        """
        # Depth walks the whole ancestry with cycle detection, so the BFS below
        # can rely on a plain visited set.
        self.depths.depth(skill_id)

        required: dict[int, int] = {}
        visited = {skill_id}
        queue: deque[int] = deque([skill_id])

        while queue:
            current = queue.popleft()
            for prereq in self.lookup.requirements_of(current):
                required[prereq.skill_id] = max(required.get(prereq.skill_id, 0), prereq.level)
                if prereq.skill_id not in visited:
                    visited.add(prereq.skill_id)
                    queue.append(prereq.skill_id)

        return required

    def prerequisite_steps(self, skill_id: int) -> set[TrainingStep]:
        """Full level ladders of every ancestor, up to its maximum required level."""
        steps: set[TrainingStep] = set()
        for prereq_id, max_level in self.required_levels(skill_id).items():
            steps.update(ladder(prereq_id, 1, max_level))
        return steps

    def expand(self, skill_id: int, target_level: int, start_level: int = 1) -> set[TrainingStep]:
        """Prerequisite closure plus the target's own ladder from ``start_level``."""
        validate_level(target_level)
        steps = self.prerequisite_steps(skill_id)
        steps.update(ladder(skill_id, start_level, target_level))
        return steps


class StepOrderer:
    """Orders steps by (depth, skill ID, level).

    A prerequisite is always strictly shallower than its dependents, so the
    ordering places every prerequisite before the skills that need it.
    """

    def __init__(self, depths: DepthCalculator):
        self.depths = depths

    def sort_key(self, step: TrainingStep) -> tuple[int, int, int]:
        return (self.depths.depth(step.skill_id), step.skill_id, step.level)

    def order(self, steps: Iterable[TrainingStep]) -> list[TrainingStep]:
        return sorted(steps, key=self.sort_key)
