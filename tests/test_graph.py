"""Tests for depth calculation, prerequisite expansion and step ordering."""

from collections import Counter

import pytest

from skillplan.core.graph import (
    CyclicDependencyError,
    DepthCalculator,
    PrerequisiteExpander,
    RequirementLookup,
    StepOrderer,
)
from skillplan.core.models import InvalidLevelError, Prerequisite, TrainingStep
from skillplan.core.storage import UnknownSkillError


class DictProvider:
    """Provider over ``{skill_id: {prereq_id: level}}`` that counts lookups."""

    def __init__(self, edges: dict[int, dict[int, int]]):
        self.edges = edges
        self.calls: Counter[int] = Counter()

    def requirements_of(self, skill_id: int) -> set[Prerequisite]:
        self.calls[skill_id] += 1
        if skill_id not in self.edges:
            raise UnknownSkillError(skill_id)
        return {Prerequisite(skill_id=sid, level=lvl) for sid, lvl in self.edges[skill_id].items()}


def _steps(*pairs: tuple[int, int]) -> list[TrainingStep]:
    return [TrainingStep(skill_id=s, level=lvl) for s, lvl in pairs]


def _services(edges):
    provider = DictProvider(edges)
    lookup = RequirementLookup(provider)
    depths = DepthCalculator(lookup)
    return provider, lookup, depths, PrerequisiteExpander(lookup, depths), StepOrderer(depths)


# C requires D 2 and E 1, D requires E 2. IDs run against depth on purpose.
SCENARIO_C = {10: {40: 2, 50: 1}, 40: {50: 2}, 50: {}}


class TestRequirementLookup:
    def test_sorted_and_cached(self):
        provider, lookup, *_ = _services({1: {3: 1, 2: 4}, 2: {}, 3: {}})
        first = lookup.requirements_of(1)
        second = lookup.requirements_of(1)
        assert [p.skill_id for p in first] == [2, 3]
        assert first == second
        assert provider.calls[1] == 1

    def test_unknown_skill_degrades_to_leaf(self, caplog):
        _, lookup, *_ = _services({})
        with caplog.at_level("WARNING"):
            assert lookup.requirements_of(99) == ()
        assert lookup.unknown == {99}
        assert "99" in caplog.text


class TestDepthCalculator:
    def test_leaf_has_depth_zero(self):
        *_, depths, _, _ = _services({1: {}})
        assert depths.depth(1) == 0

    def test_chain(self):
        *_, depths, _, _ = _services({3: {2: 1}, 2: {1: 1}, 1: {}})
        assert depths.depth(3) == 2
        assert depths.depth(2) == 1

    def test_longest_path_wins(self):
        # 4 -> 1 directly and 4 -> 3 -> 2 -> 1
        *_, depths, _, _ = _services({4: {1: 1, 3: 1}, 3: {2: 1}, 2: {1: 1}, 1: {}})
        assert depths.depth(4) == 3

    def test_memoized_across_calls(self):
        provider, _, depths, _, _ = _services({3: {1: 1, 2: 1}, 2: {1: 1}, 1: {}})
        depths.depth(3)
        depths.depth(2)
        depths.depth(3)
        assert all(count == 1 for count in provider.calls.values())

    def test_unknown_skill_is_depth_zero(self):
        _, lookup, depths, _, _ = _services({1: {77: 2}})
        assert depths.depth(77) == 0
        assert depths.depth(1) == 1
        assert 77 in lookup.unknown

    def test_cycle_detected(self):
        *_, depths, _, _ = _services({1: {2: 1}, 2: {3: 1}, 3: {1: 1}})
        with pytest.raises(CyclicDependencyError) as exc:
            depths.depth(1)
        assert exc.value.cycle == [1, 2, 3, 1]

    def test_self_requirement_is_a_cycle(self):
        *_, depths, _, _ = _services({5: {5: 1}})
        with pytest.raises(CyclicDependencyError):
            depths.depth(5)

    def test_cycle_does_not_poison_unrelated_skills(self):
        *_, depths, _, _ = _services({1: {2: 1}, 2: {1: 1}, 3: {4: 1}, 4: {}})
        with pytest.raises(CyclicDependencyError):
            depths.depth(1)
        assert depths.depth(3) == 1


class TestPrerequisiteExpander:
    def test_required_levels_take_maximum_across_paths(self):
        *_, expander, _ = _services(SCENARIO_C)
        assert expander.required_levels(10) == {40: 2, 50: 2}

    def test_leaf_has_no_prerequisites(self):
        *_, expander, _ = _services({1: {}})
        assert expander.required_levels(1) == {}
        assert expander.prerequisite_steps(1) == set()

    def test_expand_includes_full_ladders(self):
        # A (1) requires B (2) at level 3
        *_, expander, _ = _services({1: {2: 3}, 2: {}})
        assert expander.expand(1, 2) == set(_steps((2, 1), (2, 2), (2, 3), (1, 1), (1, 2)))

    def test_expand_with_start_level(self):
        *_, expander, _ = _services({1: {2: 1}, 2: {}})
        assert expander.expand(1, 4, start_level=3) == set(_steps((2, 1), (1, 3), (1, 4)))

    def test_expand_rejects_invalid_level(self):
        *_, expander, _ = _services({1: {}})
        with pytest.raises(InvalidLevelError):
            expander.expand(1, 0)
        with pytest.raises(InvalidLevelError):
            expander.expand(1, 6)

    def test_expand_cycle_raises(self):
        *_, expander, _ = _services({1: {2: 1}, 2: {1: 1}})
        with pytest.raises(CyclicDependencyError):
            expander.expand(1, 1)

    def test_zero_level_requirement_adds_no_steps(self):
        *_, expander, _ = _services({1: {2: 0}, 2: {}})
        assert expander.prerequisite_steps(1) == set()


class TestStepOrderer:
    def test_depth_then_id_then_level(self):
        *_, expander, orderer = _services(SCENARIO_C)
        ordered = orderer.order(expander.expand(10, 1))
        assert ordered == _steps((50, 1), (50, 2), (40, 1), (40, 2), (10, 1))

    def test_same_depth_sorted_by_id(self):
        *_, orderer = _services({1: {}, 2: {}, 3: {1: 1}})
        ordered = orderer.order(set(_steps((2, 1), (3, 1), (1, 2), (1, 1))))
        assert ordered == _steps((1, 1), (1, 2), (2, 1), (3, 1))

    def test_deterministic(self):
        *_, expander, orderer = _services(SCENARIO_C)
        first = orderer.order(expander.expand(10, 5))
        second = orderer.order(list(reversed(first)))
        assert first == second
