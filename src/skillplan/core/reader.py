"""Parser for plain-text skill plans ("<skill name> <level>" per line)."""

import re
from dataclasses import dataclass, field

from skillplan.core.storage import SkillTreeStore

_PLAN_LINE = re.compile(r"^(.+?)\s+([1-5])$")


@dataclass
class SkillPlanParseResult:
    """Requests parsed from a plan, plus the lines that could not be used."""

    requests: list[tuple[int, int]] = field(default_factory=list)
    parse_errors: list[str] = field(default_factory=list)
    not_found: list[str] = field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        return bool(self.parse_errors or self.not_found)


def parse_skill_plan(text: str, store: SkillTreeStore) -> SkillPlanParseResult:
    """Parse a skill plan into ordered ``(skill_id, level)`` requests.

    Blank lines are ignored. Lines that are not a name followed by a level
    1-5 land in ``parse_errors``; names the store cannot resolve land in
    ``not_found``. Input order is preserved.
    """
    result = SkillPlanParseResult()
    entries: list[tuple[str, int]] = []

    for line in text.splitlines():
        line = line.strip()
        if not line:
            continue
        match = _PLAN_LINE.match(line)
        if match is None:
            result.parse_errors.append(line)
            continue
        entries.append((match.group(1).strip(), int(match.group(2))))

    ids = store.find_skill_ids(name for name, _ in entries)
    for name, level in entries:
        skill_id = ids.get(name)
        if skill_id is None:
            result.not_found.append(name)
        else:
            result.requests.append((skill_id, level))

    return result
