"""Skill lookup routes."""

from fastapi import APIRouter, Depends, HTTPException

from skillplan.core.graph import CyclicDependencyError
from skillplan.core.resolver import QueueResolver
from skillplan.core.storage import SkillTreeStore
from skillplan.web.dependencies import get_store

router = APIRouter()


@router.get("/{skill_id}")
async def get_skill(skill_id: int, store: SkillTreeStore = Depends(get_store)):
    """Return a skill's name, depth and direct prerequisites."""
    skill = store.get_skill(skill_id)
    if skill is None:
        raise HTTPException(status_code=404, detail=f"Unknown skill: {skill_id}")

    try:
        depth = QueueResolver(store).depths.depth(skill_id)
    except CyclicDependencyError as e:
        raise HTTPException(status_code=422, detail=str(e))

    prereqs = sorted(store.requirements_of(skill_id), key=lambda p: p.skill_id)
    return {
        "skill_id": skill.skill_id,
        "name": skill.name,
        "depth": depth,
        "prerequisites": [
            {"skill_id": p.skill_id, "name": store.skill_name(p.skill_id), "level": p.level}
            for p in prereqs
        ],
    }
