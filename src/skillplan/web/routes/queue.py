"""Queue resolution routes.

Each request builds its own resolver, so results always reflect the skill
data as stored at request time.
"""

from dataclasses import asdict

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from skillplan.core.graph import CyclicDependencyError
from skillplan.core.models import InvalidLevelError
from skillplan.core.resolver import QueueResolver
from skillplan.core.storage import SkillTreeStore
from skillplan.web.dependencies import get_store

router = APIRouter()


class SkillRequest(BaseModel):
    skill_id: int
    level: int


class CorrectRequest(BaseModel):
    requests: list[SkillRequest] = Field(default_factory=list)


class PlanRequest(BaseModel):
    requests: list[SkillRequest] = Field(default_factory=list)
    baselines: dict[int, int] = Field(default_factory=dict)


@router.post("/correct")
async def correct_queue(body: CorrectRequest, store: SkillTreeStore = Depends(get_store)):
    """Correct a whole queue in one batch."""
    result = QueueResolver(store).correct_queue((r.skill_id, r.level) for r in body.requests)
    return {
        "steps": [step.model_dump() for step in result.steps],
        "warnings": [asdict(w) for w in result.warnings],
        "failures": [asdict(f) for f in result.failures],
    }


@router.post("/plan")
async def plan_queue(body: PlanRequest, store: SkillTreeStore = Depends(get_store)):
    """Run the requests through one interactive planning session."""
    resolver = QueueResolver(store, trained_levels=body.baselines)
    results = []
    for request in body.requests:
        try:
            resolution = resolver.add_skill_request(request.skill_id, request.level)
        except (InvalidLevelError, CyclicDependencyError) as e:
            raise HTTPException(status_code=422, detail=str(e))
        results.append(
            {
                "skill_id": resolution.skill_id,
                "level": resolution.level,
                "steps": [step.model_dump() for step in resolution.steps],
                "warnings": [asdict(w) for w in resolution.warnings],
            }
        )
    return {"results": results}
