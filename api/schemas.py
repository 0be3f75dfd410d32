from pydantic import BaseModel, Field
from typing import List, Optional

from skill_system.goals import GoalState
from skill_system.models import Skill
from skill_system.planner import GoalPath
from skill_system.progress import GoalProgress


class GoalChoice(BaseModel):
    goal_skill_id: str = Field(min_length=1)


class GoalStateResponse(BaseModel):
    namespace: str
    subject_id: str
    state: GoalState


class GoalUpdateResponse(GoalStateResponse):
    path: GoalPath
    progress: Optional[GoalProgress] = None


class SkillPath(BaseModel):
    source_id: str
    target_id: str
    path: List[str]
    reachable: bool


class NextSkills(BaseModel):
    subject_id: str
    skills: List[Skill]
