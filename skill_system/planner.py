import logging
from typing import Iterable, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .errors import UnresolvableGoalError
from .models import Skill, SkillGraph

logger = logging.getLogger(__name__)

FRONTIER_ANCHOR = "frontier"


class GoalPath(BaseModel):
    """Route from a subject's mastery to a goal skill, goal id last."""

    model_config = ConfigDict(frozen=True)

    goal_id: str
    path: List[str] = Field(default_factory=list)
    skills: List[Skill] = Field(default_factory=list)
    reachable: bool = False
    anchor: Optional[str] = None
    total_xp: int = 0
    remaining_xp: int = 0
    unresolved_ids: List[str] = Field(default_factory=list)


def _ordered_unique(ids: Iterable[str]) -> List[str]:
    seen = set()
    res = []
    for skill_id in ids:
        if skill_id not in seen:
            seen.add(skill_id)
            res.append(skill_id)
    return res


def _find_route(graph: SkillGraph, mastered: List[str], goal_id: str):
    """Returns (path, anchor) using the first search step that succeeds."""
    # 1. the goal is already mastered
    if goal_id in mastered:
        logger.debug("Goal %s already mastered", goal_id)
        return [goal_id], None

    # 2. shortest path from any mastered skill; the first minimum wins
    best: List[str] = []
    anchor = None
    for mastered_id in mastered:
        path = graph.shortest_path(mastered_id, goal_id)
        if path and (not best or len(path) < len(best)):
            best = path
            anchor = mastered_id
    if best:
        logger.debug("Goal %s reached from mastered skill %s", goal_id, anchor)
        return best, anchor

    frontier = graph.reachable_next_skills(mastered)

    # 3. the goal sits on the one-hop frontier
    if goal_id in frontier:
        logger.debug("Goal %s is on the frontier", goal_id)
        return [goal_id], FRONTIER_ANCHOR

    # 4. relay through a frontier skill
    for frontier_id in frontier:
        path_from_frontier = graph.shortest_path(frontier_id, goal_id)
        if not path_from_frontier:
            continue
        candidate = [frontier_id] + path_from_frontier
        if not best or len(candidate) < len(best):
            best = candidate
    if best:
        logger.debug("Goal %s reached by relay through %s", goal_id, best[0])
        return best, FRONTIER_ANCHOR

    # 5. unreachable
    return [], None


def plan_goal_path(graph: SkillGraph, mastered_ids: Iterable[str], goal_id: str) -> GoalPath:
    """
    Computes the best path from a subject's mastered skills to a goal skill.

    mastered_ids is read in iteration order, which decides ties between
    equally short routes. Raises UnresolvableGoalError when goal_id is not
    in the graph's catalog. An unreachable goal is returned with
    reachable=False and an empty path.
    """
    if goal_id not in graph:
        raise UnresolvableGoalError(goal_id)

    mastered = _ordered_unique(mastered_ids)
    mastered_set = set(mastered)
    path, anchor = _find_route(graph, mastered, goal_id)

    skills: List[Skill] = []
    unresolved: List[str] = []
    for skill_id in path:
        skill = graph.skill(skill_id)
        if skill is None:
            unresolved.append(skill_id)
        else:
            skills.append(skill)
    if unresolved:
        logger.warning(
            "Dropping %d unknown skill id(s) from path to %s: %s",
            len(unresolved), goal_id, ", ".join(unresolved),
        )

    return GoalPath(
        goal_id=goal_id,
        path=path,
        skills=skills,
        reachable=bool(path),
        anchor=anchor,
        total_xp=sum(skill.xp_required for skill in skills),
        remaining_xp=sum(skill.xp_required for skill in skills if skill.id not in mastered_set),
        unresolved_ids=unresolved,
    )
