import math
from typing import Dict, Hashable, Iterable, Optional

from pydantic import BaseModel, ConfigDict

from .planner import GoalPath


class GoalProgress(BaseModel):
    """Progress figures for one goal. Numeric fields are None when unreachable."""

    model_config = ConfigDict(frozen=True)

    reachable: bool
    total_steps: Optional[int] = None
    completed_steps: Optional[int] = None
    remaining_steps: Optional[int] = None
    percentage: Optional[int] = None
    is_completed: bool = False
    remaining_xp: Optional[int] = None


UNREACHABLE = GoalProgress(reachable=False)


def percentage_of(completed: int, total: int) -> int:
    """Integer percentage, halves rounded up."""
    return math.floor(100 * completed / total + 0.5)


def compute_progress(
    goal_path: GoalPath,
    mastered_ids: Iterable[str],
    original_total_steps: Optional[int] = None,
) -> GoalProgress:
    """
    Converts a freshly planned path into progress against a frozen baseline.

    original_total_steps is the path length captured when the goal was set;
    pass None on the first computation and the current path length becomes
    the baseline. Completed steps are measured as baseline minus the skills
    still unmastered on the current path, clamped to [0, baseline], so the
    percentage never drops below zero or passes 100 when re-planning yields
    a route of a different length.
    """
    if not goal_path.reachable:
        return UNREACHABLE

    total = original_total_steps or len(goal_path.path)
    mastered = set(mastered_ids)
    remaining = sum(1 for skill in goal_path.skills if skill.id not in mastered)
    completed = min(max(total - remaining, 0), total)

    return GoalProgress(
        reachable=True,
        total_steps=total,
        completed_steps=completed,
        remaining_steps=remaining,
        percentage=percentage_of(completed, total),
        is_completed=remaining == 0,
        remaining_xp=goal_path.remaining_xp,
    )


class CompletionTracker:
    """Reports each not-completed -> completed edge exactly once per key."""

    def __init__(self):
        self._completed: Dict[Hashable, bool] = {}

    def observe(self, key: Hashable, progress: GoalProgress) -> bool:
        was_completed = self._completed.get(key, False)
        now_completed = progress.reachable and progress.is_completed
        self._completed[key] = now_completed
        return now_completed and not was_completed

    def is_completed(self, key: Hashable) -> bool:
        return self._completed.get(key, False)

    def reset(self, key: Hashable):
        self._completed.pop(key, None)
