"""
Per-subject goal state: one goal record per (namespace, subject) key,
persisted through a GoalStore and published to subscribers on every change.

Lifecycle of a key:

    NO_GOAL --set_goal--> ACTIVE --mastery change--> ACTIVE | COMPLETED
    ACTIVE | COMPLETED --clear_goal / delete_goal_for_subject--> NO_GOAL

A goal that is already mastered when chosen still passes through ACTIVE
before it is flagged COMPLETED.
"""

import asyncio
import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Dict, Iterable, List, NamedTuple, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from .errors import CorruptGoalRecordError, GoalStoreError
from .models import Skill, SkillGraph
from .planner import GoalPath, plan_goal_path
from .progress import CompletionTracker, GoalProgress, compute_progress
from .storage import GoalStore, storage_key

logger = logging.getLogger(__name__)

LOAD_ERROR = "Failed to load saved goal"


class GoalStatus(str, Enum):
    NO_GOAL = "no_goal"
    ACTIVE = "active"
    COMPLETED = "completed"


class GoalKey(NamedTuple):
    namespace: str
    subject_id: str


class GoalRecord(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    goal_skill_id: str
    skill_name: Optional[str] = None
    path: List[str] = Field(default_factory=list)
    # None until the goal has been reachable at least once
    original_total_steps: Optional[int] = Field(default=None, ge=1)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    def to_storage(self) -> str:
        return self.model_dump_json(by_alias=True)

    @classmethod
    def from_storage(cls, raw: str) -> "GoalRecord":
        return cls.model_validate_json(raw)


class GoalState(BaseModel):
    current_goal: Optional[GoalRecord] = None
    is_loading: bool = False
    error: Optional[str] = None
    status: GoalStatus = GoalStatus.NO_GOAL
    progress: Optional[GoalProgress] = None


StateCallback = Callable[[GoalKey, GoalState], None]
CompletionCallback = Callable[[GoalKey, GoalRecord, GoalProgress], None]


def _status_for(state: GoalState) -> GoalStatus:
    if state.current_goal is None:
        return GoalStatus.NO_GOAL
    if state.progress is not None and state.progress.is_completed:
        return GoalStatus.COMPLETED
    return GoalStatus.ACTIVE


class GoalStateManager:
    """Registry of goal states keyed by (namespace, subject id).

    Every mutation writes to the store before touching memory, so a failing
    store leaves the in-memory state as it was. Subscribers receive
    (key, state) for every change of any key and filter for the subjects
    they observe.
    """

    def __init__(self, store: GoalStore):
        self._store = store
        self._states: Dict[GoalKey, GoalState] = {}
        self._subscribers: List[StateCallback] = []
        self._completion_listeners: List[CompletionCallback] = []
        self._completion = CompletionTracker()

    # --- Subscriptions ---

    def subscribe(self, callback: StateCallback) -> Callable[[], None]:
        self._subscribers.append(callback)

        def unsubscribe():
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def on_goal_completed(self, callback: CompletionCallback) -> Callable[[], None]:
        self._completion_listeners.append(callback)

        def unsubscribe():
            if callback in self._completion_listeners:
                self._completion_listeners.remove(callback)

        return unsubscribe

    def get_state(self, subject_id: str, namespace: str) -> GoalState:
        state = self._states.get(GoalKey(namespace, subject_id))
        return state.model_copy(deep=True) if state else GoalState()

    def _set_state(self, key: GoalKey, **changes) -> GoalState:
        state = self._states.get(key, GoalState()).model_copy(update=changes)
        state.status = _status_for(state)
        self._states[key] = state
        for callback in list(self._subscribers):
            callback(key, state.model_copy(deep=True))
        return state

    def _discard_state(self, key: GoalKey):
        """Forgets a key that has no goal; subscribers see an empty state."""
        self._states.pop(key, None)
        self._completion.reset(key)
        for callback in list(self._subscribers):
            callback(key, GoalState())

    def _restore(self, key: GoalKey, previous: Optional[GoalState]):
        if previous is None:
            self._discard_state(key)
            return
        changes = dict(previous)
        changes["is_loading"] = False
        self._set_state(key, **changes)

    # --- Store access ---

    def _store_call(self, operation: str, key: GoalKey, *args):
        skey = storage_key(key.namespace, key.subject_id)
        try:
            return getattr(self._store, operation)(skey, *args)
        except Exception as exc:
            raise GoalStoreError(operation, skey) from exc

    # --- Operations ---

    async def load_goal(self, subject_id: str, namespace: str, skills: Iterable[Skill]) -> GoalState:
        """
        Loads the persisted goal for a subject and resolves it against the
        skill catalog.

        A record that fails to decode, or that names a skill missing from
        the catalog, is deleted from the store and the subject falls back to
        having no goal with `error` set. Store failures raise GoalStoreError
        after restoring the previous state.
        """
        key = GoalKey(namespace, subject_id)
        catalog = {skill.id: skill for skill in skills}
        previous = self._states.get(key)

        if not subject_id or not catalog:
            self._discard_state(key)
            return self.get_state(subject_id, namespace)

        self._set_state(key, is_loading=True, error=None)
        try:
            raw = await asyncio.to_thread(self._store_call, "get", key)
        except GoalStoreError:
            self._restore(key, previous)
            raise

        if raw is None:
            self._discard_state(key)
            return self.get_state(subject_id, namespace)

        try:
            record = self._decode(key, raw, catalog)
        except CorruptGoalRecordError as exc:
            logger.warning("%s; deleting it", exc)
            try:
                await asyncio.to_thread(self._store_call, "delete", key)
            except GoalStoreError:
                self._restore(key, previous)
                raise
            self._completion.reset(key)
            self._set_state(key, current_goal=None, progress=None, is_loading=False, error=LOAD_ERROR)
            return self.get_state(subject_id, namespace)

        # Reloading the goal already held keeps its progress, and so its status
        progress = None
        if previous is None or previous.current_goal is None \
                or previous.current_goal.goal_skill_id != record.goal_skill_id:
            self._completion.reset(key)
        else:
            progress = previous.progress
        logger.info("Loaded goal %s for %s/%s", record.goal_skill_id, namespace, subject_id)
        self._set_state(key, current_goal=record, progress=progress, is_loading=False)
        return self.get_state(subject_id, namespace)

    def _decode(self, key: GoalKey, raw: str, catalog: Dict[str, Skill]) -> GoalRecord:
        skey = storage_key(key.namespace, key.subject_id)
        try:
            record = GoalRecord.from_storage(raw)
        except ValidationError as exc:
            raise CorruptGoalRecordError(skey, "unreadable record") from exc

        skill = catalog.get(record.goal_skill_id)
        if skill is None:
            raise CorruptGoalRecordError(skey, f"unknown skill '{record.goal_skill_id}'")

        updates = {"skill_name": skill.name}
        if record.original_total_steps is None and record.path:
            updates["original_total_steps"] = len(record.path)
        return record.model_copy(update=updates)

    def set_goal(self, record: Optional[GoalRecord], subject_id: str, namespace: str):
        """Replaces the goal for exactly this key. None clears it."""
        if record is None:
            self.clear_goal(subject_id, namespace)
            return

        key = GoalKey(namespace, subject_id)
        record = record.model_copy(deep=True)
        self._store_call("set", key, record.to_storage())

        previous = self._states.get(key)
        if previous is None or previous.current_goal is None \
                or previous.current_goal.goal_skill_id != record.goal_skill_id:
            self._completion.reset(key)
        logger.info("Set goal %s for %s/%s", record.goal_skill_id, namespace, subject_id)
        self._set_state(key, current_goal=record, progress=None, error=None)

    def clear_goal(self, subject_id: str, namespace: str):
        key = GoalKey(namespace, subject_id)
        self._store_call("delete", key)
        logger.info("Cleared goal for %s/%s", namespace, subject_id)
        self._discard_state(key)

    def delete_goal_for_subject(self, subject_id: str, namespace: str):
        """Deletes a subject's goal whether or not anyone is observing it."""
        key = GoalKey(namespace, subject_id)
        self._store_call("delete", key)
        logger.info("Deleted goal for %s/%s", namespace, subject_id)
        self._discard_state(key)

    def update_goal_path(
        self,
        subject_id: str,
        namespace: str,
        new_path: GoalPath,
        mastered_ids: Iterable[str],
    ) -> Optional[GoalProgress]:
        """
        Stores a re-planned path for the current goal and re-derives progress
        against the frozen baseline. Returns None when no goal is set.

        The baseline is only captured here when the record has none yet,
        i.e. the goal was unreachable until now.
        """
        key = GoalKey(namespace, subject_id)
        state = self._states.get(key)
        if state is None or state.current_goal is None:
            return None

        record = state.current_goal
        if new_path.goal_id != record.goal_skill_id:
            raise ValueError(
                f"Path leads to '{new_path.goal_id}', current goal is '{record.goal_skill_id}'"
            )

        updates = {}
        if new_path.path != record.path:
            updates["path"] = list(new_path.path)
        if record.original_total_steps is None and new_path.reachable:
            updates["original_total_steps"] = len(new_path.path)
        if updates:
            record = record.model_copy(update=updates)
            self._store_call("set", key, record.to_storage())

        progress = compute_progress(new_path, mastered_ids, record.original_total_steps)
        self._set_state(key, current_goal=record, progress=progress)

        if self._completion.observe(key, progress):
            logger.info("Goal %s completed for %s/%s", record.goal_skill_id, namespace, subject_id)
            for callback in list(self._completion_listeners):
                callback(key, record.model_copy(deep=True), progress)
        return progress

    def choose_goal(
        self,
        subject_id: str,
        namespace: str,
        goal_skill_id: str,
        graph: SkillGraph,
        mastered_ids: Iterable[str],
    ) -> Tuple[GoalPath, GoalProgress]:
        """
        Plans a path to a goal skill and makes it the subject's goal.

        Raises UnresolvableGoalError before any state changes when the skill
        is not in the catalog. Choosing the goal that is already active keeps
        its baseline.
        """
        mastered = list(mastered_ids)
        goal_path = plan_goal_path(graph, mastered, goal_skill_id)

        current = self._states.get(GoalKey(namespace, subject_id))
        if current is None or current.current_goal is None \
                or current.current_goal.goal_skill_id != goal_skill_id:
            record = GoalRecord(
                goal_skill_id=goal_skill_id,
                skill_name=graph.skill(goal_skill_id).name,
                path=goal_path.path,
                original_total_steps=len(goal_path.path) or None,
            )
            self.set_goal(record, subject_id, namespace)

        progress = self.update_goal_path(subject_id, namespace, goal_path, mastered)
        return goal_path, progress

    def refresh_progress(
        self,
        subject_id: str,
        namespace: str,
        graph: SkillGraph,
        mastered_ids: Iterable[str],
    ) -> Optional[Tuple[GoalPath, GoalProgress]]:
        """Re-plans the current goal after the subject's mastery changed."""
        state = self._states.get(GoalKey(namespace, subject_id))
        if state is None or state.current_goal is None:
            return None

        mastered = list(mastered_ids)
        goal_path = plan_goal_path(graph, mastered, state.current_goal.goal_skill_id)
        progress = self.update_goal_path(subject_id, namespace, goal_path, mastered)
        return goal_path, progress
