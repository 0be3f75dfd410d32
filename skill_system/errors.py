class GoalEngineError(Exception):
    """Base class for goal tracking errors."""


class UnresolvableGoalError(GoalEngineError):
    """The requested goal skill is not in the skill catalog."""

    def __init__(self, goal_id: str):
        self.goal_id = goal_id
        super().__init__(f"Goal skill '{goal_id}' not found in the skill catalog")


class CorruptGoalRecordError(GoalEngineError):
    """A persisted goal record could not be decoded or resolved."""

    def __init__(self, key: str, reason: str):
        self.key = key
        self.reason = reason
        super().__init__(f"Corrupt goal record under '{key}': {reason}")


class GoalStoreError(GoalEngineError):
    """The persistence store failed while reading, writing or deleting a key."""

    def __init__(self, operation: str, key: str):
        self.operation = operation
        self.key = key
        super().__init__(f"Goal store failed to {operation} '{key}'")
