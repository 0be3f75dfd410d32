from typing import Dict, Optional, Protocol
from urllib.parse import quote

KEY_PREFIX = "subject-goal"


def storage_key(namespace: str, subject_id: str) -> str:
    """Persistence key for one subject's goal within one namespace.

    Both parts are percent-encoded so distinct pairs can never collide.
    """
    return f"{KEY_PREFIX}:{quote(namespace, safe='')}:{quote(subject_id, safe='')}"


class GoalStore(Protocol):
    """String key/value store holding serialized goal records."""

    def get(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, value: str) -> None:
        ...

    def delete(self, key: str) -> None:
        ...


class InMemoryGoalStore:
    """Dictionary-backed GoalStore, used in tests and single-process setups."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self.data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value

    def delete(self, key: str) -> None:
        self.data.pop(key, None)

    def __contains__(self, key):
        return key in self.data
