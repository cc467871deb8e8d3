from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Literal, Optional, Tuple, TypedDict, Union

Priority = Literal["low", "medium", "high"]
PriorityFilter = Union[Priority, Literal["all"]]

PRIORITY_RANK: Dict[str, int] = {"high": 3, "medium": 2, "low": 1}
FILTER_VALUES: Tuple[str, ...] = ("all", "high", "medium", "low")


# PUBLIC_INTERFACE
class TaskEntity(TypedDict, total=False):
    """
    A persisted task record. Keys match the JSON shape written to storage.

    Fields:
    - id: Opaque unique string, assigned on first save
    - title: Short title (trimmed, never empty once saved)
    - description: Optional detailed description
    - expireAt: Optional due date/time as an ISO8601 string
    - estimatedMinutes: Optional non-negative time estimate
    - completed: Boolean completion flag
    - priority: Last computed priority, refreshed on every save
    - priorityOverride: Optional user-chosen priority that wins for display
    """

    id: str
    title: str
    description: Optional[str]
    expireAt: Optional[str]
    estimatedMinutes: Optional[int]
    completed: bool
    priority: Priority
    priorityOverride: Optional[Priority]


# PUBLIC_INTERFACE
@dataclass(frozen=True)
class TaskView:
    """A stored task paired with the priority it should be displayed with."""

    task: TaskEntity
    priority: Priority

    @property
    def id(self) -> str:
        return self.task.get("id") or ""

    @property
    def title(self) -> str:
        return self.task.get("title") or ""

    @property
    def completed(self) -> bool:
        return bool(self.task.get("completed", False))


def is_priority(value: object) -> bool:
    return isinstance(value, str) and value in PRIORITY_RANK
