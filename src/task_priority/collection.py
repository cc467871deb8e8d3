"""
Pure edits over a task list snapshot.

Each operation returns a new list and leaves its input untouched; records that
are not changed are shared between the old and new list, changed records are
fresh dicts.
"""
from __future__ import annotations

import uuid
from datetime import datetime
from typing import Iterable, List, Optional, Tuple

from .models import TaskEntity
from .schemas import TaskDraft
from .scoring import compute_priority


def new_task_id() -> str:
    return uuid.uuid4().hex


# PUBLIC_INTERFACE
def find_task(tasks: Iterable[TaskEntity], task_id: str) -> Optional[TaskEntity]:
    """Return the task with the given id, or None if not found."""
    for task in tasks:
        if task.get("id") == task_id:
            return task
    return None


# PUBLIC_INTERFACE
def build_entity(
    draft: TaskDraft,
    task_id: Optional[str] = None,
    existing: Optional[TaskEntity] = None,
    now: Optional[datetime] = None,
) -> TaskEntity:
    """
    Turn a validated draft into a storable record.

    The stored `priority` is always the computed score; an override is kept
    alongside it and never replaces it. When editing, a completion flag that the
    draft did not set explicitly is carried over from the existing record.
    """
    expire_at = draft.expire_at_iso()
    completed = draft.completed
    if existing is not None and "completed" not in draft.model_fields_set:
        completed = bool(existing.get("completed", False))

    return {
        "id": task_id or new_task_id(),
        "title": draft.title,
        "description": draft.description,
        "expireAt": expire_at,
        "estimatedMinutes": draft.estimated_minutes,
        "completed": completed,
        "priority": compute_priority(draft.title, expire_at, draft.estimated_minutes, now),
        "priorityOverride": draft.priority_override,
    }


# PUBLIC_INTERFACE
def upsert_task(tasks: Iterable[TaskEntity], entity: TaskEntity) -> List[TaskEntity]:
    """Replace the record with the same id in place, or append it if new."""
    result = list(tasks)
    for index, task in enumerate(result):
        if task.get("id") == entity["id"]:
            result[index] = entity
            return result
    result.append(entity)
    return result


# PUBLIC_INTERFACE
def save_task(
    tasks: Iterable[TaskEntity],
    draft: TaskDraft,
    task_id: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Tuple[List[TaskEntity], TaskEntity]:
    """
    Create or update a task from a draft.

    Returns:
        (new task list, saved record)
    """
    snapshot = list(tasks)
    existing = find_task(snapshot, task_id) if task_id else None
    entity = build_entity(draft, task_id=task_id, existing=existing, now=now)
    return upsert_task(snapshot, entity), entity


# PUBLIC_INTERFACE
def toggle_completion(tasks: Iterable[TaskEntity], task_id: str) -> List[TaskEntity]:
    """Flip the completion flag of one task. Unknown ids leave the list unchanged."""
    return [
        {**task, "completed": not task.get("completed", False)} if task.get("id") == task_id else task
        for task in tasks
    ]


# PUBLIC_INTERFACE
def delete_task(tasks: Iterable[TaskEntity], task_id: str) -> List[TaskEntity]:
    """Drop one task by id. Unknown ids leave the list unchanged."""
    return [task for task in tasks if task.get("id") != task_id]
