"""
Task list workflows on top of a storage backend.

TaskService plays the part of the list and form screens: it loads a snapshot,
applies one pure edit, and writes the result back. Persistence is best-effort;
a failed save is logged and the computed result is still returned.
"""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Callable, List, Mapping, Optional, Union

from . import collection
from .models import TaskEntity, TaskView
from .ordering import is_filter_value, order_for_display
from .schemas import TaskDraft
from .storage import TaskStorage, get_storage

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


# PUBLIC_INTERFACE
class TaskService:
    """Create, list, edit, complete and delete tasks persisted in a TaskStorage."""

    def __init__(self, storage: Optional[TaskStorage] = None, clock: Optional[Clock] = None) -> None:
        self._storage = storage or get_storage()
        # Naive local time, so due dates are compared under the system zone rules.
        self._clock: Clock = clock or datetime.now

    @property
    def storage(self) -> TaskStorage:
        return self._storage

    def _persist(self, tasks: List[TaskEntity]) -> None:
        if not self._storage.save(tasks):
            logger.warning("Task list not persisted (%d task(s))", len(tasks))

    def list_tasks(self, filter_value: str = "all") -> List[TaskView]:
        """
        Load all tasks and return them resolved, sorted and filtered for display.

        Raises:
            ValueError: if filter_value is not one of all/high/medium/low.
        """
        if not is_filter_value(filter_value):
            raise ValueError("filter must be one of 'all', 'high', 'medium', 'low'")
        return order_for_display(self._storage.load(), filter_value, self._clock())

    def get_task(self, task_id: str) -> Optional[TaskEntity]:
        return collection.find_task(self._storage.load(), task_id)

    def save_task(
        self,
        draft: Union[TaskDraft, Mapping[str, Any]],
        task_id: Optional[str] = None,
    ) -> TaskEntity:
        """
        Validate and store a task, creating it when task_id is None or unknown.

        Raises:
            pydantic.ValidationError: if a mapping draft fails validation.
        """
        if not isinstance(draft, TaskDraft):
            draft = TaskDraft.model_validate(draft)

        tasks, saved = collection.save_task(self._storage.load(), draft, task_id=task_id, now=self._clock())
        logger.debug(
            "Saving task id=%s priority=%s override=%s",
            saved["id"],
            saved["priority"],
            saved["priorityOverride"],
        )
        logger.debug("Total tasks after save: %d", len(tasks))
        self._persist(tasks)
        return saved

    def toggle_completion(self, task_id: str) -> List[TaskEntity]:
        tasks = collection.toggle_completion(self._storage.load(), task_id)
        self._persist(tasks)
        return tasks

    def delete_task(self, task_id: str) -> List[TaskEntity]:
        tasks = collection.delete_task(self._storage.load(), task_id)
        self._persist(tasks)
        return tasks
