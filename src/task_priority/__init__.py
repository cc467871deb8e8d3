"""
Personal task tracking with heuristic priority ranking.

The core is the priority scorer (task_priority.scoring) and the display ordering
policy (task_priority.ordering); TaskService wires them to a key-value storage
backend.
"""

from .logging_setup import setup_logging
from .models import Priority, PriorityFilter, TaskEntity, TaskView
from .ordering import compare_tasks, effective_priority, filter_tasks, matches_filter, order_for_display, sort_tasks
from .schemas import TaskDraft
from .scoring import compute_priority, compute_task_priority
from .service import TaskService
from .storage import InMemoryStorage, TaskStorage, get_storage

__all__ = [
    "Priority",
    "PriorityFilter",
    "TaskEntity",
    "TaskView",
    "TaskDraft",
    "TaskService",
    "TaskStorage",
    "InMemoryStorage",
    "get_storage",
    "compute_priority",
    "compute_task_priority",
    "effective_priority",
    "compare_tasks",
    "sort_tasks",
    "matches_filter",
    "filter_tasks",
    "order_for_display",
    "setup_logging",
]
