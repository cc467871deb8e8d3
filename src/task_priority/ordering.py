"""
Display ordering and priority filtering for task collections.

Every task is first resolved to its effective priority (an explicit override
wins, otherwise the score is recomputed against the current time). The list is
then ordered by:

1. priority, highest first;
2. due date, dated tasks first and earliest due first;
3. title, ascending, compared case- and accent-insensitively;
4. exact title with lowercase before uppercase, then id, so that no two
   distinct records ever tie.

All functions here are pure and never raise for malformed task data.
"""
from __future__ import annotations

import unicodedata
from datetime import datetime
from typing import Any, Iterable, List, Mapping, Optional, Tuple

from .models import FILTER_VALUES, PRIORITY_RANK, Priority, TaskEntity, TaskView, is_priority
from .scoring import compute_task_priority, parse_expire_at, resolve_now, to_zone

OrderKey = Tuple[int, int, float, str, str, str]


# PUBLIC_INTERFACE
def effective_priority(task: Mapping[str, Any], now: Optional[datetime] = None) -> Priority:
    """
    Return the priority a task should be displayed and filtered with.

    A valid priorityOverride takes precedence. Otherwise the priority is
    recomputed from the task's current attributes, never read from the stored
    `priority` field, so time-relative urgency is always fresh.
    """
    override = task.get("priorityOverride")
    if is_priority(override):
        return override  # type: ignore[return-value]
    return compute_task_priority(task, now)


def due_timestamp(task: Mapping[str, Any], now: Optional[datetime] = None) -> Optional[float]:
    """
    Return the task's due instant as a POSIX timestamp, or None when absent or
    malformed. Naive due values are read in the zone of `now`.
    """
    parsed = parse_expire_at(task.get("expireAt"))
    if parsed is None:
        return None
    now = resolve_now(now)
    try:
        return to_zone(parsed, now.tzinfo).timestamp()
    except (OverflowError, ValueError, OSError):
        return None


def collation_key(title: Any) -> str:
    """Primary comparison key for titles: accents stripped, case folded."""
    if not isinstance(title, str):
        return ""
    decomposed = unicodedata.normalize("NFKD", title)
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return stripped.casefold()


def _order_key(task: Mapping[str, Any], priority: str, now: datetime) -> OrderKey:
    due = due_timestamp(task, now)
    title = task.get("title")
    title = title if isinstance(title, str) else ""
    task_id = task.get("id")
    return (
        -PRIORITY_RANK.get(priority, 1),
        0 if due is not None else 1,
        due if due is not None else 0.0,
        collation_key(title),
        title.swapcase(),
        task_id if isinstance(task_id, str) else str(task_id or ""),
    )


# PUBLIC_INTERFACE
def sort_key(task: Mapping[str, Any], now: Optional[datetime] = None) -> OrderKey:
    """Key function form of the display order, usable with sorted()."""
    current = resolve_now(now)
    return _order_key(task, effective_priority(task, current), current)


# PUBLIC_INTERFACE
def compare_tasks(a: Mapping[str, Any], b: Mapping[str, Any], now: Optional[datetime] = None) -> int:
    """
    Three-way comparator for the display order.

    Returns a negative number when `a` sorts first, positive when `b` does and
    zero only for records that are indistinguishable (same priority, due date,
    title and id).
    """
    current = resolve_now(now)
    key_a = sort_key(a, current)
    key_b = sort_key(b, current)
    return (key_a > key_b) - (key_a < key_b)


# PUBLIC_INTERFACE
def sort_tasks(tasks: Iterable[TaskEntity], now: Optional[datetime] = None) -> List[TaskEntity]:
    """Return a new list with the tasks in display order."""
    current = resolve_now(now)
    return sorted(tasks, key=lambda t: sort_key(t, current))


# PUBLIC_INTERFACE
def matches_filter(task: Mapping[str, Any], filter_value: str, now: Optional[datetime] = None) -> bool:
    """
    Return True when the task belongs in the view selected by `filter_value`.

    "all" passes every task; a priority level passes only tasks whose effective
    priority equals it. Unknown filter values match nothing.
    """
    if filter_value == "all":
        return True
    return effective_priority(task, now) == filter_value


# PUBLIC_INTERFACE
def filter_tasks(
    tasks: Iterable[TaskEntity], filter_value: str, now: Optional[datetime] = None
) -> List[TaskEntity]:
    """Keep only the tasks matching `filter_value`, preserving their relative order."""
    current = resolve_now(now)
    return [t for t in tasks if matches_filter(t, filter_value, current)]


def is_filter_value(value: object) -> bool:
    return isinstance(value, str) and value in FILTER_VALUES


# PUBLIC_INTERFACE
def order_for_display(
    tasks: Iterable[TaskEntity], filter_value: str = "all", now: Optional[datetime] = None
) -> List[TaskView]:
    """
    Resolve, sort and filter a task snapshot for display.

    Effective priority is computed once per task against a single "now", so the
    badge shown, the sort position and the filter decision always agree.
    """
    current = resolve_now(now)
    views = [TaskView(task=t, priority=effective_priority(t, current)) for t in tasks]
    views.sort(key=lambda v: _order_key(v.task, v.priority, current))
    if filter_value == "all":
        return views
    return [v for v in views if v.priority == filter_value]
