"""
Priority scoring heuristic.

A task's priority is derived from three independent signals that add up to an
integer score:

- keyword signal: an urgent word in the title adds 2 (counted once);
- due-date signal: overdue adds 4, due today or within 24h adds 3,
  due within 48h adds 2;
- effort signal: an estimate of 120+ minutes adds 2, 60+ minutes adds 1.

The score is then thresholded: 5 or more is "high", 3 or 4 is "medium",
anything lower is "low".

Nothing in this module raises for malformed input. Missing or unparsable values
simply contribute no signal. "Now" is always injectable so results are
deterministic under test.
"""
from __future__ import annotations

import unicodedata
from datetime import date, datetime, tzinfo
from typing import Any, Mapping, Optional, Tuple

from .models import Priority

URGENT_KEYWORDS: Tuple[str, ...] = ("pagar", "entrega", "reunião", "urgente", "imediato", "prazo")

KEYWORD_POINTS = 2
OVERDUE_POINTS = 4
DUE_TODAY_POINTS = 3
DUE_WITHIN_24H_POINTS = 3
DUE_WITHIN_48H_POINTS = 2
LONG_EFFORT_MINUTES = 120
LONG_EFFORT_POINTS = 2
MEDIUM_EFFORT_MINUTES = 60
MEDIUM_EFFORT_POINTS = 1

HIGH_THRESHOLD = 5
MEDIUM_THRESHOLD = 3


# PUBLIC_INTERFACE
def parse_expire_at(value: Any) -> Optional[datetime]:
    """
    Leniently normalize a stored due value into a datetime.

    - datetime values are returned as-is.
    - date values are promoted to midnight.
    - ISO8601 strings are parsed (a trailing 'Z' is accepted); date-only strings
      are promoted to midnight.

    Anything else, including unparsable strings, yields None ("no due date").
    """
    if value is None:
        return None

    if isinstance(value, datetime):
        return value

    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, 0, 0, 0)

    if not isinstance(value, str):
        return None

    s = value.strip()
    if not s:
        return None
    if s.endswith(("Z", "z")):
        s = s[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(s)
    except ValueError:
        pass
    try:
        d = date.fromisoformat(s)
    except ValueError:
        return None
    return datetime(d.year, d.month, d.day, 0, 0, 0)


def resolve_now(now: Optional[datetime] = None) -> datetime:
    """Return `now`, or the current system local time (naive) when omitted."""
    return datetime.now() if now is None else now


def to_zone(value: datetime, zone: Optional[tzinfo]) -> datetime:
    """
    Express `value` as an aware datetime in `zone`.

    A zone of None means system local time: naive values are read as local wall
    time and aware values are converted, each with the UTC offset in force at
    that instant, so DST changes between two instants are honored. For an
    explicit zone, naive values are taken to be wall time in that zone.
    """
    if zone is None:
        return value.astimezone()
    if value.tzinfo is None:
        return value.replace(tzinfo=zone)
    return value.astimezone(zone)


def _normalize_title(title: Any) -> str:
    if not isinstance(title, str):
        return ""
    return unicodedata.normalize("NFC", title).lower()


def _coerce_minutes(value: Any) -> float:
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, (int, float)):
        return value
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            return 0
    return 0


def keyword_points(title: Any) -> int:
    normalized = _normalize_title(title)
    for keyword in URGENT_KEYWORDS:
        if keyword in normalized:
            return KEYWORD_POINTS
    return 0


def due_points(expire_at: Any, now: Optional[datetime] = None) -> int:
    parsed = parse_expire_at(expire_at)
    if parsed is None:
        return 0

    now = resolve_now(now)
    try:
        current = to_zone(now, now.tzinfo)
        due = to_zone(parsed, now.tzinfo)
        # Timestamps, not datetime arithmetic: same-tzinfo subtraction ignores DST.
        seconds_until_due = due.timestamp() - current.timestamp()
    except (OverflowError, ValueError, OSError):
        # Out-of-range instants (e.g. year 1 shifted west) carry no signal.
        return 0

    if seconds_until_due < 0:
        return OVERDUE_POINTS
    if due.date() == current.date():
        return DUE_TODAY_POINTS

    hours_until_due = int(seconds_until_due // 3600)
    if 0 <= hours_until_due <= 24:
        return DUE_WITHIN_24H_POINTS
    if 24 < hours_until_due <= 48:
        return DUE_WITHIN_48H_POINTS
    return 0


def effort_points(estimated_minutes: Any) -> int:
    estimated = _coerce_minutes(estimated_minutes)
    if estimated >= LONG_EFFORT_MINUTES:
        return LONG_EFFORT_POINTS
    if estimated >= MEDIUM_EFFORT_MINUTES:
        return MEDIUM_EFFORT_POINTS
    return 0


# PUBLIC_INTERFACE
def score_task(
    title: Any,
    expire_at: Any = None,
    estimated_minutes: Any = None,
    now: Optional[datetime] = None,
) -> int:
    """Return the raw additive score for the given task attributes."""
    return keyword_points(title) + due_points(expire_at, now) + effort_points(estimated_minutes)


# PUBLIC_INTERFACE
def priority_from_score(score: int) -> Priority:
    """Map an additive score onto a priority level."""
    if score >= HIGH_THRESHOLD:
        return "high"
    if score >= MEDIUM_THRESHOLD:
        return "medium"
    return "low"


# PUBLIC_INTERFACE
def compute_priority(
    title: Any,
    expire_at: Any = None,
    estimated_minutes: Any = None,
    now: Optional[datetime] = None,
) -> Priority:
    """
    Compute the priority of a task from its title, due date and time estimate.

    Args:
        title: Task title; non-strings are treated as empty.
        expire_at: ISO8601 string, date/datetime, or None.
        estimated_minutes: Time estimate in minutes, or None.
        now: The current instant. Defaults to the local wall clock.

    Returns:
        One of "low", "medium" or "high".
    """
    return priority_from_score(score_task(title, expire_at, estimated_minutes, now))


# PUBLIC_INTERFACE
def compute_task_priority(task: Mapping[str, Any], now: Optional[datetime] = None) -> Priority:
    """Apply compute_priority to a stored task record."""
    return compute_priority(
        task.get("title"),
        task.get("expireAt"),
        task.get("estimatedMinutes"),
        now,
    )
