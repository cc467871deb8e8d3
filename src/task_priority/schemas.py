from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Any, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from .models import Priority
from .scoring import parse_expire_at

# Shared type for incoming expire_at which can be a date, datetime, or ISO8601 string
ExpireAtInput = Union[date, datetime, str]


# PUBLIC_INTERFACE
class TaskDraft(BaseModel):
    """
    Schema for the fields a user submits when creating or editing a task.

    Accepts both the stored camelCase keys (expireAt, estimatedMinutes,
    priorityOverride) and their snake_case field names.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "title": "Pagar boleto",
                "description": "Conta de luz",
                "expireAt": "2025-02-01T18:00:00",
                "estimatedMinutes": 15,
                "completed": False,
                "priorityOverride": None,
            }
        },
    )

    title: str = Field(..., description="Short title for the task", min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, description="Optional detailed description")
    expire_at: Optional[datetime] = Field(
        default=None,
        description="Due date/time. Accepts ISO8601 date or datetime; dates are set to 00:00",
    )
    estimated_minutes: Optional[int] = Field(default=None, ge=0, description="Time estimate in minutes")
    completed: bool = Field(default=False, description="Completion status flag")
    priority_override: Optional[Priority] = Field(
        default=None, description="Explicit priority that wins over the computed one"
    )

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        """
        Strip whitespace and enforce 1..200 length.
        """
        if v is None:
            raise ValueError("title is required")
        s = v.strip()
        if not (1 <= len(s) <= 200):
            raise ValueError("title length must be between 1 and 200 characters")
        return s

    @field_validator("expire_at", mode="before")
    @classmethod
    def validate_expire_at(cls, v: Optional[ExpireAtInput]) -> Optional[datetime]:
        """
        Normalize expire_at from str/date/datetime to datetime.
        Empty strings mean "no due date"; anything else that does not parse is rejected.
        """
        if v is None or (isinstance(v, str) and not v.strip()):
            return None
        parsed = parse_expire_at(v)
        if parsed is None:
            raise ValueError(
                "Invalid expireAt format. Use ISO8601 date or datetime string "
                "(e.g., '2025-01-31' or '2025-01-31T13:45:00')."
            )
        return parsed

    @field_validator("priority_override", mode="before")
    @classmethod
    def normalize_override(cls, v: Any) -> Any:
        """
        Treat "none" and blank strings as "no override".
        """
        if isinstance(v, str):
            s = v.strip().lower()
            if s in {"", "none"}:
                return None
            return s
        return v

    def expire_at_iso(self) -> Optional[str]:
        """Serialize the due date for storage; aware values are stored in UTC."""
        if self.expire_at is None:
            return None
        if self.expire_at.tzinfo is not None:
            return self.expire_at.astimezone(timezone.utc).isoformat()
        return self.expire_at.isoformat()

    @classmethod
    def from_entity(cls, entity: Mapping[str, Any]) -> "TaskDraft":
        """Prefill a draft from a stored task, as when opening it for editing."""
        return cls.model_validate(
            {
                "title": entity.get("title") or "",
                "description": entity.get("description"),
                "expireAt": entity.get("expireAt"),
                "estimatedMinutes": entity.get("estimatedMinutes"),
                "completed": bool(entity.get("completed", False)),
                "priorityOverride": entity.get("priorityOverride"),
            }
        )
