# src/taskbell/reminders/models.py

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import StrEnum
from typing import Any


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def parse_instant(raw: Any) -> datetime | None:
    """
    Parse a stored ISO 8601 instant.

    Naive values are treated as UTC so comparisons with aware "now" never fail.
    """
    if raw is None or raw == "":
        return None
    if isinstance(raw, datetime):
        dt = raw
    else:
        dt = datetime.fromisoformat(str(raw))
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def format_instant(dt: datetime | None) -> str | None:
    if dt is None:
        return None
    return dt.isoformat()


class Priority(StrEnum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @classmethod
    def from_raw(cls, raw: str | None) -> Priority:
        try:
            return cls(raw) if raw else cls.MEDIUM
        except ValueError:
            return cls.MEDIUM


class TaskStatus(StrEnum):
    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"

    @classmethod
    def from_raw(cls, raw: str | None) -> TaskStatus:
        try:
            return cls(raw) if raw else cls.PENDING
        except ValueError:
            return cls.PENDING


class RecurrenceType(StrEnum):
    """
    Stored with the reminder but never evaluated: a fired recurring reminder
    is completed like any other and is not rescheduled.
    """

    NONE = "none"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"

    @classmethod
    def from_raw(cls, raw: str | None) -> RecurrenceType:
        try:
            return cls(raw) if raw else cls.NONE
        except ValueError:
            return cls.NONE


@dataclass(slots=True)
class Task:
    id: str
    title: str
    description: str
    priority: Priority
    status: TaskStatus
    created_at: datetime
    updated_at: datetime
    due_at: datetime | None = None
    completed_at: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "priority": self.priority.value,
            "status": self.status.value,
            "createdAt": format_instant(self.created_at),
            "updatedAt": format_instant(self.updated_at),
            "dueDate": format_instant(self.due_at),
            "completedAt": format_instant(self.completed_at),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Task:
        created_at = parse_instant(data.get("createdAt")) or utc_now()
        return cls(
            id=str(data["id"]),
            title=str(data.get("title") or ""),
            description=str(data.get("description") or ""),
            priority=Priority.from_raw(data.get("priority")),
            status=TaskStatus.from_raw(data.get("status")),
            created_at=created_at,
            updated_at=parse_instant(data.get("updatedAt")) or created_at,
            due_at=parse_instant(data.get("dueDate")),
            completed_at=parse_instant(data.get("completedAt")),
        )


@dataclass(slots=True)
class Reminder:
    id: str
    task_id: str
    remind_at: datetime
    is_recurring: bool = False
    recurrence_type: RecurrenceType = RecurrenceType.NONE
    is_completed: bool = False
    completed_at: datetime | None = None

    def is_due(self, now: datetime) -> bool:
        return not self.is_completed and self.remind_at <= now

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "taskId": self.task_id,
            "remindAt": format_instant(self.remind_at),
            "isRecurring": self.is_recurring,
            "recurrenceType": (
                None if self.recurrence_type == RecurrenceType.NONE else self.recurrence_type.value
            ),
            "isCompleted": self.is_completed,
            "completedAt": format_instant(self.completed_at),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Reminder:
        remind_at = parse_instant(data.get("remindAt"))
        if remind_at is None:
            raise ValueError(f"reminder {data.get('id')!r} has no remindAt")
        return cls(
            id=str(data["id"]),
            task_id=str(data["taskId"]),
            remind_at=remind_at,
            is_recurring=bool(data.get("isRecurring", False)),
            recurrence_type=RecurrenceType.from_raw(data.get("recurrenceType")),
            is_completed=bool(data.get("isCompleted", False)),
            completed_at=parse_instant(data.get("completedAt")),
        )
