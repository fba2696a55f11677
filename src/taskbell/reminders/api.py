# src/taskbell/reminders/api.py

"""
Task/reminder helpers for collaborators outside the engine (UI, scripts, tests).

All writes go through state.store; helpers that change reminders broadcast
reminders_changed so open views can re-read.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import replace
from datetime import datetime
from typing import Any

from ..core.state import AppState
from .models import Priority, RecurrenceType, Reminder, Task, TaskStatus, parse_instant, utc_now

logger = logging.getLogger(__name__)


def _new_id() -> str:
    return uuid.uuid4().hex


def add_task(
    state: AppState,
    *,
    title: str,
    description: str = "",
    priority: Priority = Priority.MEDIUM,
    status: TaskStatus = TaskStatus.PENDING,
    due_at: datetime | None = None,
) -> Task:
    """
    Create a task. When it has a due date and auto reminders are on,
    a reminder for that instant is created alongside it.
    """
    if not title or not title.strip():
        raise ValueError("title is required")

    now = utc_now()
    task = Task(
        id=_new_id(),
        title=title.strip(),
        description=(description or "").strip(),
        priority=priority,
        status=status,
        created_at=now,
        updated_at=now,
        due_at=parse_instant(due_at),
        completed_at=now if status == TaskStatus.COMPLETED else None,
    )
    state.store.save_task(task)
    logger.info("Task added id=%s title=%r due_at=%s", task.id, task.title, task.due_at)

    if task.due_at is not None and state.auto_reminder:
        add_reminder(state, task_id=task.id, remind_at=task.due_at)

    return task


def update_task(state: AppState, task_id: str, **updates: Any) -> Task | None:
    """
    Apply field updates to a task.

    Keeps completed_at consistent with status: set when the task becomes
    completed, cleared when it leaves that status.
    """
    task = next((t for t in state.store.get_tasks() if t.id == task_id), None)
    if task is None:
        logger.warning("update_task: task %s not found", task_id)
        return None

    for key in ("id", "created_at", "updated_at", "completed_at"):
        updates.pop(key, None)
    if "due_at" in updates:
        updates["due_at"] = parse_instant(updates["due_at"])
    if "status" in updates:
        updates["status"] = TaskStatus.from_raw(updates["status"])
    if "priority" in updates:
        updates["priority"] = Priority.from_raw(updates["priority"])

    now = utc_now()
    updated = replace(task, **updates, updated_at=now)

    if updated.status == TaskStatus.COMPLETED and task.status != TaskStatus.COMPLETED:
        updated.completed_at = now
    elif updated.status != TaskStatus.COMPLETED:
        updated.completed_at = None

    state.store.save_task(updated)
    return updated


def delete_task(state: AppState, task_id: str) -> None:
    delete_tasks(state, [task_id])


def delete_tasks(state: AppState, task_ids: list[str]) -> None:
    """Delete tasks and, with them, every reminder that points at them."""
    state.store.delete_tasks(task_ids)
    state.signals.reminders_changed.emit()


def reorder_tasks(state: AppState, tasks: list[Task]) -> None:
    state.store.save_all_tasks(tasks)


def add_reminder(
    state: AppState,
    *,
    task_id: str,
    remind_at: datetime,
    is_recurring: bool = False,
    recurrence_type: RecurrenceType = RecurrenceType.NONE,
) -> Reminder:
    instant = parse_instant(remind_at)
    if instant is None:
        raise ValueError("remind_at is required")

    reminder = Reminder(
        id=_new_id(),
        task_id=task_id,
        remind_at=instant,
        is_recurring=bool(is_recurring),
        recurrence_type=recurrence_type if is_recurring else RecurrenceType.NONE,
    )
    state.store.save_reminder(reminder)
    logger.info("Reminder added id=%s task_id=%s remind_at=%s", reminder.id, task_id, instant.isoformat())
    state.signals.reminders_changed.emit()
    return reminder


def update_reminder(state: AppState, reminder_id: str, **updates: Any) -> Reminder | None:
    reminder = next((r for r in state.store.get_reminders() if r.id == reminder_id), None)
    if reminder is None:
        logger.warning("update_reminder: reminder %s not found", reminder_id)
        return None

    updates.pop("id", None)
    if "remind_at" in updates:
        updates["remind_at"] = parse_instant(updates["remind_at"])
        if updates["remind_at"] is None:
            raise ValueError("remind_at is required")
    if "recurrence_type" in updates:
        updates["recurrence_type"] = RecurrenceType.from_raw(updates["recurrence_type"])

    updated = replace(reminder, **updates)
    if not updated.is_recurring:
        updated.recurrence_type = RecurrenceType.NONE
    # completed_at is non-null exactly when the reminder is completed.
    if not updated.is_completed:
        updated.completed_at = None
    elif updated.completed_at is None:
        updated.completed_at = utc_now()

    state.store.save_reminder(updated)
    state.signals.reminders_changed.emit()
    return updated


def delete_reminder(state: AppState, reminder_id: str) -> None:
    delete_reminders(state, [reminder_id])


def delete_reminders(state: AppState, reminder_ids: list[str]) -> None:
    state.store.delete_reminders(reminder_ids)
    state.signals.reminders_changed.emit()


def reorder_reminders(state: AppState, reminders: list[Reminder]) -> None:
    state.store.save_all_reminders(reminders)
    state.signals.reminders_changed.emit()


def reminders_for_task(state: AppState, task_id: str) -> list[Reminder]:
    return [r for r in state.store.get_reminders() if r.task_id == task_id]
