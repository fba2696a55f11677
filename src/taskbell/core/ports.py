# src/taskbell/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the reminder engine.

The core depends on Protocols instead of concrete implementations.
This keeps storage and alert channels swappable and makes testing easier.
"""

from enum import StrEnum
from typing import Iterable, Protocol

from ..reminders.models import Reminder, Task


class NotificationPermission(StrEnum):
    GRANTED = "granted"
    DENIED = "denied"
    DEFAULT = "default"  # not asked yet


class ReminderRepo(Protocol):
    """Read/write contract of the persistent store as seen by the engine and CRUD helpers."""

    def get_tasks(self) -> list[Task]: ...
    def get_reminders(self) -> list[Reminder]: ...

    def save_task(self, task: Task) -> None: ...
    def save_all_tasks(self, tasks: Iterable[Task]) -> None: ...
    def delete_tasks(self, task_ids: Iterable[str]) -> None: ...

    def save_reminder(self, reminder: Reminder) -> None: ...
    def save_all_reminders(self, reminders: Iterable[Reminder]) -> None: ...
    def delete_reminders(self, reminder_ids: Iterable[str]) -> None: ...


class Notifier(Protocol):
    """
    One alert channel (tone, system notification, blocking prompt, in-process signal).

    notify() may raise; the dispatcher isolates each channel.
    """

    name: str

    def available(self) -> bool: ...
    def notify(self, task: Task, reminder: Reminder) -> None: ...


class ReminderDispatcher(Protocol):
    def permission(self) -> NotificationPermission: ...
    async def request_permission(self) -> NotificationPermission: ...
    def dispatch(self, task: Task, reminder: Reminder) -> None: ...
