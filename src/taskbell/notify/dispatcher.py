# src/taskbell/notify/dispatcher.py

from __future__ import annotations

import logging

from ..core.ports import NotificationPermission, Notifier
from ..reminders.models import Reminder, Task
from .channels import SystemNotifier

logger = logging.getLogger(__name__)


class NotificationDispatcher:
    """
    Surfaces a firing reminder through every channel that applies:

    1. alert tone (if audio output exists)
    2. system notification when permission is granted, otherwise the blocking prompt
    3. in-process show_reminder_modal signal (always)

    Every channel is isolated: an exception in one is logged and the rest still run.
    """

    def __init__(
        self,
        *,
        tone: Notifier | None,
        system: SystemNotifier | None,
        fallback: Notifier,
        in_process: Notifier,
    ) -> None:
        self.tone = tone
        self.system = system
        self.fallback = fallback
        self.in_process = in_process

    def permission(self) -> NotificationPermission:
        if self.system is None:
            return NotificationPermission.DENIED
        return self.system.permission()

    async def request_permission(self) -> NotificationPermission:
        """Safe to call repeatedly; never raises."""
        if self.system is None:
            return NotificationPermission.DENIED
        try:
            return await self.system.request_permission()
        except Exception:
            logger.exception("Notification permission request failed.")
            return NotificationPermission.DENIED

    def plan(self) -> list[Notifier]:
        channels: list[Notifier] = []
        if self.tone is not None:
            channels.append(self.tone)
        if self.system is not None and self.permission() == NotificationPermission.GRANTED:
            channels.append(self.system)
        else:
            channels.append(self.fallback)
        channels.append(self.in_process)
        return channels

    def dispatch(self, task: Task, reminder: Reminder) -> None:
        logger.info("Reminder firing id=%s task=%s title=%r", reminder.id, task.id, task.title)

        for channel in self.plan():
            try:
                if not channel.available():
                    logger.debug("Alert channel unavailable channel=%s", channel.name)
                    continue
                channel.notify(task, reminder)
            except Exception:
                logger.exception("Alert channel failed channel=%s reminder=%s", channel.name, reminder.id)
