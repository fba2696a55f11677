# src/taskbell/core/state.py

from __future__ import annotations

from dataclasses import dataclass

from ..notify.dispatcher import NotificationDispatcher
from ..reminders.evaluator import ReminderService
from ..reminders.store import ReminderStore
from .signals import ReminderSignals


@dataclass
class AppState:
    # Settings object (taskbell.config.Settings or a compatible namespace in tests).
    settings: object

    store: ReminderStore
    signals: ReminderSignals
    dispatcher: NotificationDispatcher
    service: ReminderService

    auto_reminder: bool = True
