# src/taskbell/core/signals.py

"""
In-process signals the reminder engine exposes to presentation layers.

Fire-and-observe: there is no queueing, so a receiver connected after an
emission never sees it. A receiver that raises is logged and skipped.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

logger = logging.getLogger(__name__)

Receiver = Callable[..., Any]


class Signal:
    def __init__(self, name: str) -> None:
        self.name = name
        self._receivers: list[Receiver] = []

    def connect(self, receiver: Receiver) -> Callable[[], None]:
        """Subscribe; returns a callable that undoes the subscription."""
        self._receivers.append(receiver)

        def _disconnect() -> None:
            self.disconnect(receiver)

        return _disconnect

    def disconnect(self, receiver: Receiver) -> None:
        try:
            self._receivers.remove(receiver)
        except ValueError:
            pass

    @property
    def receivers(self) -> int:
        return len(self._receivers)

    def emit(self, *args: Any) -> None:
        # Copy: receivers may disconnect themselves while handling.
        for receiver in list(self._receivers):
            try:
                receiver(*args)
            except Exception:
                logger.exception("Signal receiver failed signal=%s receiver=%r", self.name, receiver)


@dataclass(slots=True)
class ReminderSignals:
    # reminders_changed(): stored reminders changed, views should re-read.
    reminders_changed: Signal = field(default_factory=lambda: Signal("reminders_changed"))
    # show_reminder_modal(task, reminder): a reminder just fired.
    show_reminder_modal: Signal = field(default_factory=lambda: Signal("show_reminder_modal"))
    # persistence_failed(reminder, error): a fired reminder could not be committed.
    persistence_failed: Signal = field(default_factory=lambda: Signal("persistence_failed"))
