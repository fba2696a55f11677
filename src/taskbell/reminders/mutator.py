# src/taskbell/reminders/mutator.py

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import replace
from datetime import datetime

from ..core.ports import ReminderRepo
from ..core.signals import ReminderSignals
from .models import Reminder, utc_now

logger = logging.getLogger(__name__)


class ReminderCommitter:
    """
    Commits a fired reminder as completed.

    Dispatch happens before this commit, so a crash in between re-fires the
    reminder on the next tick; once the write lands it never fires again.
    """

    def __init__(
        self,
        store: ReminderRepo,
        signals: ReminderSignals,
        *,
        clock: Callable[[], datetime] = utc_now,
        retries: int = 1,
    ) -> None:
        self._store = store
        self._signals = signals
        self._clock = clock
        self._retries = max(0, int(retries))

    def mark_triggered(self, reminder: Reminder) -> Reminder | None:
        """
        Persist is_completed=True / completed_at=now and broadcast reminders_changed.

        Returns the committed reminder, or None if every write attempt failed
        (persistence_failed is emitted and the stored reminder stays pending).
        """
        fired = replace(reminder, is_completed=True, completed_at=self._clock())

        last_error: Exception | None = None
        for attempt in range(self._retries + 1):
            try:
                self._store.save_reminder(fired)
            except Exception as e:
                last_error = e
                logger.warning(
                    "save_reminder failed reminder=%s attempt=%d: %r", reminder.id, attempt + 1, e
                )
                continue

            logger.info("Reminder %s -> completed", reminder.id)
            self._signals.reminders_changed.emit()
            return fired

        logger.error("Reminder %s fired but could not be committed: %r", reminder.id, last_error)
        self._signals.persistence_failed.emit(reminder, last_error)
        return None
