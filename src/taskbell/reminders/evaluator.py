# src/taskbell/reminders/evaluator.py

from __future__ import annotations

"""
Reminder evaluator.

A small polling loop that, every interval:
- reads fresh snapshots of reminders and tasks,
- picks reminders that are not completed and whose remind_at has passed,
- dispatches each one through the alert channels,
- commits it as completed.

The loop runs as one asyncio task; a tick runs synchronously, so external
store edits can only land between ticks.
"""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime

from ..core.ports import ReminderDispatcher, ReminderRepo
from ..core.signals import ReminderSignals
from .models import Reminder, Task, parse_instant, utc_now
from .mutator import ReminderCommitter

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL_SECONDS = 10.0


@dataclass(slots=True)
class TickReport:
    now: datetime
    checked: int = 0
    fired: list[str] = field(default_factory=list)
    orphaned: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)


class ReminderService:
    """
    Owns the single evaluation loop of the process.

    Construct once in the composition root and pass it around; start() and
    stop() are both idempotent.
    """

    def __init__(
        self,
        store: ReminderRepo,
        dispatcher: ReminderDispatcher,
        committer: ReminderCommitter,
        signals: ReminderSignals,
        *,
        interval_seconds: float = DEFAULT_INTERVAL_SECONDS,
        orphan_policy: str = "skip",
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        if orphan_policy not in ("skip", "delete"):
            raise ValueError(f"unknown orphan policy: {orphan_policy!r}")
        self._store = store
        self._dispatcher = dispatcher
        self._committer = committer
        self._signals = signals
        self._interval = float(interval_seconds)
        self._orphan_policy = orphan_policy
        self._clock = clock

        self._task: asyncio.Task[None] | None = None
        self._permission_task: asyncio.Task[object] | None = None
        self._reported_orphans: set[str] = set()

    @property
    def interval_seconds(self) -> float:
        return self._interval

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Start periodic evaluation on the running event loop (no-op if already running)."""
        if self.running:
            return

        loop = asyncio.get_running_loop()
        # Best-effort: the loop does not wait for the answer.
        self._permission_task = loop.create_task(self._dispatcher.request_permission())
        self._task = loop.create_task(self._run(), name="taskbell-reminder-evaluator")
        logger.info("Reminder service started (interval=%.1fs)", self._interval)

    def stop(self) -> None:
        """Cancel periodic evaluation (no-op if not running)."""
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        if self._permission_task is not None and not self._permission_task.done():
            self._permission_task.cancel()
        self._permission_task = None
        logger.info("Reminder service stopped")

    async def aclose(self) -> None:
        """stop() and wait until the loop task has actually finished."""
        task = self._task
        self.stop()
        if task is not None:
            await asyncio.gather(task, return_exceptions=True)

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self._interval)
            try:
                self.tick()
            except Exception:
                logger.exception("Reminder tick failed")

    def tick(self, now: datetime | None = None) -> TickReport:
        """Run one evaluation pass over fresh store snapshots."""
        now = parse_instant(now) if now is not None else self._clock()
        report = TickReport(now=now)

        try:
            reminders = self._store.get_reminders()
            tasks = self._store.get_tasks()
        except Exception:
            logger.exception("Reminder tick skipped: store read failed")
            return report

        report.checked = len(reminders)
        logger.debug("Checking reminders at %s: %d stored", now.isoformat(), len(reminders))

        tasks_by_id: dict[str, Task] = {}
        for task in tasks:
            tasks_by_id.setdefault(task.id, task)

        # Snapshot order, never re-sorted.
        for reminder in reminders:
            if not reminder.is_due(now):
                continue

            task = tasks_by_id.get(reminder.task_id)
            if task is None:
                self._handle_orphan(reminder)
                report.orphaned.append(reminder.id)
                continue

            try:
                self._dispatcher.dispatch(task, reminder)
                report.fired.append(reminder.id)
                if self._committer.mark_triggered(reminder) is None:
                    report.failed.append(reminder.id)
            except Exception:
                logger.exception("Failed to process reminder %s", reminder.id)
                report.failed.append(reminder.id)

        # Only orphans still present in this pass stay reported.
        self._reported_orphans.intersection_update(report.orphaned)

        if report.fired or report.orphaned:
            logger.info(
                "Tick done fired=%d orphaned=%d failed=%d",
                len(report.fired),
                len(report.orphaned),
                len(report.failed),
            )
        return report

    def _handle_orphan(self, reminder: Reminder) -> None:
        if self._orphan_policy == "delete":
            try:
                self._store.delete_reminders([reminder.id])
            except Exception:
                logger.exception("Failed to delete orphaned reminder %s", reminder.id)
                return
            logger.warning("Deleted reminder %s: task %s no longer exists", reminder.id, reminder.task_id)
            self._signals.reminders_changed.emit()
            return

        if reminder.id in self._reported_orphans:
            logger.debug("Task %s still missing for reminder %s", reminder.task_id, reminder.id)
            return
        self._reported_orphans.add(reminder.id)
        logger.warning("Task %s not found for reminder %s; skipping", reminder.task_id, reminder.id)
