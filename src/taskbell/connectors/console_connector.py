# src/taskbell/connectors/console_connector.py

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime

from ..core.state import AppState
from ..reminders.models import Reminder, Task

logger = logging.getLogger(__name__)


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _fmt_local(dt: datetime | None) -> str:
    if dt is None:
        return "-"
    return dt.astimezone().strftime("%Y-%m-%d %H:%M")


def format_reminder_modal(task: Task, reminder: Reminder) -> str:
    lines = [
        f"[{_ts_local()}] ⏰ Reminder: {task.title}",
        f"    priority: {task.priority.value}   due: {_fmt_local(task.due_at)}",
        f"    reminder set for: {_fmt_local(reminder.remind_at)}",
    ]
    if task.description:
        lines.insert(1, f"    {task.description}")
    return "\n".join(lines)


def attach_console(state: AppState, *, write: Callable[[str], None] = print) -> Callable[[], None]:
    """
    Render engine signals on the terminal.

    Returns a callable that detaches every subscription made here.
    """

    def on_show(task: Task, reminder: Reminder) -> None:
        write(format_reminder_modal(task, reminder))

    def on_changed() -> None:
        try:
            pending = sum(1 for r in state.store.get_reminders() if not r.is_completed)
        except Exception:
            logger.debug("Could not count pending reminders.", exc_info=True)
            return
        logger.debug("Reminders changed; pending=%d", pending)

    def on_persistence_failed(reminder: Reminder, error: Exception | None) -> None:
        write(
            f"[{_ts_local()}] [WARN] Reminder {reminder.id} was shown but could not be saved; "
            "it may appear again."
        )

    detachers = [
        state.signals.show_reminder_modal.connect(on_show),
        state.signals.reminders_changed.connect(on_changed),
        state.signals.persistence_failed.connect(on_persistence_failed),
    ]
    logger.info("Console connector attached.")

    def detach() -> None:
        for d in detachers:
            d()
        logger.info("Console connector detached.")

    return detach
