# src/taskbell/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires the store, alert channels, dispatcher and evaluator into AppState.
"""

from __future__ import annotations

import logging
import sys

from ..config import get_settings
from ..core.signals import ReminderSignals
from ..core.state import AppState
from ..notify.channels import BlockingPromptNotifier, InProcessSignalNotifier, SystemNotifier
from ..notify.dispatcher import NotificationDispatcher
from ..notify.tone import AudioToneNotifier
from ..reminders.evaluator import ReminderService
from ..reminders.mutator import ReminderCommitter
from ..reminders.store import ReminderStore

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.store_path.parent.mkdir(parents=True, exist_ok=True)


def _stdin_is_interactive() -> bool:
    try:
        return sys.stdin is not None and sys.stdin.isatty()
    except Exception:
        return False


def build_dispatcher(settings, signals: ReminderSignals) -> NotificationDispatcher:
    app_name = str(getattr(settings, "app_name", "taskbell"))
    interactive = bool(getattr(settings, "blocking_alert_enabled", True)) and _stdin_is_interactive()

    return NotificationDispatcher(
        tone=AudioToneNotifier(enabled=bool(getattr(settings, "sound_enabled", True))),
        system=SystemNotifier(
            app_name=app_name,
            enabled=bool(getattr(settings, "notifications_enabled", True)),
        ),
        fallback=BlockingPromptNotifier(interactive=interactive),
        in_process=InProcessSignalNotifier(signals),
    )


def create_initial_state(*, settings=None, dispatcher: NotificationDispatcher | None = None) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings (and the dispatcher) injectable makes the app easier to test
    and avoids hidden global config reads. If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    store = ReminderStore(settings.store_path)
    signals = ReminderSignals()
    if dispatcher is None:
        dispatcher = build_dispatcher(settings, signals)

    service = ReminderService(
        store,
        dispatcher,
        ReminderCommitter(store, signals),
        signals,
        interval_seconds=float(getattr(settings, "check_interval_seconds", 10.0)),
        orphan_policy=str(getattr(settings, "orphan_policy", "skip")),
    )

    return AppState(
        settings=settings,
        store=store,
        signals=signals,
        dispatcher=dispatcher,
        service=service,
        auto_reminder=bool(getattr(settings, "auto_reminder", True)),
    )
