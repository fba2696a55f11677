# tests/conftest.py

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from pathlib import Path
from types import SimpleNamespace

import pytest

from taskbell.core.signals import ReminderSignals
from taskbell.core.state import AppState
from taskbell.notify.channels import InProcessSignalNotifier
from taskbell.notify.dispatcher import NotificationDispatcher
from taskbell.reminders.evaluator import ReminderService
from taskbell.reminders.models import Priority, Reminder, Task, TaskStatus
from taskbell.reminders.mutator import ReminderCommitter
from taskbell.reminders.store import ReminderStore

from .fakes import FakeClock, FakeSystemNotifier, RecordingNotifier

NOW = datetime(2026, 3, 14, 9, 30, tzinfo=timezone.utc)


def make_task(task_id: str = "t1", *, title: str = "Pay rent", description: str = "Before noon") -> Task:
    return Task(
        id=task_id,
        title=title,
        description=description,
        priority=Priority.HIGH,
        status=TaskStatus.PENDING,
        created_at=NOW - timedelta(days=1),
        updated_at=NOW - timedelta(days=1),
        due_at=NOW,
    )


def make_reminder(
    reminder_id: str = "r1",
    *,
    task_id: str = "t1",
    remind_at: datetime | None = None,
    is_completed: bool = False,
) -> Reminder:
    return Reminder(
        id=reminder_id,
        task_id=task_id,
        remind_at=remind_at or (NOW - timedelta(seconds=1)),
        is_completed=is_completed,
        completed_at=NOW if is_completed else None,
    )


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and bootstrap.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="taskbell-test",
        data_dir=tmp_path,
        store_path=tmp_path / "taskbell.sqlite3",
        check_interval_seconds=0.01,
        orphan_policy="skip",
        notifications_enabled=True,
        sound_enabled=False,
        blocking_alert_enabled=False,
        auto_reminder=True,
    )


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock(NOW)


@pytest.fixture()
def store(settings: SimpleNamespace) -> ReminderStore:
    return ReminderStore(settings.store_path)


@pytest.fixture()
def signals() -> ReminderSignals:
    return ReminderSignals()


@pytest.fixture()
def events() -> list[tuple[str, str, str]]:
    """Shared, ordered log of every channel call."""
    return []


@pytest.fixture()
def channels(signals: ReminderSignals, events) -> SimpleNamespace:
    return SimpleNamespace(
        tone=RecordingNotifier("audio_tone", events),
        system=FakeSystemNotifier(events=events),
        fallback=RecordingNotifier("blocking_prompt", events),
        in_process=InProcessSignalNotifier(signals),
    )


@pytest.fixture()
def dispatcher(channels: SimpleNamespace) -> NotificationDispatcher:
    return NotificationDispatcher(
        tone=channels.tone,
        system=channels.system,
        fallback=channels.fallback,
        in_process=channels.in_process,
    )


@pytest.fixture()
def shown(signals: ReminderSignals) -> list[tuple[str, str]]:
    """(task_id, reminder_id) for every show_reminder_modal emission."""
    out: list[tuple[str, str]] = []
    signals.show_reminder_modal.connect(lambda task, reminder: out.append((task.id, reminder.id)))
    return out


@pytest.fixture()
def state(settings, store, signals, dispatcher, clock) -> AppState:
    """
    AppState wired with deterministic fakes.

    NOTE: the store is a real SQLite ReminderStore because its snapshot
    semantics are part of what we want to test.
    """
    service = ReminderService(
        store,
        dispatcher,
        ReminderCommitter(store, signals, clock=clock),
        signals,
        interval_seconds=settings.check_interval_seconds,
        orphan_policy=settings.orphan_policy,
        clock=clock,
    )
    return AppState(
        settings=settings,
        store=store,
        signals=signals,
        dispatcher=dispatcher,
        service=service,
        auto_reminder=settings.auto_reminder,
    )
