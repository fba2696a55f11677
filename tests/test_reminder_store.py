# tests/test_reminder_store.py

from __future__ import annotations

import json
import sqlite3
from datetime import timezone
from pathlib import Path

from taskbell.reminders.models import Priority, RecurrenceType, TaskStatus
from taskbell.reminders.store import REMINDERS_KEY, TASKS_KEY, ReminderStore

from .conftest import NOW, make_reminder, make_task


def _raw(db: Path, key: str):
    conn = sqlite3.connect(str(db))
    try:
        row = conn.execute("SELECT value FROM collections WHERE key = ?", (key,)).fetchone()
    finally:
        conn.close()
    return json.loads(row[0]) if row else None


def test_empty_store_returns_empty_collections(tmp_path: Path) -> None:
    store = ReminderStore(tmp_path / "s.sqlite3")
    assert store.get_tasks() == []
    assert store.get_reminders() == []
    assert store.count_tasks() == 0


def test_save_and_read_back_keep_fields_and_order(tmp_path: Path) -> None:
    db = tmp_path / "s.sqlite3"
    store = ReminderStore(db)

    store.save_task(make_task("t1"))
    store.save_task(make_task("t2", title="Call mom", description=""))
    store.save_reminder(make_reminder("r2", task_id="t2"))
    store.save_reminder(make_reminder("r1", task_id="t1", is_completed=True))

    # A second instance over the same file sees the same data.
    again = ReminderStore(db)
    tasks = again.get_tasks()
    reminders = again.get_reminders()

    assert [t.id for t in tasks] == ["t1", "t2"]
    assert tasks[0].title == "Pay rent"
    assert tasks[0].priority == Priority.HIGH
    assert tasks[0].due_at == NOW
    assert [r.id for r in reminders] == ["r2", "r1"]
    assert reminders[1].is_completed is True
    assert reminders[1].completed_at == NOW
    assert reminders[0].remind_at.tzinfo is not None


def test_persisted_layout_is_two_camelcase_json_arrays(tmp_path: Path) -> None:
    db = tmp_path / "s.sqlite3"
    store = ReminderStore(db)
    store.save_task(make_task("t1"))
    store.save_reminder(make_reminder("r1", task_id="t1"))

    tasks = _raw(db, TASKS_KEY)
    reminders = _raw(db, REMINDERS_KEY)

    assert isinstance(tasks, list) and isinstance(reminders, list)
    assert set(tasks[0]) == {
        "id", "title", "description", "priority", "status",
        "createdAt", "updatedAt", "dueDate", "completedAt",
    }
    assert reminders[0]["taskId"] == "t1"
    assert reminders[0]["isCompleted"] is False
    assert reminders[0]["completedAt"] is None
    assert reminders[0]["recurrenceType"] is None


def test_snapshots_are_independent_of_stored_state(store: ReminderStore) -> None:
    store.save_reminder(make_reminder("r1"))

    snapshot = store.get_reminders()
    snapshot[0].is_completed = True
    snapshot.clear()

    stored = store.get_reminders()
    assert len(stored) == 1
    assert stored[0].is_completed is False


def test_save_reminder_upserts_in_place(store: ReminderStore) -> None:
    store.save_reminder(make_reminder("r1"))
    store.save_reminder(make_reminder("r2"))

    updated = make_reminder("r1", is_completed=True)
    store.save_reminder(updated)

    reminders = store.get_reminders()
    assert [r.id for r in reminders] == ["r1", "r2"]
    assert reminders[0].is_completed is True


def test_save_all_reminders_replaces_collection(store: ReminderStore) -> None:
    store.save_reminder(make_reminder("r1"))
    store.save_reminder(make_reminder("r2"))

    store.save_all_reminders([make_reminder("r2"), make_reminder("r3")])

    assert [r.id for r in store.get_reminders()] == ["r2", "r3"]


def test_delete_task_cascades_to_its_reminders(store: ReminderStore) -> None:
    store.save_task(make_task("t1"))
    store.save_task(make_task("t2"))
    store.save_reminder(make_reminder("r1", task_id="t1"))
    store.save_reminder(make_reminder("r2", task_id="t2"))
    store.save_reminder(make_reminder("r3", task_id="t1"))

    store.delete_task("t1")

    assert [t.id for t in store.get_tasks()] == ["t2"]
    assert [r.id for r in store.get_reminders()] == ["r2"]


def test_delete_reminders_by_id_and_by_task(store: ReminderStore) -> None:
    for rid, tid in (("r1", "t1"), ("r2", "t1"), ("r3", "t2"), ("r4", "t3")):
        store.save_reminder(make_reminder(rid, task_id=tid))

    store.delete_reminder("r3")
    store.delete_reminders_for_task("t1")

    assert [r.id for r in store.get_reminders()] == ["r4"]


def test_malformed_records_are_skipped(tmp_path: Path) -> None:
    db = tmp_path / "s.sqlite3"
    store = ReminderStore(db)
    store.save_reminder(make_reminder("good"))

    raw = _raw(db, REMINDERS_KEY)
    raw.append({"id": "no-time", "taskId": "t1"})
    raw.append("not an object")
    raw.append({"id": "weird-enum", "taskId": "t1", "remindAt": "2026-03-14T09:00:00", "recurrenceType": "hourly"})
    conn = sqlite3.connect(str(db))
    conn.execute("UPDATE collections SET value = ? WHERE key = ?", (json.dumps(raw), REMINDERS_KEY))
    conn.commit()
    conn.close()

    reminders = store.get_reminders()

    assert [r.id for r in reminders] == ["good", "weird-enum"]
    weird = reminders[1]
    assert weird.recurrence_type == RecurrenceType.NONE
    # Naive instants are read as UTC.
    assert weird.remind_at.tzinfo == timezone.utc


def test_unknown_task_enums_degrade_to_defaults(tmp_path: Path) -> None:
    db = tmp_path / "s.sqlite3"
    store = ReminderStore(db)
    conn = sqlite3.connect(str(db))
    conn.execute(
        "INSERT INTO collections(key, value, updated_at) VALUES (?, ?, 0)",
        (TASKS_KEY, json.dumps([{"id": "t1", "title": "Old", "priority": "urgent", "status": "done"}])),
    )
    conn.commit()
    conn.close()

    (task,) = store.get_tasks()
    assert task.priority == Priority.MEDIUM
    assert task.status == TaskStatus.PENDING
    assert task.due_at is None
