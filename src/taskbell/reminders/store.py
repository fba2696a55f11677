# src/taskbell/reminders/store.py

from __future__ import annotations

import contextlib
import json
import logging
import sqlite3
import time
from collections.abc import Callable, Iterable
from pathlib import Path
from typing import Any, TypeVar

from .models import Reminder, Task

logger = logging.getLogger(__name__)

TASKS_KEY = "tasks"
REMINDERS_KEY = "reminders"

T = TypeVar("T")


class StoreError(RuntimeError):
    """Raised when a collection cannot be read or written."""


class ReminderStore:
    """
    SQLite-backed key/value store holding two collections (tasks, reminders).

    Each collection is a single JSON array under a stable key and is always
    read and written wholesale. Reads return fresh, independent snapshots:
    mutating the returned objects never touches stored state until an explicit save.

    Thread-safety:
    - each method opens its own SQLite connection
    """

    def __init__(self, db_path: str | Path = "taskbell.sqlite3") -> None:
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_schema()
        try:
            tasks, reminders = self.count_tasks(), self.count_reminders()
        except Exception:
            tasks, reminders = -1, -1
        logger.info("ReminderStore ready db=%s tasks=%s reminders=%s", self._db_path, tasks, reminders)

    @property
    def db_path(self) -> Path:
        return self._db_path

    def close(self) -> None:
        """Compatibility hook for shutdown (no persistent connections to close)."""
        return

    # ---- low-level helpers ----

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path), timeout=30.0)
        conn.row_factory = sqlite3.Row
        self._configure_conn(conn)
        return conn

    @staticmethod
    def _configure_conn(conn: sqlite3.Connection) -> None:
        with contextlib.suppress(Exception):
            conn.execute("PRAGMA journal_mode=WAL")

    def _ensure_schema(self) -> None:
        conn = self._get_conn()
        try:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS collections (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL DEFAULT '[]',
                    updated_at REAL NOT NULL DEFAULT 0
                )
                """
            )
            conn.commit()
        finally:
            conn.close()

    def _read_raw(self, key: str) -> list[dict[str, Any]]:
        try:
            conn = self._get_conn()
            try:
                row = conn.execute("SELECT value FROM collections WHERE key = ?", (key,)).fetchone()
            finally:
                conn.close()
        except sqlite3.Error as e:
            raise StoreError(f"failed to read {key}: {e}") from e

        if row is None or not row["value"]:
            return []
        try:
            data = json.loads(row["value"])
        except ValueError as e:
            raise StoreError(f"collection {key} is not valid JSON") from e
        if not isinstance(data, list):
            logger.warning("Collection %s is not a JSON array; treating as empty.", key)
            return []
        return [item for item in data if isinstance(item, dict)]

    def _write_raw(self, key: str, items: list[dict[str, Any]]) -> None:
        payload = json.dumps(items, ensure_ascii=False)
        try:
            conn = self._get_conn()
            try:
                conn.execute(
                    """
                    INSERT INTO collections(key, value, updated_at)
                    VALUES (?, ?, ?)
                    ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = excluded.updated_at
                    """,
                    (key, payload, time.time()),
                )
                conn.commit()
            finally:
                conn.close()
        except sqlite3.Error as e:
            raise StoreError(f"failed to write {key}: {e}") from e

    @staticmethod
    def _decode(
        key: str, items: list[dict[str, Any]], factory: Callable[[dict[str, Any]], T]
    ) -> list[T]:
        out: list[T] = []
        for item in items:
            try:
                out.append(factory(item))
            except (KeyError, TypeError, ValueError):
                logger.warning("Skipping malformed %s record id=%s", key, item.get("id"))
        return out

    # ---- tasks ----

    def get_tasks(self) -> list[Task]:
        return self._decode(TASKS_KEY, self._read_raw(TASKS_KEY), Task.from_dict)

    def count_tasks(self) -> int:
        return len(self._read_raw(TASKS_KEY))

    def save_task(self, task: Task) -> None:
        """Upsert by id; a new task is appended at the end of the collection."""
        items = self._read_raw(TASKS_KEY)
        data = task.to_dict()
        for i, item in enumerate(items):
            if item.get("id") == task.id:
                items[i] = data
                break
        else:
            items.append(data)
        self._write_raw(TASKS_KEY, items)
        logger.debug("Task saved id=%s status=%s", task.id, task.status.value)

    def save_all_tasks(self, tasks: Iterable[Task]) -> None:
        """Full replace (used for reordering)."""
        items = [t.to_dict() for t in tasks]
        self._write_raw(TASKS_KEY, items)
        logger.debug("All tasks saved count=%d", len(items))

    def delete_task(self, task_id: str) -> None:
        """Delete a task and every reminder that references it."""
        self.delete_tasks([task_id])

    def delete_tasks(self, task_ids: Iterable[str]) -> None:
        ids = set(task_ids)
        if not ids:
            return
        items = [item for item in self._read_raw(TASKS_KEY) if item.get("id") not in ids]
        self._write_raw(TASKS_KEY, items)
        removed = self._delete_reminders_where(lambda item: item.get("taskId") in ids)
        logger.info("Deleted tasks=%s cascade_reminders=%d", sorted(ids), removed)

    # ---- reminders ----

    def get_reminders(self) -> list[Reminder]:
        return self._decode(REMINDERS_KEY, self._read_raw(REMINDERS_KEY), Reminder.from_dict)

    def count_reminders(self) -> int:
        return len(self._read_raw(REMINDERS_KEY))

    def save_reminder(self, reminder: Reminder) -> None:
        """Upsert by id; a new reminder is appended at the end of the collection."""
        items = self._read_raw(REMINDERS_KEY)
        data = reminder.to_dict()
        for i, item in enumerate(items):
            if item.get("id") == reminder.id:
                items[i] = data
                break
        else:
            items.append(data)
        self._write_raw(REMINDERS_KEY, items)
        logger.debug(
            "Reminder saved id=%s task_id=%s completed=%s",
            reminder.id,
            reminder.task_id,
            reminder.is_completed,
        )

    def save_all_reminders(self, reminders: Iterable[Reminder]) -> None:
        """Full replace (used for reordering)."""
        items = [r.to_dict() for r in reminders]
        self._write_raw(REMINDERS_KEY, items)
        logger.debug("All reminders saved count=%d", len(items))

    def delete_reminder(self, reminder_id: str) -> None:
        self.delete_reminders([reminder_id])

    def delete_reminders(self, reminder_ids: Iterable[str]) -> None:
        ids = set(reminder_ids)
        if ids:
            self._delete_reminders_where(lambda item: item.get("id") in ids)

    def delete_reminders_for_task(self, task_id: str) -> None:
        self._delete_reminders_where(lambda item: item.get("taskId") == task_id)

    def _delete_reminders_where(self, predicate: Callable[[dict[str, Any]], bool]) -> int:
        items = self._read_raw(REMINDERS_KEY)
        kept = [item for item in items if not predicate(item)]
        removed = len(items) - len(kept)
        if removed:
            self._write_raw(REMINDERS_KEY, kept)
        return removed
