# src/taskbell/notify/channels.py

"""
Alert channels besides the tone.

- SystemNotifier: desktop notification through the host tool
  (notify-send / osascript / PowerShell toast), gated by a permission tri-state.
- BlockingPromptNotifier: synchronous terminal alert, the fallback when system
  notifications are not granted.
- InProcessSignalNotifier: emits show_reminder_modal for the presentation layer.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
import sys
from collections.abc import Callable
from typing import Any
from xml.sax.saxutils import escape as xml_escape

from ..core.ports import NotificationPermission
from ..core.signals import ReminderSignals
from ..reminders.models import Reminder, Task

logger = logging.getLogger(__name__)

NOTIFICATION_TITLE = "⏰ Time to do task!"

# Windows toast tags are limited to 64 characters.
_TOAST_TAG_MAX = 64


def notification_tag(reminder: Reminder) -> str:
    """Identifying tag: the same reminder always maps to the same tag, so the host can dedupe."""
    return reminder.id


def notification_body(task: Task) -> str:
    return f"{task.title}\n{task.description or ''}"


def backend_for_platform(platform: str) -> str | None:
    if platform.startswith("linux") or platform.startswith("freebsd"):
        return "notify-send"
    if platform == "darwin":
        return "osascript"
    if platform in ("win32", "cygwin"):
        return "powershell"
    return None


def _applescript_quote(text: str) -> str:
    return '"' + text.replace("\\", "\\\\").replace('"', '\\"') + '"'


def _ps_single_quote(text: str) -> str:
    return "'" + text.replace("'", "''") + "'"


def build_notification_command(
    platform: str,
    *,
    app_name: str,
    title: str,
    body: str,
    tag: str,
) -> list[str] | None:
    """Command line that shows one persistent notification on the given platform (None if unsupported)."""
    backend = backend_for_platform(platform)

    if backend == "notify-send":
        return [
            "notify-send",
            "--app-name",
            app_name,
            "--urgency",
            "critical",
            "--hint",
            f"string:x-canonical-private-synchronous:{tag}",
            "--hint",
            f"string:x-dunst-stack-tag:{tag}",
            title,
            body,
        ]

    if backend == "osascript":
        # Notification Center has no replace-by-tag; the tag is kept in the subtitle for traceability.
        script = (
            f"display notification {_applescript_quote(body)} "
            f"with title {_applescript_quote(title)} "
            f"subtitle {_applescript_quote(app_name)}"
        )
        return ["osascript", "-e", script]

    if backend == "powershell":
        lines = [xml_escape(part) for part in body.split("\n", 1)]
        second = lines[1] if len(lines) > 1 else ""
        ps_script = f"""
[Windows.UI.Notifications.ToastNotificationManager, Windows.UI.Notifications, ContentType = WindowsRuntime] | Out-Null
[Windows.Data.Xml.Dom.XmlDocument, Windows.Data.Xml.Dom.XmlDocument, ContentType = WindowsRuntime] | Out-Null
$template = @'
<toast scenario="reminder">
    <visual>
        <binding template="ToastGeneric">
            <text>{xml_escape(title)}</text>
            <text>{lines[0]}</text>
            <text>{second}</text>
        </binding>
    </visual>
</toast>
'@
$xml = New-Object Windows.Data.Xml.Dom.XmlDocument
$xml.LoadXml($template)
$toast = New-Object Windows.UI.Notifications.ToastNotification $xml
$toast.Tag = {_ps_single_quote(tag[:_TOAST_TAG_MAX])}
[Windows.UI.Notifications.ToastNotificationManager]::CreateToastNotifier({_ps_single_quote(app_name)}).Show($toast)
"""
        return ["powershell", "-NoProfile", "-Command", ps_script]

    return None


class SystemNotifier:
    """
    Desktop notifications via the host notification tool.

    Permission is a tri-state. It starts as DEFAULT and becomes GRANTED only when
    the user allows notifications (settings) and the host tool exists; otherwise DENIED.
    """

    name = "system_notification"

    def __init__(
        self,
        *,
        app_name: str = "taskbell",
        enabled: bool = True,
        platform: str | None = None,
        which: Callable[[str], str | None] = shutil.which,
        runner: Callable[..., Any] = subprocess.run,
        timeout_seconds: float = 10.0,
    ) -> None:
        self.app_name = app_name
        self.enabled = bool(enabled)
        self.platform = platform or sys.platform
        self._which = which
        self._runner = runner
        self._timeout = float(timeout_seconds)
        self._permission = NotificationPermission.DEFAULT

    def available(self) -> bool:
        backend = backend_for_platform(self.platform)
        if backend is None:
            return False
        try:
            return self._which(backend) is not None
        except Exception:
            logger.debug("Notification backend lookup failed.", exc_info=True)
            return False

    def permission(self) -> NotificationPermission:
        return self._permission

    async def request_permission(self) -> NotificationPermission:
        if not self.enabled:
            self._permission = NotificationPermission.DENIED
        elif not self.available():
            logger.info(
                "System notifications unavailable on %s; falling back to blocking alerts.",
                self.platform,
            )
            self._permission = NotificationPermission.DENIED
        else:
            self._permission = NotificationPermission.GRANTED
        logger.info("Notification permission: %s", self._permission.value)
        return self._permission

    def notify(self, task: Task, reminder: Reminder) -> None:
        cmd = build_notification_command(
            self.platform,
            app_name=self.app_name,
            title=NOTIFICATION_TITLE,
            body=notification_body(task),
            tag=notification_tag(reminder),
        )
        if cmd is None:
            raise RuntimeError(f"no notification backend for platform {self.platform!r}")
        self._runner(cmd, capture_output=True, timeout=self._timeout, check=True)
        logger.info("System notification sent reminder=%s", reminder.id)


class BlockingPromptNotifier:
    """
    Fallback alert that holds the caller until the user dismisses it.

    Without an interactive terminal there is nobody to dismiss it, so the alert
    is written to the log instead of blocking.
    """

    name = "blocking_prompt"

    def __init__(
        self,
        *,
        interactive: bool,
        prompt: Callable[[str], str] = input,
        write: Callable[[str], None] = print,
    ) -> None:
        self.interactive = bool(interactive)
        self._prompt = prompt
        self._write = write

    def available(self) -> bool:
        return True

    def notify(self, task: Task, reminder: Reminder) -> None:
        message = f"⏰ REMINDER: {task.title}\nTime is up!"
        if not self.interactive:
            logger.warning("%s (reminder=%s)", message, reminder.id)
            return
        self._write(message)
        self._prompt("Press Enter to dismiss... ")


class InProcessSignalNotifier:
    name = "in_process_signal"

    def __init__(self, signals: ReminderSignals) -> None:
        self._signals = signals

    def available(self) -> bool:
        return True

    def notify(self, task: Task, reminder: Reminder) -> None:
        self._signals.show_reminder_modal.emit(task, reminder)
