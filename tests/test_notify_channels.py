# tests/test_notify_channels.py

from __future__ import annotations

import logging

import pytest

from taskbell.core.ports import NotificationPermission
from taskbell.notify.channels import (
    NOTIFICATION_TITLE,
    BlockingPromptNotifier,
    InProcessSignalNotifier,
    SystemNotifier,
    build_notification_command,
    notification_body,
    notification_tag,
)

from .conftest import make_reminder, make_task


def _linux_cmd(reminder_id: str) -> list[str]:
    cmd = build_notification_command(
        "linux",
        app_name="taskbell",
        title=NOTIFICATION_TITLE,
        body=notification_body(make_task()),
        tag=notification_tag(make_reminder(reminder_id)),
    )
    assert cmd is not None
    return cmd


def test_linux_command_is_persistent_and_tagged() -> None:
    cmd = _linux_cmd("r1")

    assert cmd[0] == "notify-send"
    assert "critical" in cmd
    assert "string:x-canonical-private-synchronous:r1" in cmd
    assert "string:x-dunst-stack-tag:r1" in cmd
    assert cmd[-2:] == [NOTIFICATION_TITLE, "Pay rent\nBefore noon"]


def test_same_reminder_always_gets_same_tag() -> None:
    assert _linux_cmd("r1") == _linux_cmd("r1")
    assert _linux_cmd("r1") != _linux_cmd("r2")


def test_macos_command_escapes_quotes() -> None:
    cmd = build_notification_command(
        "darwin",
        app_name="taskbell",
        title=NOTIFICATION_TITLE,
        body='Say "hi"',
        tag="r1",
    )
    assert cmd is not None
    assert cmd[:2] == ["osascript", "-e"]
    assert 'display notification "Say \\"hi\\""' in cmd[2]


def test_windows_command_sets_toast_tag_and_escapes_xml() -> None:
    cmd = build_notification_command(
        "win32",
        app_name="taskbell",
        title=NOTIFICATION_TITLE,
        body="Rent & bills\nIt's due",
        tag="r1",
    )
    assert cmd is not None
    assert cmd[0] == "powershell"
    script = cmd[-1]
    assert "$toast.Tag = 'r1'" in script
    assert "Rent &amp; bills" in script
    assert "CreateToastNotifier('taskbell')" in script


def test_unsupported_platform_has_no_command() -> None:
    assert build_notification_command("emscripten", app_name="a", title="t", body="b", tag="x") is None


@pytest.mark.asyncio
async def test_permission_granted_when_backend_exists() -> None:
    notifier = SystemNotifier(platform="linux", which=lambda name: f"/usr/bin/{name}")

    assert notifier.permission() == NotificationPermission.DEFAULT
    assert await notifier.request_permission() == NotificationPermission.GRANTED
    assert notifier.permission() == NotificationPermission.GRANTED


@pytest.mark.asyncio
async def test_permission_denied_when_user_disabled_notifications() -> None:
    notifier = SystemNotifier(platform="linux", enabled=False, which=lambda name: f"/usr/bin/{name}")

    assert await notifier.request_permission() == NotificationPermission.DENIED


@pytest.mark.asyncio
async def test_permission_denied_when_host_lacks_support() -> None:
    missing = SystemNotifier(platform="linux", which=lambda name: None)
    unknown = SystemNotifier(platform="emscripten", which=lambda name: "/bin/x")

    assert await missing.request_permission() == NotificationPermission.DENIED
    assert await unknown.request_permission() == NotificationPermission.DENIED
    assert not unknown.available()


def test_system_notifier_runs_host_command() -> None:
    calls: list[tuple[list[str], dict]] = []

    def runner(cmd, **kwargs):
        calls.append((cmd, kwargs))

    notifier = SystemNotifier(platform="linux", which=lambda name: "/usr/bin/notify-send", runner=runner)
    notifier.notify(make_task(), make_reminder("r9"))

    assert len(calls) == 1
    cmd, kwargs = calls[0]
    assert cmd[0] == "notify-send"
    assert "string:x-dunst-stack-tag:r9" in cmd
    assert kwargs["check"] is True


def test_blocking_prompt_waits_for_user_when_interactive() -> None:
    written: list[str] = []
    prompts: list[str] = []

    notifier = BlockingPromptNotifier(
        interactive=True,
        prompt=lambda text: prompts.append(text) or "",
        write=written.append,
    )
    notifier.notify(make_task(title="Water plants"), make_reminder())

    assert written == ["⏰ REMINDER: Water plants\nTime is up!"]
    assert len(prompts) == 1


def test_blocking_prompt_logs_when_not_interactive(caplog) -> None:
    def never(_text: str) -> str:
        raise AssertionError("must not block without a terminal")

    notifier = BlockingPromptNotifier(interactive=False, prompt=never)

    with caplog.at_level(logging.WARNING, logger="taskbell.notify.channels"):
        notifier.notify(make_task(title="Water plants"), make_reminder())

    assert "REMINDER: Water plants" in caplog.text


def test_in_process_notifier_emits_modal_signal(signals) -> None:
    got: list[tuple[str, str]] = []
    signals.show_reminder_modal.connect(lambda task, reminder: got.append((task.title, reminder.id)))

    InProcessSignalNotifier(signals).notify(make_task(title="Stretch"), make_reminder("r5"))

    assert got == [("Stretch", "r5")]
