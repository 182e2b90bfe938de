from __future__ import annotations

import subprocess
import sys
from datetime import timedelta

import pytest

from packages.core.alerts import notifier as notifier_mod
from packages.core.alerts.messages import (
    build_failure_payload,
    build_kill_payload,
    build_warning_payload,
)
from packages.core.alerts.notifier import LogNotifier, NotifySendNotifier, make_notifier
from packages.core.errors import NotificationError


def test_log_notifier_logs(caplog):
    LogNotifier().notify("Title", "line one\nline two")
    assert "Title: line one | line two" in caplog.text


def test_make_notifier_log():
    assert isinstance(make_notifier("log"), LogNotifier)


def test_make_notifier_falls_back_to_log(monkeypatch):
    monkeypatch.setattr(notifier_mod.sys, "platform", "linux")
    monkeypatch.setattr(notifier_mod.shutil, "which", lambda name: None)
    assert isinstance(make_notifier("auto"), LogNotifier)


def test_notify_send_failure_raises_notification_error(monkeypatch):
    def boom(*args, **kwargs):
        raise subprocess.CalledProcessError(1, args[0])

    monkeypatch.setattr(notifier_mod.subprocess, "run", boom)
    with pytest.raises(NotificationError):
        NotifySendNotifier(executable="notify-send").notify("t", "b")


def test_notify_send_missing_binary_raises_notification_error():
    with pytest.raises(NotificationError):
        NotifySendNotifier(executable="/nonexistent/notify-send").notify("t", "b")


def test_notify_send_command_line(monkeypatch):
    calls = []
    monkeypatch.setattr(notifier_mod.subprocess, "run", lambda cmd, **kw: calls.append(cmd))
    NotifySendNotifier(executable="notify-send").notify("Title", "Body")
    assert calls[0][0] == "notify-send"
    assert calls[0][-2:] == ["Title", "Body"]


@pytest.mark.skipif(sys.platform.startswith("win"), reason="toast backend is used on Windows")
def test_toast_requested_without_win10toast_raises(monkeypatch):
    monkeypatch.setitem(sys.modules, "win10toast", None)
    with pytest.raises(ImportError):
        make_notifier("toast")


def test_failure_message_is_distinct_from_kill_message():
    kill = build_kill_payload("Doom", timedelta(minutes=30), timedelta(minutes=30))
    fail = build_failure_payload("Doom", [12, 7])
    warn = build_warning_payload("Doom", timedelta(minutes=25), timedelta(minutes=5))
    assert len({kill["title"], fail["title"], warn["title"]}) == 3
    assert "pid 7, 12" in fail["body"]
    assert "5m" in warn["body"]
