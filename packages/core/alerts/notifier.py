from __future__ import annotations

import logging
import shutil
import subprocess
import sys
from typing import Optional, Protocol

from packages.core.errors import NotificationError

log = logging.getLogger(__name__)

APP_TITLE = "Gamer Limit"


class Notifier(Protocol):
    def notify(self, title: str, body: str) -> None:
        """Deliver a message. Raises NotificationError on failure."""
        ...


class ToastNotifierWin10:
    def __init__(self) -> None:
        from win10toast import ToastNotifier

        self._toaster = ToastNotifier()

    def notify(self, title: str, body: str) -> None:
        try:
            self._toaster.show_toast(title, body, duration=6, threaded=True)
        except Exception as e:
            raise NotificationError(f"toast failed: {e}") from e


class NotifySendNotifier:
    """freedesktop notifications through the notify-send binary."""

    def __init__(self, executable: Optional[str] = None, timeout: float = 5.0) -> None:
        self._exe = executable or shutil.which("notify-send") or "notify-send"
        self._timeout = timeout

    def notify(self, title: str, body: str) -> None:
        cmd = [self._exe, "--urgency", "critical", "--app-name", APP_TITLE, title, body]
        try:
            subprocess.run(cmd, timeout=self._timeout, capture_output=True, check=True)
        except subprocess.TimeoutExpired as e:
            raise NotificationError("notify-send timed out") from e
        except (OSError, subprocess.CalledProcessError) as e:
            raise NotificationError(f"notify-send failed: {e}") from e


class LogNotifier:
    def notify(self, title: str, body: str) -> None:
        log.warning("%s: %s", title, body.replace("\n", " | "))


def make_notifier(kind: str = "auto") -> Notifier:
    if kind == "log":
        return LogNotifier()
    if kind == "toast" or (kind == "auto" and sys.platform.startswith("win")):
        try:
            return ToastNotifierWin10()
        except ImportError:
            if kind == "toast":
                raise
            log.warning("win10toast not installed, notifications go to the log")
            return LogNotifier()
    if kind == "notify-send" or shutil.which("notify-send"):
        return NotifySendNotifier()
    log.warning("No notification backend available, notifications go to the log")
    return LogNotifier()
