from __future__ import annotations

from datetime import timedelta

from packages.shared.timefmt import format_duration
from .notifier import APP_TITLE


def build_warning_payload(display_name: str, played: timedelta, remaining: timedelta) -> dict:
    body_lines = [
        f"{display_name} will be closed in {format_duration(remaining)}.",
        f"Played so far: {format_duration(played)}",
        "",
        "Save your game now.",
    ]
    return {"title": f"{APP_TITLE}: almost out of time", "body": "\n".join(body_lines)}


def build_kill_payload(display_name: str, played: timedelta, budget: timedelta) -> dict:
    body_lines = [
        f"Time's up for {display_name}: {format_duration(played)} of {format_duration(budget)} played.",
        "The game is being closed.",
    ]
    return {"title": f"{APP_TITLE}: time's up", "body": "\n".join(body_lines)}


def build_relaunch_payload(display_name: str, budget: timedelta) -> dict:
    body_lines = [
        f"{display_name} was started again, but its {format_duration(budget)} budget is used up.",
        "The game is being closed.",
    ]
    return {"title": f"{APP_TITLE}: time's up", "body": "\n".join(body_lines)}


def build_failure_payload(display_name: str, pids: list[int]) -> dict:
    pid_text = ", ".join(str(p) for p in sorted(pids))
    body_lines = [
        f"Could not close {display_name} (pid {pid_text}).",
        "The time limit is NOT being enforced for this game.",
    ]
    return {"title": f"{APP_TITLE}: could not close game", "body": "\n".join(body_lines)}
