from __future__ import annotations

import os
import sys
from pathlib import Path

APP_NAME = "GamerLimit"


def app_data_dir() -> Path:
    """%APPDATA% when set, else the platform's per-user config location."""
    base = os.environ.get("APPDATA")
    if base:
        return Path(base) / APP_NAME
    home = Path.home()
    if sys.platform == "darwin":
        return home / "Library" / "Application Support" / APP_NAME
    xdg = os.environ.get("XDG_CONFIG_HOME")
    return (Path(xdg) if xdg else home / ".config") / APP_NAME


def config_path() -> Path:
    return app_data_dir() / "config.json"


def logs_dir() -> Path:
    return app_data_dir() / "logs"


def log_path() -> Path:
    return logs_dir() / "app.log"


def ensure_app_dirs() -> None:
    app_data_dir().mkdir(parents=True, exist_ok=True)
    logs_dir().mkdir(parents=True, exist_ok=True)
