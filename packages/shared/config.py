from __future__ import annotations

from typing import Dict, List, Literal
from pydantic import BaseModel, Field

EntityType = Literal["executable", "directory", "both"]
NotifierKind = Literal["auto", "toast", "notify-send", "log"]


class GameLibrary(BaseModel):
    """A launcher's install location, e.g. Steam's steamapps/common."""
    home_paths: List[str] = Field(default_factory=list)
    absolute_paths: List[str] = Field(default_factory=list)
    search_entity_type: EntityType = "both"
    ignore: List[str] = Field(default_factory=list)


class AppConfig(BaseModel):
    games: List[str] = Field(default_factory=lambda: ["eldenring.exe"])
    libraries: Dict[str, GameLibrary] = Field(default_factory=lambda: {
        "steam": GameLibrary(
            home_paths=[".local/share/Steam/steamapps/common"],
            absolute_paths=["C:/Program Files (x86)/Steam/steamapps/common"],
            search_entity_type="directory",
            ignore=["Steamworks", "Proton", "SteamLinuxRuntime"],
        ),
    })
    scan_interval_seconds: float = Field(default=15.0, gt=0)
    warning_margin_minutes: int = Field(default=5, ge=0)
    grace_ticks: int = Field(default=2, ge=0)
    max_forceful_attempts: int = Field(default=3, ge=1)
    notifier: NotifierKind = "auto"

    def to_terminator_config(self) -> dict:
        return {
            "grace_ticks": self.grace_ticks,
            "max_forceful_attempts": self.max_forceful_attempts,
        }
