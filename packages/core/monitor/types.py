from __future__ import annotations

from dataclasses import dataclass, field
from datetime import timedelta
from enum import Enum
from typing import FrozenSet, List, Literal, Optional

MonitorStatus = Literal["STOPPED", "RUNNING"]


class SignalKind(Enum):
    GRACEFUL = "graceful"
    FORCEFUL = "forceful"


@dataclass(frozen=True)
class ProcessRecord:
    """Raw row of the OS process table."""
    pid: int
    executable_path: str
    display_name: str


@dataclass(frozen=True)
class GameProcess:
    """
    One running game, collapsed over all of its PIDs.

    Equality and hashing only look at executable_path (the game key), so a set
    of GameProcess never holds two records for the same game.
    """
    executable_path: str
    process_id: int = field(compare=False)
    display_name: str = field(compare=False)
    first_seen_tick: int = field(compare=False, default=0)
    pids: FrozenSet[int] = field(compare=False, default=frozenset())

    @property
    def game_key(self) -> str:
        return self.executable_path


@dataclass
class Session:
    game_key: str
    display_name: str
    accumulated_duration: timedelta = timedelta(0)
    last_tick_seen: Optional[int] = None
    running: bool = False


@dataclass
class MonitorState:
    status: MonitorStatus = "STOPPED"
    ticks: int = 0
    running_games: List[str] = field(default_factory=list)
