from __future__ import annotations

from datetime import timedelta
from typing import Dict, Iterable, Optional

from .types import GameProcess, Session


class SessionTracker:
    """
    Accumulates playtime per game key.

    A game adds exactly one tick_duration per tick it is observed, however many
    PIDs it has. Sessions of games that are no longer running are frozen, never
    reset, and resume if the game comes back.
    """

    def __init__(self) -> None:
        self._sessions: Dict[str, Session] = {}
        self._tick = 0

    def get(self, game_key: str) -> Optional[Session]:
        return self._sessions.get(game_key)

    def update(self, tick_duration: timedelta, observed: Iterable[GameProcess]) -> Dict[str, Session]:
        if tick_duration < timedelta(0):
            raise ValueError("tick_duration must not be negative")
        self._tick += 1

        seen: Dict[str, GameProcess] = {g.game_key: g for g in observed}
        for key, game in seen.items():
            session = self._sessions.get(key)
            if session is None:
                session = Session(game_key=key, display_name=game.display_name)
                self._sessions[key] = session
            session.accumulated_duration += tick_duration
            session.last_tick_seen = self._tick
            session.running = True

        for key, session in self._sessions.items():
            if key not in seen:
                session.running = False

        return dict(self._sessions)
