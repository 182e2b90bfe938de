from __future__ import annotations

import logging
import threading
import time
from datetime import timedelta
from typing import TYPE_CHECKING, Callable, Dict, Optional

from packages.shared.timefmt import format_duration
from .process_scanner import ProcessScanner
from .session_tracker import SessionTracker
from .types import GameProcess, MonitorState

if TYPE_CHECKING:
    from packages.core.enforcement.enforcer import EnforcementState, LimitEnforcer

log = logging.getLogger(__name__)


def _now_iso() -> str:
    return time.strftime("%Y-%m-%dT%H:%M:%S", time.localtime())


class SessionMonitor:
    """
    Fixed-interval loop: scan every game, then track every game, then enforce.

    Runs in the calling thread. stop() may be called from a signal handler, also
    before run() starts; it interrupts the inter-tick wait and no further tick runs.
    """

    def __init__(
        self,
        scanner: ProcessScanner,
        tracker: SessionTracker,
        enforcer: Optional[LimitEnforcer] = None,
        interval_seconds: float = 15.0,
    ) -> None:
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self._scanner = scanner
        self._tracker = tracker
        self._enforcer = enforcer
        self._interval = interval_seconds
        self._tick_duration = timedelta(seconds=interval_seconds)
        self._state = MonitorState()

        self._event_cb: Optional[Callable[[dict], None]] = None
        self._stop_evt = threading.Event()
        self._running: set[str] = set()
        self._last_states: Dict[str, EnforcementState] = {}

    def on_event(self, cb: Callable[[dict], None]) -> None:
        self._event_cb = cb

    def get_state(self) -> MonitorState:
        return MonitorState(
            status=self._state.status,
            ticks=self._state.ticks,
            running_games=list(self._state.running_games),
        )

    def stop(self) -> None:
        self._stop_evt.set()

    def _emit(self, evt: dict) -> None:
        if self._event_cb:
            self._event_cb(evt)

    def tick(self) -> None:
        """One Scan -> Track -> Enforce pass."""
        observed = self._scanner.scan()
        sessions = self._tracker.update(self._tick_duration, observed)
        self._report_presence(observed)

        if self._enforcer is not None:
            states = self._enforcer.evaluate(sessions, observed)
            for key, st in states.items():
                if self._last_states.get(key) is not st:
                    self._emit({"type": "STATE_CHANGED", "game": key, "state": st.value, "at": _now_iso()})
            self._last_states = dict(states)

        for game in sorted(observed, key=lambda g: g.game_key):
            session = sessions[game.game_key]
            log.debug(
                "%s (pid %s) played %s",
                game.display_name, game.process_id, format_duration(session.accumulated_duration),
            )

        self._state.ticks += 1
        self._state.running_games = sorted(g.game_key for g in observed)

    def _report_presence(self, observed: set[GameProcess]) -> None:
        now_running = {g.game_key for g in observed}
        for game in sorted(observed, key=lambda g: g.game_key):
            if game.game_key not in self._running:
                log.info("Game started: %s (pid %s)", game.display_name, game.process_id)
                self._emit({"type": "GAME_STARTED", "game": game.game_key, "at": _now_iso()})
        for key in sorted(self._running - now_running):
            log.info("Game stopped: %s", key)
            self._emit({"type": "GAME_ENDED", "game": key, "at": _now_iso()})
        self._running = now_running

    def run(self, max_ticks: Optional[int] = None) -> None:
        self._state.status = "RUNNING"
        ticks = 0
        try:
            while not self._stop_evt.is_set():
                started = time.monotonic()
                try:
                    self.tick()
                except Exception:
                    log.exception("Monitor loop error")

                ticks += 1
                if max_ticks is not None and ticks >= max_ticks:
                    break

                remainder = self._interval - (time.monotonic() - started)
                if remainder > 0:
                    self._stop_evt.wait(remainder)
        finally:
            self._state.status = "STOPPED"
            log.info("Monitor stopped after %d tick(s)", ticks)
