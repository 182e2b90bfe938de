"""
Per-game limit state machine: TRACKING -> WARNED -> TERMINATING -> TERMINATED
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import timedelta
from enum import Enum
from typing import Dict, Iterable, List, Mapping, Optional

from packages.core.alerts.messages import (
    build_failure_payload,
    build_kill_payload,
    build_relaunch_payload,
    build_warning_payload,
)
from packages.core.alerts.notifier import Notifier
from packages.core.errors import NotificationError
from packages.core.monitor.types import GameProcess, Session
from packages.shared.timefmt import format_duration
from .limits import LimitConfig
from .terminator import ProcessTerminator, TerminationOutcome

log = logging.getLogger(__name__)


class EnforcementState(Enum):
    TRACKING = "tracking"
    WARNED = "warned"
    TERMINATING = "terminating"
    TERMINATED = "terminated"


@dataclass
class GameEnforcement:
    game_key: str
    display_name: str
    state: EnforcementState = EnforcementState.TRACKING
    targets: set[int] = field(default_factory=set)  # pids still to be confirmed dead
    failure_reported: bool = False


class LimitEnforcer:
    def __init__(self, limits: LimitConfig, notifier: Notifier, terminator: ProcessTerminator) -> None:
        self._limits = limits
        self._notifier = notifier
        self._terminator = terminator
        self._games: Dict[str, GameEnforcement] = {}

    @property
    def limits(self) -> LimitConfig:
        return self._limits

    def state(self, game_key: str) -> EnforcementState:
        ge = self._games.get(game_key)
        return ge.state if ge else EnforcementState.TRACKING

    def states(self) -> Dict[str, EnforcementState]:
        return {key: ge.state for key, ge in self._games.items()}

    def evaluate(
        self, sessions: Mapping[str, Session], observed: Iterable[GameProcess]
    ) -> Dict[str, EnforcementState]:
        """Run one tick of the state machine for every known game."""
        live = {g.game_key: g for g in observed}
        for key, session in sessions.items():
            try:
                self._evaluate_game(session, live.get(key))
            except Exception:
                # one broken game must not stop enforcement of the others
                log.exception("Enforcement failed for %s", key)
        return self.states()

    def _evaluate_game(self, session: Session, game: Optional[GameProcess]) -> None:
        ge = self._games.get(session.game_key)
        if ge is None:
            ge = GameEnforcement(game_key=session.game_key, display_name=session.display_name)
            self._games[session.game_key] = ge

        if ge.state is EnforcementState.TERMINATED:
            # every exit was verified, so any pid seen now is a new process
            if game is not None:
                self._relaunched(ge, game)
            return

        if ge.state is EnforcementState.TERMINATING:
            if game is not None:
                ge.targets |= game.pids
            self._terminate_step(ge)
            return

        if game is None:
            return

        played = session.accumulated_duration
        if ge.state is EnforcementState.TRACKING and played >= self._limits.warn_at:
            ge.state = EnforcementState.WARNED
            remaining = max(self._limits.total_budget - played, timedelta(0))
            log.info("%s: warning, %s played", ge.display_name, format_duration(played))
            self._notify(build_warning_payload(ge.display_name, played, remaining))

        if ge.state is EnforcementState.WARNED and played >= self._limits.total_budget:
            ge.state = EnforcementState.TERMINATING
            ge.targets = set(game.pids)
            log.info(
                "%s: budget exhausted (%s), terminating pids %s",
                ge.display_name, format_duration(played), sorted(ge.targets),
            )
            self._notify(build_kill_payload(ge.display_name, played, self._limits.total_budget))
            self._terminate_step(ge)

    def _relaunched(self, ge: GameEnforcement, game: GameProcess) -> None:
        ge.state = EnforcementState.TERMINATING
        ge.targets = set(game.pids)
        ge.failure_reported = False
        log.warning("%s started again after termination, pids %s", ge.display_name, sorted(ge.targets))
        self._notify(build_relaunch_payload(ge.display_name, self._limits.total_budget))
        self._terminate_step(ge)

    def _terminate_step(self, ge: GameEnforcement) -> None:
        failed: List[int] = []
        for pid in sorted(ge.targets):
            outcome = self._terminator.terminate(pid)
            if outcome is TerminationOutcome.CONFIRMED:
                ge.targets.discard(pid)
            elif outcome is TerminationOutcome.FAILED:
                failed.append(pid)

        if not ge.targets:
            ge.state = EnforcementState.TERMINATED
            log.info("%s: all processes confirmed closed", ge.display_name)
            return

        if failed and not ge.failure_reported:
            ge.failure_reported = True
            log.error("%s: could not terminate pids %s", ge.display_name, failed)
            self._notify(build_failure_payload(ge.display_name, failed))

    def _notify(self, payload: dict) -> None:
        try:
            self._notifier.notify(payload["title"], payload["body"])
        except NotificationError as e:
            log.warning("Notification not delivered: %s", e)
