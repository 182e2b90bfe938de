from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict

from packages.core.errors import TerminationError
from packages.core.monitor.process_platform import ProcessPlatform
from packages.core.monitor.types import SignalKind

log = logging.getLogger(__name__)


class TerminationOutcome(Enum):
    CONFIRMED = "confirmed"
    PENDING = "pending"
    FAILED = "failed"


@dataclass
class _Attempt:
    graceful_sent: bool = False
    ticks_waited: int = 0
    forceful_attempts: int = 0
    failed: bool = False


class ProcessTerminator:
    """
    Graceful-then-forceful termination, one step per call.

    Nothing here blocks: the caller invokes terminate() once per enforcement
    tick and the grace period is counted in those calls.
    """

    def __init__(self, platform: ProcessPlatform, grace_ticks: int = 2, max_forceful_attempts: int = 3) -> None:
        if grace_ticks < 0 or max_forceful_attempts < 1:
            raise ValueError("grace_ticks must be >= 0 and max_forceful_attempts >= 1")
        self._platform = platform
        self._grace_ticks = grace_ticks
        self._max_forceful = max_forceful_attempts
        self._attempts: Dict[int, _Attempt] = {}

    def pending(self) -> set[int]:
        return set(self._attempts)

    def terminate(self, pid: int) -> TerminationOutcome:
        if not self._platform.pid_exists(pid):
            if self._attempts.pop(pid, None) is not None:
                log.info("pid %s is gone", pid)
            return TerminationOutcome.CONFIRMED

        att = self._attempts.setdefault(pid, _Attempt())

        if not att.graceful_sent:
            att.graceful_sent = True
            self._signal(pid, SignalKind.GRACEFUL)
            return TerminationOutcome.PENDING

        if att.ticks_waited < self._grace_ticks:
            att.ticks_waited += 1
            return TerminationOutcome.PENDING

        if att.forceful_attempts < self._max_forceful:
            att.forceful_attempts += 1
            self._signal(pid, SignalKind.FORCEFUL)
            return TerminationOutcome.PENDING

        # Escalation exhausted. Keep trying, but the caller must surface this.
        self._signal(pid, SignalKind.FORCEFUL, quiet=att.failed)
        if not att.failed:
            att.failed = True
            log.error(
                "pid %s survived %d forceful termination attempt(s)", pid, att.forceful_attempts
            )
        return TerminationOutcome.FAILED

    def _signal(self, pid: int, kind: SignalKind, quiet: bool = False) -> None:
        log.log(logging.DEBUG if quiet else logging.INFO, "Sending %s termination signal to pid %s", kind.value, pid)
        try:
            self._platform.send_signal(pid, kind)
        except TerminationError as e:
            log.warning("Termination signal not delivered: %s", e)
