from __future__ import annotations

from datetime import timedelta
from typing import Dict, Iterator, List, Set, Tuple

import pytest

from packages.core.enforcement.enforcer import LimitEnforcer
from packages.core.enforcement.limits import LimitConfig
from packages.core.enforcement.terminator import ProcessTerminator
from packages.core.errors import NotificationError, TerminationError
from packages.core.monitor.classifier import AllowlistClassifier
from packages.core.monitor.process_platform import ProcessPlatform
from packages.core.monitor.process_scanner import ProcessScanner
from packages.core.monitor.session_tracker import SessionTracker
from packages.core.monitor.types import ProcessRecord, SignalKind

GAME = "/games/Doom/doom.exe"
OTHER_GAME = "/games/Quake/quake.exe"


class FakePlatform(ProcessPlatform):
    """In-memory process table. Signals take effect immediately unless told otherwise."""

    def __init__(self) -> None:
        self.procs: Dict[int, ProcessRecord] = {}
        self.signals: List[Tuple[int, SignalKind]] = []
        self.ignores_graceful: Set[int] = set()
        self.unkillable: Set[int] = set()
        self.denied: Set[int] = set()

    def start(self, pid: int, path: str = GAME, name: str = "") -> None:
        self.procs[pid] = ProcessRecord(pid=pid, executable_path=path, display_name=name or path.rsplit("/", 1)[-1])

    def exit(self, pid: int) -> None:
        self.procs.pop(pid, None)

    def processes(self) -> Iterator[ProcessRecord]:
        yield from list(self.procs.values())

    def send_signal(self, pid: int, kind: SignalKind) -> None:
        self.signals.append((pid, kind))
        if pid in self.denied:
            raise TerminationError(pid, "access denied")
        if pid in self.unkillable:
            return
        if kind is SignalKind.GRACEFUL and pid in self.ignores_graceful:
            return
        self.exit(pid)

    def pid_exists(self, pid: int) -> bool:
        return pid in self.procs


class RecordingNotifier:
    def __init__(self, fail: bool = False) -> None:
        self.messages: List[Tuple[str, str]] = []
        self.fail = fail

    def notify(self, title: str, body: str) -> None:
        self.messages.append((title, body))
        if self.fail:
            raise NotificationError("no display")

    def titles(self) -> List[str]:
        return [t for t, _ in self.messages]


class Pipeline:
    """Scanner, tracker and enforcer wired to fakes, driven one tick at a time."""

    def __init__(self, budget: timedelta, margin: timedelta, tick: timedelta, grace_ticks: int = 1,
                 max_forceful_attempts: int = 2) -> None:
        self.platform = FakePlatform()
        self.notifier = RecordingNotifier()
        self.scanner = ProcessScanner(self.platform, AllowlistClassifier(["doom.exe", "quake.exe"]))
        self.tracker = SessionTracker()
        self.terminator = ProcessTerminator(self.platform, grace_ticks, max_forceful_attempts)
        self.enforcer = LimitEnforcer(
            LimitConfig(total_budget=budget, warning_margin=margin), self.notifier, self.terminator
        )
        self.tick_duration = tick
        self.ticks = 0

    def step(self):
        self.ticks += 1
        observed = self.scanner.scan()
        sessions = self.tracker.update(self.tick_duration, observed)
        return self.enforcer.evaluate(sessions, observed)


@pytest.fixture
def platform() -> FakePlatform:
    return FakePlatform()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def pipeline() -> Pipeline:
    return Pipeline(budget=timedelta(minutes=30), margin=timedelta(minutes=5), tick=timedelta(minutes=1))
