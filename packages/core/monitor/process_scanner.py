from __future__ import annotations

import logging
from typing import Dict, List

from .classifier import GameClassifier
from .process_platform import ProcessPlatform
from .types import GameProcess, ProcessRecord

log = logging.getLogger(__name__)


class ProcessScanner:
    """Reads the process table once per scan and returns the running games."""

    def __init__(self, platform: ProcessPlatform, classifier: GameClassifier) -> None:
        self._platform = platform
        self._classifier = classifier
        self._tick = 0
        self._first_seen: Dict[str, int] = {}

    @property
    def tick(self) -> int:
        return self._tick

    def scan(self) -> set[GameProcess]:
        self._tick += 1
        found: Dict[str, List[ProcessRecord]] = {}

        for rec in self._platform.processes():
            try:
                matched = self._classifier.is_game(rec.executable_path, rec.display_name)
            except Exception:
                log.exception("Classifier failed for pid %s (%s)", rec.pid, rec.executable_path)
                continue
            if not matched:
                continue
            found.setdefault(rec.executable_path, []).append(rec)

        games: set[GameProcess] = set()
        for key, records in found.items():
            lowest = min(records, key=lambda r: r.pid)
            first = self._first_seen.setdefault(key, self._tick)
            games.add(GameProcess(
                executable_path=key,
                process_id=lowest.pid,
                display_name=lowest.display_name,
                first_seen_tick=first,
                pids=frozenset(r.pid for r in records),
            ))
        return games
