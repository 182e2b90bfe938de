from __future__ import annotations

from datetime import timedelta

import pytest

from packages.core.monitor.session_tracker import SessionTracker
from packages.core.monitor.types import GameProcess

TICK = timedelta(minutes=1)


def game(path: str, *pids: int) -> GameProcess:
    return GameProcess(executable_path=path, process_id=min(pids), display_name=path, pids=frozenset(pids))


def test_new_game_starts_at_one_tick():
    tracker = SessionTracker()
    sessions = tracker.update(TICK, {game("/g/a", 10)})
    assert sessions["/g/a"].accumulated_duration == TICK
    assert sessions["/g/a"].running is True
    assert sessions["/g/a"].last_tick_seen == 1


def test_multi_instance_counts_once_per_tick():
    tracker = SessionTracker()
    for _ in range(3):
        sessions = tracker.update(TICK, {game("/g/a", 10, 11, 12)})
    assert sessions["/g/a"].accumulated_duration == 3 * TICK


def test_absent_game_is_frozen_not_reset():
    tracker = SessionTracker()
    for _ in range(10):
        tracker.update(TICK, {game("/g/a", 10)})
    for _ in range(5):
        sessions = tracker.update(TICK, set())
    s = sessions["/g/a"]
    assert s.accumulated_duration == 10 * TICK
    assert s.running is False
    assert s.last_tick_seen == 10


def test_restarted_game_resumes_same_session():
    tracker = SessionTracker()
    tracker.update(TICK, {game("/g/a", 10)})
    tracker.update(TICK, set())
    sessions = tracker.update(TICK, {game("/g/a", 99)})
    assert sessions["/g/a"].accumulated_duration == 2 * TICK
    assert sessions["/g/a"].running is True


def test_accumulation_is_monotonic_over_random_presence():
    tracker = SessionTracker()
    pattern = [1, 1, 0, 1, 0, 0, 1, 1, 1, 0]
    previous = timedelta(0)
    for i, present in enumerate(pattern, start=1):
        observed = {game("/g/a", 10)} if present else set()
        sessions = tracker.update(TICK, observed)
        now = sessions["/g/a"].accumulated_duration if "/g/a" in sessions else timedelta(0)
        assert now >= previous
        assert now == sum(pattern[:i]) * TICK
        previous = now


def test_games_are_tracked_independently():
    tracker = SessionTracker()
    tracker.update(TICK, {game("/g/a", 1), game("/g/b", 2)})
    sessions = tracker.update(TICK, {game("/g/a", 1)})
    assert sessions["/g/a"].accumulated_duration == 2 * TICK
    assert sessions["/g/b"].accumulated_duration == TICK


def test_negative_tick_rejected():
    with pytest.raises(ValueError):
        SessionTracker().update(timedelta(seconds=-1), set())
