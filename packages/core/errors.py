from __future__ import annotations


class GamerLimitError(Exception):
    """Base class for all errors raised by the limiter."""


class ScanError(GamerLimitError):
    """A single process could not be read. Non-fatal, the process is skipped."""

    def __init__(self, pid: int, reason: str) -> None:
        super().__init__(f"pid {pid}: {reason}")
        self.pid = pid
        self.reason = reason


class ConfigError(GamerLimitError):
    """Invalid startup configuration (budget, config file). Fatal."""


class TerminationError(GamerLimitError):
    """A termination signal was refused, or the process outlived escalation."""

    def __init__(self, pid: int, reason: str) -> None:
        super().__init__(f"pid {pid}: {reason}")
        self.pid = pid
        self.reason = reason


class NotificationError(GamerLimitError):
    """A notification could not be delivered. Logged only."""
