"""
OS process table access and signal delivery.

Core logic only talks to ProcessPlatform. PsutilPlatform is the concrete
variant; psutil maps terminate()/kill() to SIGTERM/SIGKILL on POSIX and to
TerminateProcess on Windows, so no caller has to branch on the OS.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Dict, Iterator

import psutil

from packages.core.errors import ScanError, TerminationError
from .types import ProcessRecord, SignalKind

log = logging.getLogger(__name__)


class ProcessPlatform(ABC):
    """Capability boundary for process enumeration and signalling."""

    @abstractmethod
    def processes(self) -> Iterator[ProcessRecord]:
        """Yield every readable process. Unreadable ones are skipped."""
        ...

    @abstractmethod
    def send_signal(self, pid: int, kind: SignalKind) -> None:
        """
        Deliver a termination signal. Returning means the signal was accepted,
        not that the process exited. Raises TerminationError if refused.
        """
        ...

    @abstractmethod
    def pid_exists(self, pid: int) -> bool:
        ...


class PsutilPlatform(ProcessPlatform):
    def __init__(self) -> None:
        # Handles from the last scan. psutil.Process remembers the create time,
        # so a recycled PID is never mistaken for the process we saw.
        self._handles: Dict[int, psutil.Process] = {}

    def processes(self) -> Iterator[ProcessRecord]:
        handles: Dict[int, psutil.Process] = {}
        for proc in psutil.process_iter(attrs=["name", "exe"]):
            try:
                record = self._read(proc)
            except ScanError as e:
                log.debug("Skipping process: %s", e)
                continue
            handles[record.pid] = proc
            yield record
        self._handles = handles

    @staticmethod
    def _read(proc: psutil.Process) -> ProcessRecord:
        try:
            info = proc.info
            exe = info.get("exe")
            name = info.get("name")
            if exe is None:
                exe = proc.exe()
        except psutil.ZombieProcess:
            raise ScanError(proc.pid, "zombie")
        except psutil.NoSuchProcess:
            raise ScanError(proc.pid, "exited during scan")
        except psutil.AccessDenied:
            raise ScanError(proc.pid, "access denied")
        if not exe:
            raise ScanError(proc.pid, "no executable path")
        return ProcessRecord(pid=proc.pid, executable_path=str(exe), display_name=str(name or exe))

    def _handle(self, pid: int) -> psutil.Process:
        proc = self._handles.get(pid)
        if proc is None:
            proc = psutil.Process(pid)
            self._handles[pid] = proc
        return proc

    def send_signal(self, pid: int, kind: SignalKind) -> None:
        try:
            proc = self._handle(pid)
            if not proc.is_running():
                return
            if kind is SignalKind.GRACEFUL:
                proc.terminate()
            else:
                proc.kill()
        except psutil.NoSuchProcess:
            # already gone, the caller re-verifies anyway
            return
        except psutil.AccessDenied:
            raise TerminationError(pid, f"{kind.value} signal refused (access denied)")

    def pid_exists(self, pid: int) -> bool:
        proc = self._handles.get(pid)
        if proc is None:
            try:
                return psutil.Process(pid).status() != psutil.STATUS_ZOMBIE
            except psutil.NoSuchProcess:
                return False
            except psutil.AccessDenied:
                return True
        try:
            alive = proc.is_running() and proc.status() != psutil.STATUS_ZOMBIE
        except psutil.NoSuchProcess:
            alive = False
        except psutil.AccessDenied:
            alive = True
        if not alive:
            self._handles.pop(pid, None)
        return alive
